"""Compiled-in billing defaults."""

from decimal import Decimal

from feeledger.domain.entities import EducationLevel


DEFAULT_SCHOOL_YEAR = "2025-26"

# Used when the configured exchange rate cannot be read.
DEFAULT_EXCHANGE_RATE = Decimal("60")

# Legacy monthly fees in USD, consulted when a level is missing from the catalog.
DEFAULT_LEVEL_FEES: dict[str, Decimal] = {
    EducationLevel.MATERNAL.value: Decimal("120"),
    EducationLevel.PRESCHOOL_1.value: Decimal("100"),
    EducationLevel.PRESCHOOL_2.value: Decimal("100"),
    EducationLevel.PRESCHOOL_3.value: Decimal("100"),
    EducationLevel.PRIMARY_1.value: Decimal("110"),
    EducationLevel.PRIMARY_2.value: Decimal("110"),
    EducationLevel.PRIMARY_3.value: Decimal("110"),
    EducationLevel.PRIMARY_4.value: Decimal("110"),
    EducationLevel.PRIMARY_5.value: Decimal("110"),
    EducationLevel.PRIMARY_6.value: Decimal("110"),
    EducationLevel.SECONDARY_1.value: Decimal("130"),
    EducationLevel.SECONDARY_2.value: Decimal("130"),
    EducationLevel.SECONDARY_3.value: Decimal("130"),
    EducationLevel.SECONDARY_4.value: Decimal("140"),
    EducationLevel.SECONDARY_5.value: Decimal("150"),
}
