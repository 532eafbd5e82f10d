"""Dual-currency amounts and the unsaved payment draft.

Conversion only ever happens on a ``PaymentDraft``. Once a transaction is
persisted its ``amount_usd``, ``amount_local`` and ``rate_applied`` are frozen.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional, Any

from feeledger.domain.entities import PaymentMethod
from feeledger.domain.errors import ConsistencyWarning


CENT = Decimal("0.01")
TOLERANCE = Decimal("0.01")
RATE_STEP = Decimal("0.0001")


def to_decimal(value: Any) -> Optional[Decimal]:
    """Coerce a number or numeric string to Decimal, or None if not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not result.is_finite():
        return None
    return result


def round_money(value: Decimal) -> Decimal:
    """Round to cents using half-up rounding."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_rate(value: Decimal) -> Decimal:
    """Round an exchange rate to the 4 decimal places storage keeps."""
    return Decimal(value).quantize(RATE_STEP, rounding=ROUND_HALF_UP)


def usd_to_local(amount_usd: Decimal, rate: Decimal) -> Optional[Decimal]:
    """Convert a USD amount to local currency, or None without a usable rate."""
    if rate is None or rate <= 0:
        return None
    return round_money(amount_usd * rate)


def local_to_usd(amount_local: Decimal, rate: Decimal) -> Optional[Decimal]:
    """Convert a local-currency amount to USD, or None without a usable rate."""
    if rate is None or rate <= 0:
        return None
    return round_money(amount_local / rate)


def find_discrepancy(
    method: PaymentMethod,
    amount_usd: Any,
    amount_local: Any,
    rate_applied: Any,
) -> Optional[ConsistencyWarning]:
    """Check the money fields of a payment against each other.

    Never raises: malformed values come back as a warning.

    Returns:
        ConsistencyWarning describing the problem, or None if consistent
    """
    usd = to_decimal(amount_usd)
    if usd is None:
        return ConsistencyWarning(f"USD amount {amount_usd!r} is not a number")

    if not method.uses_local_currency:
        return None

    local = to_decimal(amount_local)
    rate = to_decimal(rate_applied)
    if amount_local is None or rate_applied is None:
        return ConsistencyWarning(
            f"{method.value} payment is missing its local amount or exchange rate"
        )
    if local is None or rate is None or rate <= 0:
        return ConsistencyWarning(
            f"Local amount {amount_local!r} or rate {rate_applied!r} is not usable"
        )

    expected = round_money(usd * rate)
    if abs(round_money(local) - expected) > TOLERANCE:
        return ConsistencyWarning(
            f"Local amount {local} does not match {usd} USD at rate {rate} "
            f"(expected {expected})"
        )
    return None


@dataclass
class PaymentDraft:
    """Payment form state before it is recorded.

    Editing either amount recomputes the other with the rate the draft was
    opened with. Amounts are rounded independently after every edit, so a
    value can drift by a cent over repeated edits.
    """

    method: PaymentMethod
    rate: Decimal
    amount_usd: Optional[Decimal] = None
    amount_local: Optional[Decimal] = None

    def set_method(self, method: PaymentMethod) -> None:
        """Switch method; amounts entered for the previous method are cleared."""
        self.method = method
        self.amount_usd = None
        self.amount_local = None

    def set_amount_usd(self, value: Any) -> None:
        usd = to_decimal(value)
        if usd is None:
            self.amount_usd = None
            return
        self.amount_usd = round_money(usd)
        if self.method.uses_local_currency:
            self.amount_local = usd_to_local(self.amount_usd, self.rate)

    def set_amount_local(self, value: Any) -> None:
        local = to_decimal(value)
        if local is None:
            self.amount_local = None
            self.amount_usd = None
            return
        self.amount_local = round_money(local)
        self.amount_usd = local_to_usd(self.amount_local, self.rate)

    def fill_total(self, debt: Decimal) -> None:
        """Pre-fill the draft with an outstanding debt (never negative)."""
        self.set_amount_usd(max(Decimal("0"), debt))

    def reconcile(self) -> None:
        """Re-derive the local amount from USD so the two agree within a cent."""
        if self.method.uses_local_currency and self.amount_usd is not None:
            self.amount_local = usd_to_local(self.amount_usd, self.rate)
        elif not self.method.uses_local_currency:
            self.amount_local = None

    @property
    def rate_applied(self) -> Optional[Decimal]:
        return self.rate if self.method.uses_local_currency else None
