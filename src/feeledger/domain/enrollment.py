"""Payer enrollment domain service."""

import logging
from dataclasses import replace
from typing import Optional

from feeledger.database.base import Database
from feeledger.domain.balance import resolve_fee
from feeledger.domain.defaults import DEFAULT_SCHOOL_YEAR
from feeledger.domain.entities import Payer, PriceCatalog, Student
from feeledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_payer,
    payer_not_found,
)

logger = logging.getLogger(__name__)


def generate_account_code(national_id: str, school_year: str = DEFAULT_SCHOOL_YEAR) -> str:
    """Return the account code for a payer, e.g. ``mat-2025-26-V12345678``."""
    return f"mat-{school_year}-{national_id}"


class EnrollmentService:
    """Service for enrolling payers and their students."""

    def __init__(self, db: Database, school_year: str = DEFAULT_SCHOOL_YEAR):
        """Initialize enrollment service.

        Args:
            db: Database instance
            school_year: School year used in generated account codes
        """
        self.db = db
        self.school_year = school_year

    def enroll_payer(
        self,
        national_id: str,
        first_name: str,
        last_name: str,
        phone: str,
        students: list[dict],
        email: str = "",
        address: str = "",
    ) -> Payer:
        """Enroll a new payer with their students.

        Args:
            national_id: Payer national ID (unique key)
            first_name: Payer first name
            last_name: Payer last name
            phone: Contact phone
            students: Dicts with first_name, last_name, level and optional section
            email: Optional email
            address: Optional address

        Returns:
            The saved payer

        Raises:
            ValidationError: If required fields are missing or no student is given
            ConflictError: If the national ID is already enrolled
        """
        national_id = (national_id or "").strip()
        if not national_id or not first_name or not phone:
            raise ValidationError("National ID, first name and phone are required")
        if not students:
            raise ValidationError("At least one student is required")

        if self.db.get_payer_by_national_id(national_id) is not None:
            raise ConflictError(duplicate_payer(national_id))

        catalog = PriceCatalog.from_entries(self.db.get_price_catalog())
        enrolled = tuple(
            self._build_student(national_id, index, data, catalog)
            for index, data in enumerate(students, start=1)
        )

        payer = Payer(
            national_id=national_id,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            email=email,
            address=address,
            account_code=generate_account_code(national_id, self.school_year),
            students=enrolled,
        )
        self.db.save_payer(payer)
        logger.info(
            "Enrolled payer %s (%s) with %d student(s)",
            national_id,
            payer.account_code,
            len(enrolled),
        )
        return payer

    def add_student(
        self,
        national_id: str,
        first_name: str,
        last_name: str,
        level: str,
        section: str = "A",
    ) -> Payer:
        """Add a student to an enrolled payer.

        The payer is re-saved as a whole. The account code never changes.

        Raises:
            NotFoundError: If payer doesn't exist
            ValidationError: If student fields are missing
        """
        payer = self.require_payer(national_id)
        catalog = PriceCatalog.from_entries(self.db.get_price_catalog())
        student = self._build_student(
            payer.national_id,
            len(payer.students) + 1,
            {"first_name": first_name, "last_name": last_name, "level": level, "section": section},
            catalog,
        )
        updated = replace(payer, students=payer.students + (student,))
        self.db.save_payer(updated)
        logger.info("Added student %s to payer %s", student.id, national_id)
        return updated

    def get_payer(self, national_id: str) -> Optional[Payer]:
        """Get payer by national ID, or None if not found."""
        return self.db.get_payer_by_national_id(national_id)

    def require_payer(self, national_id: str) -> Payer:
        """Get payer by national ID.

        Raises:
            NotFoundError: If payer doesn't exist
        """
        payer = self.db.get_payer_by_national_id(national_id)
        if payer is None:
            raise NotFoundError(payer_not_found(national_id))
        return payer

    def list_payers(self) -> list[Payer]:
        """List all payers."""
        return self.db.get_payers()

    def _build_student(
        self, national_id: str, index: int, data: dict, catalog: PriceCatalog
    ) -> Student:
        first_name = (data.get("first_name") or "").strip()
        last_name = (data.get("last_name") or "").strip()
        level = (data.get("level") or "").strip()
        if not first_name or not last_name or not level:
            raise ValidationError("Student first name, last name and level are required")

        return Student(
            id=f"{national_id}-{index}",
            first_name=first_name,
            last_name=last_name,
            level=level,
            section=data.get("section") or "A",
            monthly_fee=resolve_fee(level, catalog),
        )
