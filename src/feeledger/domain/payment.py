"""Payment recording domain service."""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Any, Optional

from feeledger.database.base import Database
from feeledger.domain.currency import find_discrepancy, round_money, to_decimal
from feeledger.domain.entities import (
    ALL_STUDENTS,
    PaymentMethod,
    PaymentTransaction,
    PaymentType,
)
from feeledger.domain.errors import (
    ConsistencyWarning,
    NotFoundError,
    ValidationError,
    payer_not_found,
)
from feeledger.domain.pricing import PricingService
from feeledger.domain.verification import initial_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordedPayment:
    """A saved transaction together with any non-fatal money discrepancies."""

    transaction: PaymentTransaction
    warnings: tuple[ConsistencyWarning, ...] = ()


def generate_transaction_id() -> str:
    """Generate a globally unique transaction ID."""
    return str(uuid.uuid4())


class PaymentService:
    """Service for recording payment transactions."""

    def __init__(self, db: Database, pricing: Optional[PricingService] = None):
        """Initialize payment service.

        Args:
            db: Database instance
            pricing: Pricing service used to read the current exchange rate
        """
        self.db = db
        self.pricing = pricing or PricingService(db)

    def record_payment(
        self,
        payer_id: str,
        method: PaymentMethod,
        amount_usd: Any,
        reference: str,
        amount_local: Any = None,
        student_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        notes: str = "",
        paid_date: Optional[date] = None,
        payment_type: PaymentType = PaymentType.PARTIAL,
    ) -> RecordedPayment:
        """Record a payment received from a payer.

        Every check runs before anything is written. The exchange rate in
        effect right now is captured on local-currency payments so later rate
        changes don't alter them.

        Args:
            payer_id: Payer national ID
            method: Payment method
            amount_usd: Amount in USD (must be positive)
            reference: Bank reference or receipt number
            amount_local: Optional amount in local currency
            student_id: Optional student ID, or "ALL"
            month: Optional billed month (defaults to the paid date's month)
            year: Optional billed year (defaults to the paid date's year)
            notes: Optional notes
            paid_date: Date the money was paid (defaults to today)
            payment_type: Partial or full settlement

        Returns:
            RecordedPayment with the saved transaction and any warnings

        Raises:
            ValidationError: If amount, reference, student or month is invalid
            NotFoundError: If payer doesn't exist
        """
        usd = to_decimal(amount_usd)
        if usd is None or usd <= 0:
            raise ValidationError(f"Amount must be a number greater than 0, got {amount_usd!r}")
        usd = round_money(usd)
        if usd <= 0:
            raise ValidationError(f"Amount must be at least 0.01, got {amount_usd!r}")

        reference = (reference or "").strip()
        if not reference:
            raise ValidationError("Payment reference is required")

        if month is not None and not 1 <= month <= 12:
            raise ValidationError(f"Month must be between 1 and 12, got {month}")

        payer = self.db.get_payer_by_national_id(payer_id)
        if payer is None:
            raise NotFoundError(payer_not_found(payer_id))

        if student_id and student_id != ALL_STUDENTS:
            if student_id not in {s.id for s in payer.students}:
                raise ValidationError(
                    f"Student '{student_id}' is not enrolled under payer '{payer_id}'"
                )

        local: Optional[Decimal] = None
        rate_applied: Optional[Decimal] = None
        if method.uses_local_currency:
            rate_applied = self.pricing.get_exchange_rate().rate
            local = to_decimal(amount_local)
            if local is not None:
                local = round_money(local)

        paid_on = paid_date or date.today()
        transaction = PaymentTransaction(
            id=generate_transaction_id(),
            created_at=datetime.now(UTC),
            registered_date=date.today(),
            paid_date=paid_on,
            payer_id=payer.national_id,
            student_id=student_id,
            month=month if month is not None else paid_on.month,
            year=year if year is not None else paid_on.year,
            method=method,
            reference=reference,
            amount_usd=usd,
            amount_local=local,
            rate_applied=rate_applied,
            notes=notes or "",
            status=initial_status(method),
            payer_name=payer.full_name,
            account_code=payer.account_code,
            payment_type=payment_type,
        )

        warnings: list[ConsistencyWarning] = []
        discrepancy = find_discrepancy(method, usd, amount_local, rate_applied)
        if discrepancy is not None:
            logger.warning("Payment %s for payer %s: %s", transaction.id, payer_id, discrepancy)
            warnings.append(discrepancy)

        self.db.save_transaction(transaction)
        logger.info(
            "Recorded %s payment %s for payer %s: %s USD (%s)",
            method.value,
            transaction.id,
            payer_id,
            usd,
            transaction.status.value,
        )
        return RecordedPayment(transaction=transaction, warnings=tuple(warnings))

    def get_transaction(self, transaction_id: str) -> Optional[PaymentTransaction]:
        """Get transaction by ID, or None if not found."""
        return self.db.get_transaction(transaction_id)

    def list_transactions(self, payer_id: Optional[str] = None) -> list[PaymentTransaction]:
        """List transactions, newest first, optionally for one payer."""
        transactions = [
            txn
            for txn in self.db.get_transactions()
            if payer_id is None or txn.payer_id == payer_id
        ]
        return sorted(transactions, key=lambda txn: txn.created_at, reverse=True)
