"""Balance calculation.

Balance = expected dues - verified payments. Positive means debt, negative
means credit. The pure functions here never clamp; ``pending_balance`` is the
clamp used by reporting and display code.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from feeledger.database.base import Database
from feeledger.domain.currency import round_money
from feeledger.domain.defaults import DEFAULT_LEVEL_FEES
from feeledger.domain.entities import (
    Payer,
    PaymentStatus,
    PaymentTransaction,
    PriceCatalog,
)
from feeledger.domain.errors import NotFoundError, payer_not_found

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def resolve_fee(
    level: str, catalog: PriceCatalog, fallback: Optional[Decimal] = None
) -> Decimal:
    """Resolve the current monthly fee for a level.

    Looks up the catalog first, then the compiled-in defaults, then the
    given fallback (the student's enrollment snapshot). Unknown levels
    contribute nothing.
    """
    price = catalog.price_for(level)
    if price is not None:
        return price
    price = DEFAULT_LEVEL_FEES.get(level)
    if price is not None:
        return price
    if fallback is not None and fallback > 0:
        return fallback
    return ZERO


def expected_due(payer: Payer, catalog: PriceCatalog) -> Decimal:
    """Sum of the current fees of every student of the payer."""
    total = sum(
        (resolve_fee(s.level, catalog, s.monthly_fee) for s in payer.students),
        ZERO,
    )
    return round_money(total)


def total_paid(payer_id: str, transactions: Iterable[PaymentTransaction]) -> Decimal:
    """Sum of verified payments made by the payer."""
    total = sum(
        (
            txn.amount_usd
            for txn in transactions
            if txn.payer_id == payer_id and txn.status == PaymentStatus.VERIFIED
        ),
        ZERO,
    )
    return round_money(total)


def compute_balance(
    payer: Payer,
    catalog: PriceCatalog,
    transactions: Iterable[PaymentTransaction],
) -> Decimal:
    """Compute the signed balance of a payer.

    Transactions of other payers and transactions that are not VERIFIED are
    ignored, so the full transaction list can be passed in.
    """
    return round_money(expected_due(payer, catalog) - total_paid(payer.id, transactions))


def pending_balance(balance: Decimal) -> Decimal:
    """Debt-only view of a balance: credit shows as zero."""
    return balance if balance > 0 else ZERO


class BalanceService:
    """Service computing balances from freshly read storage data."""

    def __init__(self, db: Database):
        """Initialize balance service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_balance(self, national_id: str) -> Decimal:
        """Get the signed balance of a payer.

        Args:
            national_id: Payer national ID

        Returns:
            Signed balance (positive = debt, negative = credit)

        Raises:
            NotFoundError: If payer doesn't exist
        """
        payer = self.db.get_payer_by_national_id(national_id)
        if payer is None:
            raise NotFoundError(payer_not_found(national_id))

        catalog = PriceCatalog.from_entries(self.db.get_price_catalog())
        balance = compute_balance(payer, catalog, self.db.get_transactions())
        logger.debug("Balance for payer %s: %s", national_id, balance)
        return balance

    def get_pending_balance(self, national_id: str) -> Decimal:
        """Get the outstanding debt of a payer (zero when in credit)."""
        return pending_balance(self.get_balance(national_id))
