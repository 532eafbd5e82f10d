"""Ledger aggregation and reporting.

All reporting views fold over the same filtered transaction list built by
``filter_transactions``. Solvency is always computed as of now over every
verified transaction, whatever date range the rest of the report uses.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from feeledger.database.base import Database
from feeledger.domain.balance import (
    ZERO,
    compute_balance,
    expected_due,
    pending_balance,
    total_paid,
)
from feeledger.domain.currency import round_money
from feeledger.domain.entities import (
    LedgerReport,
    MethodTotal,
    Payer,
    PaymentMethod,
    PaymentStatus,
    PaymentTransaction,
    PortfolioStats,
    PriceCatalog,
    SolvencyEntry,
)


@dataclass(frozen=True)
class LedgerQuery:
    """Filter for ledger views.

    Dates are inclusive and apply to the paid date. ``ascending`` defaults to
    oldest-first for a pending-only query and newest-first otherwise.
    """

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    payer_id: Optional[str] = None
    statuses: frozenset[PaymentStatus] = field(
        default_factory=lambda: frozenset({PaymentStatus.VERIFIED})
    )
    search: Optional[str] = None
    ascending: Optional[bool] = None

    def sort_ascending(self) -> bool:
        if self.ascending is not None:
            return self.ascending
        return self.statuses == frozenset({PaymentStatus.PENDING_VERIFICATION})

    def matches(self, txn: PaymentTransaction) -> bool:
        if self.start_date is not None and txn.paid_date < self.start_date:
            return False
        if self.end_date is not None and txn.paid_date > self.end_date:
            return False
        if self.payer_id is not None and txn.payer_id != self.payer_id:
            return False
        if self.statuses and txn.status not in self.statuses:
            return False
        if self.search:
            needle = self.search.strip().lower()
            haystack = (txn.reference, txn.payer_id, txn.payer_name)
            if not any(needle in value.lower() for value in haystack):
                return False
        return True


def filter_transactions(
    transactions: Iterable[PaymentTransaction], query: LedgerQuery
) -> list[PaymentTransaction]:
    """Filter and sort transactions; each transaction ID appears once."""
    unique: dict[str, PaymentTransaction] = {}
    for txn in transactions:
        if txn.id not in unique and query.matches(txn):
            unique[txn.id] = txn

    return sorted(
        unique.values(),
        key=lambda txn: (txn.created_at, txn.id),
        reverse=not query.sort_ascending(),
    )


def sum_usd(transactions: Iterable[PaymentTransaction]) -> Decimal:
    return round_money(sum((txn.amount_usd for txn in transactions), ZERO))


def sum_local(transactions: Iterable[PaymentTransaction]) -> Decimal:
    """Sum of local-currency amounts; transactions without one count as zero."""
    return round_money(
        sum((txn.amount_local or ZERO for txn in transactions), ZERO)
    )


def method_breakdown(transactions: Iterable[PaymentTransaction]) -> tuple[MethodTotal, ...]:
    """Count and amounts per payment method, in method declaration order."""
    groups: dict[PaymentMethod, list[PaymentTransaction]] = defaultdict(list)
    for txn in transactions:
        groups[txn.method].append(txn)

    return tuple(
        MethodTotal(
            method=method,
            count=len(groups[method]),
            amount_usd=sum_usd(groups[method]),
            amount_local=sum_local(groups[method]),
        )
        for method in PaymentMethod
        if method in groups
    )


def solvency_entry(
    payer: Payer, catalog: PriceCatalog, transactions: Sequence[PaymentTransaction]
) -> SolvencyEntry:
    balance = compute_balance(payer, catalog, transactions)
    pending = pending_balance(balance)
    return SolvencyEntry(
        payer_id=payer.id,
        payer_name=payer.full_name,
        account_code=payer.account_code,
        student_count=len(payer.students),
        expected_due=expected_due(payer, catalog),
        total_paid=total_paid(payer.id, transactions),
        balance=balance,
        pending_balance=pending,
        is_delinquent=pending > 0,
    )


def solvency_rollup(
    payers: Iterable[Payer],
    catalog: PriceCatalog,
    transactions: Iterable[PaymentTransaction],
) -> tuple[SolvencyEntry, ...]:
    """Classify every payer as delinquent or current.

    Credit (negative balance) is not delinquency. Entries come back with the
    largest outstanding debt first.
    """
    transactions = list(transactions)
    entries = [solvency_entry(payer, catalog, transactions) for payer in payers]
    return tuple(sorted(entries, key=lambda e: (-e.pending_balance, e.payer_id)))


def portfolio_stats(
    payers: Sequence[Payer],
    catalog: PriceCatalog,
    transactions: Sequence[PaymentTransaction],
) -> PortfolioStats:
    """Headline figures across all payers and transactions."""
    solvency = solvency_rollup(payers, catalog, transactions)
    verified = [txn for txn in transactions if txn.status == PaymentStatus.VERIFIED]
    return PortfolioStats(
        payer_count=len(payers),
        student_count=sum(len(payer.students) for payer in payers),
        total_collected_usd=sum_usd(verified),
        pending_verification_count=sum(
            1 for txn in transactions if txn.status == PaymentStatus.PENDING_VERIFICATION
        ),
        delinquent_count=sum(1 for entry in solvency if entry.is_delinquent),
        total_pending_balance=round_money(
            sum((entry.pending_balance for entry in solvency), ZERO)
        ),
    )


def build_ledger_report(
    payers: Sequence[Payer],
    catalog: PriceCatalog,
    transactions: Sequence[PaymentTransaction],
    query: LedgerQuery,
) -> LedgerReport:
    """Fold the ledger for a query into a report."""
    filtered = filter_transactions(transactions, query)
    solvency_payers = [
        payer for payer in payers if query.payer_id is None or payer.id == query.payer_id
    ]
    return LedgerReport(
        start_date=query.start_date,
        end_date=query.end_date,
        payer_id=query.payer_id,
        statuses=tuple(s for s in PaymentStatus if s in query.statuses),
        transactions=tuple(filtered),
        total_usd=sum_usd(filtered),
        total_local=sum_local(filtered),
        method_totals=method_breakdown(filtered),
        solvency=solvency_rollup(solvency_payers, catalog, transactions),
    )


class LedgerService:
    """Service building ledger views from freshly read storage data."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def _load(self) -> tuple[list[Payer], PriceCatalog, list[PaymentTransaction]]:
        payers = self.db.get_payers()
        catalog = PriceCatalog.from_entries(self.db.get_price_catalog())
        transactions = self.db.get_transactions()
        return payers, catalog, transactions

    def ledger_report(self, query: Optional[LedgerQuery] = None) -> LedgerReport:
        """Build a ledger report (verified transactions by default)."""
        payers, catalog, transactions = self._load()
        return build_ledger_report(payers, catalog, transactions, query or LedgerQuery())

    def solvency_report(self, delinquent_only: bool = False) -> tuple[SolvencyEntry, ...]:
        """Classify every payer as delinquent or current, as of now."""
        payers, catalog, transactions = self._load()
        entries = solvency_rollup(payers, catalog, transactions)
        if delinquent_only:
            return tuple(entry for entry in entries if entry.is_delinquent)
        return entries

    def dashboard(self) -> PortfolioStats:
        """Headline figures for the school."""
        payers, catalog, transactions = self._load()
        return portfolio_stats(payers, catalog, transactions)
