"""Domain model entities for feeledger.

These are pure data classes representing billing concepts, independent of
the storage schema. Services and pure computations only ever see these types.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, Mapping


ALL_STUDENTS = "ALL"


class EducationLevel(str, Enum):
    """Education levels offered by the school."""

    MATERNAL = "Maternal"
    PRESCHOOL_1 = "Pre-escolar 1er Nivel"
    PRESCHOOL_2 = "Pre-escolar 2do Nivel"
    PRESCHOOL_3 = "Pre-escolar 3er Nivel"
    PRIMARY_1 = "Primaria 1er Grado"
    PRIMARY_2 = "Primaria 2do Grado"
    PRIMARY_3 = "Primaria 3er Grado"
    PRIMARY_4 = "Primaria 4to Grado"
    PRIMARY_5 = "Primaria 5to Grado"
    PRIMARY_6 = "Primaria 6to Grado"
    SECONDARY_1 = "Secundaria 1er Año"
    SECONDARY_2 = "Secundaria 2do Año"
    SECONDARY_3 = "Secundaria 3er Año"
    SECONDARY_4 = "Secundaria 4to Año"
    SECONDARY_5 = "Secundaria 5to Año"


class PaymentMethod(str, Enum):
    """Accepted payment methods."""

    MOBILE_PAYMENT = "MobilePayment"
    BANK_TRANSFER = "BankTransfer"
    ZELLE = "Zelle"
    CASH_LOCAL = "CashLocal"
    CASH_USD = "CashUSD"
    CASH_EUR = "CashEUR"
    CREDIT_CARD = "CreditCard"
    DEBIT_CARD = "DebitCard"

    @property
    def requires_verification(self) -> bool:
        """Whether an operator must confirm the payment against a bank reference."""
        return self in _VERIFIED_METHODS

    @property
    def uses_local_currency(self) -> bool:
        """Whether the payment is received in local currency."""
        return self in _LOCAL_CURRENCY_METHODS

    @classmethod
    def parse(cls, value: str) -> "PaymentMethod":
        """Parse a method from its value or name, case-insensitively.

        Raises:
            ValueError: If value does not name a payment method
        """
        normalized = value.strip().replace("-", "").replace("_", "").lower()
        for method in cls:
            if normalized in (
                method.value.lower(),
                method.name.replace("_", "").lower(),
            ):
                return method
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown payment method '{value}'. Valid methods: {valid}")


_VERIFIED_METHODS = frozenset(
    {PaymentMethod.MOBILE_PAYMENT, PaymentMethod.BANK_TRANSFER, PaymentMethod.ZELLE}
)

_LOCAL_CURRENCY_METHODS = frozenset(
    {
        PaymentMethod.MOBILE_PAYMENT,
        PaymentMethod.BANK_TRANSFER,
        PaymentMethod.CASH_LOCAL,
        PaymentMethod.DEBIT_CARD,
    }
)


class PaymentStatus(str, Enum):
    """Verification state of a payment transaction."""

    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class PaymentType(str, Enum):
    """Whether a payment settles part of or the whole outstanding debt."""

    PARTIAL = "PARTIAL"
    FULL = "FULL"


@dataclass(frozen=True)
class Student:
    """Enrolled student, owned by a payer.

    ``monthly_fee`` is the price snapshot taken at enrollment time.
    """

    id: str
    first_name: str
    last_name: str
    level: str
    section: str
    monthly_fee: Decimal

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Payer:
    """Billing account (head of family) keyed by national ID."""

    national_id: str
    first_name: str
    last_name: str
    phone: str
    email: str
    address: str
    account_code: str
    students: tuple[Student, ...] = ()

    @property
    def id(self) -> str:
        return self.national_id

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class PriceCatalogEntry:
    """Monthly fee in USD for one education level."""

    level: str
    price_usd: Decimal


@dataclass(frozen=True)
class PriceCatalog:
    """Current monthly fees keyed by level."""

    prices: Mapping[str, Decimal] = field(default_factory=dict)

    @classmethod
    def from_entries(cls, entries) -> "PriceCatalog":
        return cls(prices={entry.level: entry.price_usd for entry in entries})

    def price_for(self, level: str) -> Optional[Decimal]:
        return self.prices.get(level)

    def entries(self) -> tuple[PriceCatalogEntry, ...]:
        return tuple(
            PriceCatalogEntry(level=level, price_usd=price)
            for level, price in sorted(self.prices.items())
        )


@dataclass(frozen=True)
class ExchangeRate:
    """Local currency units per 1 USD, with the time it took effect."""

    rate: Decimal
    effective_at: datetime


@dataclass(frozen=True)
class PaymentTransaction:
    """Money received from a payer.

    Amounts are always stored in USD; ``amount_local`` and ``rate_applied``
    shadow the local-currency figures captured when the payment was recorded.
    """

    id: str
    created_at: datetime
    registered_date: date
    paid_date: date
    payer_id: str
    method: PaymentMethod
    reference: str
    amount_usd: Decimal
    status: PaymentStatus
    student_id: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None
    amount_local: Optional[Decimal] = None
    rate_applied: Optional[Decimal] = None
    notes: str = ""
    payer_name: str = ""
    account_code: str = ""
    payment_type: PaymentType = PaymentType.PARTIAL

    @property
    def is_verified(self) -> bool:
        return self.status == PaymentStatus.VERIFIED


@dataclass(frozen=True)
class MethodTotal:
    """Count and amounts for one payment method within a report."""

    method: PaymentMethod
    count: int
    amount_usd: Decimal
    amount_local: Decimal


@dataclass(frozen=True)
class SolvencyEntry:
    """Solvency classification of a single payer, as of now."""

    payer_id: str
    payer_name: str
    account_code: str
    student_count: int
    expected_due: Decimal
    total_paid: Decimal
    balance: Decimal
    pending_balance: Decimal
    is_delinquent: bool

    @property
    def credit(self) -> Decimal:
        """Overpayment held by the payer (zero when in debt)."""
        return -self.balance if self.balance < 0 else Decimal("0.00")


@dataclass(frozen=True)
class PortfolioStats:
    """Headline figures for the whole school."""

    payer_count: int
    student_count: int
    total_collected_usd: Decimal
    pending_verification_count: int
    delinquent_count: int
    total_pending_balance: Decimal


@dataclass(frozen=True)
class LedgerReport:
    """Result of folding the ledger for one query."""

    start_date: Optional[date]
    end_date: Optional[date]
    payer_id: Optional[str]
    statuses: tuple[PaymentStatus, ...]
    transactions: tuple[PaymentTransaction, ...]
    total_usd: Decimal
    total_local: Decimal
    method_totals: tuple[MethodTotal, ...]
    solvency: tuple[SolvencyEntry, ...]
