"""Tests for database mappers."""

from datetime import datetime, date, UTC
from decimal import Decimal

from feeledger.database.models import (
    ExchangeRateSetting as ORMExchangeRate,
    LevelPrice as ORMLevelPrice,
    Payer as ORMPayer,
    PaymentTransaction as ORMPaymentTransaction,
    Student as ORMStudent,
)
from feeledger.database.mappers import (
    exchange_rate_to_domain,
    level_price_to_domain,
    payer_to_domain,
    student_to_orm,
    transaction_to_domain,
    transaction_to_orm,
    update_student_row,
)
from feeledger.domain.entities import (
    ExchangeRate,
    Payer,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
    PriceCatalogEntry,
    Student,
)


class TestConfigurationMappers:
    """Tests for price and exchange rate mappers."""

    def test_level_price_to_domain(self):
        """Test converting ORM LevelPrice to a catalog entry."""
        entry = level_price_to_domain(ORMLevelPrice(level="Maternal", price_usd=120.0))
        assert isinstance(entry, PriceCatalogEntry)
        assert entry.price_usd == Decimal("120")

    def test_exchange_rate_to_domain(self):
        """Test converting ORM ExchangeRateSetting to domain ExchangeRate."""
        effective = datetime.now(UTC)
        rate = exchange_rate_to_domain(ORMExchangeRate(id=1, rate=Decimal("36.5"), effective_at=effective))
        assert isinstance(rate, ExchangeRate)
        assert rate.rate == Decimal("36.5")
        assert rate.effective_at == effective


class TestPayerMapper:
    """Tests for Payer and Student mappers."""

    def test_payer_to_domain(self):
        """Test converting ORM Payer with students to domain Payer."""
        orm_payer = ORMPayer(
            national_id="V1",
            first_name="Ana",
            last_name="Pérez",
            phone="0414",
            email=None,
            address=None,
            account_code="mat-2025-26-V1",
        )
        orm_payer.students = [
            ORMStudent(
                id="V1-1",
                payer_id="V1",
                position=0,
                first_name="Luis",
                last_name="Pérez",
                level="Maternal",
                section="A",
                monthly_fee=Decimal("120"),
            )
        ]

        payer = payer_to_domain(orm_payer)
        assert isinstance(payer, Payer)
        assert payer.email == ""
        assert payer.address == ""
        assert isinstance(payer.students[0], Student)
        assert payer.students[0].monthly_fee == Decimal("120")

    def test_student_to_orm_and_update(self):
        """Test building and updating ORM Student rows."""
        student = Student(
            id="V1-1", first_name="Luis", last_name="Pérez", level="Maternal", section="A",
            monthly_fee=Decimal("120"),
        )
        row = student_to_orm(student, "V1", 0)
        assert row.payer_id == "V1"
        assert row.position == 0

        moved = Student(
            id="V1-1", first_name="Luis", last_name="Pérez", level="Primaria 1er Grado",
            section="B", monthly_fee=Decimal("110"),
        )
        update_student_row(row, moved, 3)
        assert row.position == 3
        assert row.level == "Primaria 1er Grado"
        assert row.section == "B"


class TestTransactionMapper:
    """Tests for PaymentTransaction mappers."""

    def test_transaction_to_domain(self):
        """Test converting ORM PaymentTransaction to the domain entity."""
        orm_txn = ORMPaymentTransaction(
            id="abc",
            created_at=datetime(2025, 9, 1, 8, 0),
            registered_date=date(2025, 9, 1),
            paid_date=date(2025, 8, 30),
            payer_id="V1",
            student_id="ALL",
            month=8,
            year=2025,
            method="MobilePayment",
            reference="PM-1",
            amount_usd=Decimal("10.00"),
            amount_local=Decimal("600.00"),
            rate_applied=Decimal("60"),
            notes=None,
            status="PENDING_VERIFICATION",
            payer_name="Ana Pérez",
            account_code="mat-2025-26-V1",
            payment_type=None,
        )

        txn = transaction_to_domain(orm_txn)
        assert txn.method == PaymentMethod.MOBILE_PAYMENT
        assert txn.status == PaymentStatus.PENDING_VERIFICATION
        assert txn.payment_type == PaymentType.PARTIAL
        assert txn.notes == ""
        assert txn.amount_local == Decimal("600.00")

    def test_transaction_to_orm_stores_enum_values(self):
        """Test that enums are stored by value."""
        orm_txn = ORMPaymentTransaction(
            id="abc",
            created_at=datetime(2025, 9, 1, 8, 0),
            registered_date=date(2025, 9, 1),
            paid_date=date(2025, 9, 1),
            payer_id="V1",
            method="Zelle",
            reference="ZL-1",
            amount_usd=Decimal("5"),
            status="VERIFIED",
            payment_type="FULL",
        )
        row = transaction_to_orm(transaction_to_domain(orm_txn))
        assert row.method == "Zelle"
        assert row.status == "VERIFIED"
        assert row.payment_type == "FULL"
        assert row.amount_local is None
