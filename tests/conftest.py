"""Shared pytest fixtures for feeledger tests."""

import os
import tempfile
from datetime import date, datetime, timedelta, UTC
from decimal import Decimal

import pytest

from feeledger.database.factories import create_sqlite_database
from feeledger.domain.balance import BalanceService
from feeledger.domain.enrollment import EnrollmentService
from feeledger.domain.entities import (
    Payer,
    PaymentMethod,
    PaymentStatus,
    PaymentTransaction,
    Student,
)
from feeledger.domain.ledger import LedgerService
from feeledger.domain.payment import PaymentService
from feeledger.domain.pricing import PricingService
from feeledger.domain.verification import VerificationService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def enrollment_service(temp_db):
    """Create an EnrollmentService with a temporary database."""
    return EnrollmentService(temp_db, school_year="2025-26")


@pytest.fixture
def pricing_service(temp_db):
    """Create a PricingService with a temporary database."""
    return PricingService(temp_db)


@pytest.fixture
def payment_service(temp_db, pricing_service):
    """Create a PaymentService with a temporary database."""
    return PaymentService(temp_db, pricing_service)


@pytest.fixture
def verification_service(temp_db):
    """Create a VerificationService with a temporary database."""
    return VerificationService(temp_db)


@pytest.fixture
def balance_service(temp_db):
    """Create a BalanceService with a temporary database."""
    return BalanceService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def sample_payer(enrollment_service):
    """Enroll a payer with one Primaria student (default fee 110 USD)."""
    return enrollment_service.enroll_payer(
        national_id="V12345678",
        first_name="Ana",
        last_name="Pérez",
        phone="0414-555-0000",
        students=[{"first_name": "Luis", "last_name": "Pérez", "level": "Primaria 1er Grado"}],
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


def make_student(level="Primaria 1er Grado", fee="110", index=1, payer_id="V1"):
    """Build an in-memory student."""
    return Student(
        id=f"{payer_id}-{index}",
        first_name=f"Student{index}",
        last_name="Test",
        level=level,
        section="A",
        monthly_fee=Decimal(fee),
    )


def make_payer(national_id="V1", students=None):
    """Build an in-memory payer."""
    if students is None:
        students = (make_student(payer_id=national_id),)
    return Payer(
        national_id=national_id,
        first_name="Test",
        last_name=national_id,
        phone="0000",
        email="",
        address="",
        account_code=f"mat-2025-26-{national_id}",
        students=tuple(students),
    )


_BASE_TIME = datetime(2025, 9, 1, 8, 0, tzinfo=UTC)


def make_transaction(
    txn_id,
    payer_id="V1",
    amount="50",
    status=PaymentStatus.VERIFIED,
    method=PaymentMethod.CASH_USD,
    paid_date=date(2025, 9, 10),
    minutes=0,
    reference=None,
    amount_local=None,
    rate_applied=None,
):
    """Build an in-memory transaction; ``minutes`` orders creation time."""
    return PaymentTransaction(
        id=txn_id,
        created_at=_BASE_TIME + timedelta(minutes=minutes),
        registered_date=paid_date,
        paid_date=paid_date,
        payer_id=payer_id,
        method=method,
        reference=reference or f"REF-{txn_id}",
        amount_usd=Decimal(amount),
        status=status,
        amount_local=None if amount_local is None else Decimal(amount_local),
        rate_applied=None if rate_applied is None else Decimal(rate_applied),
        payer_name=f"Test {payer_id}",
    )
