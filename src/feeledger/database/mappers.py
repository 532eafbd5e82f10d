"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the storage schema can change
without touching the balance and ledger code.
"""

from decimal import Decimal
from typing import Optional

from feeledger.domain import entities as domain
from feeledger.database.models import (
    ExchangeRateSetting as ORMExchangeRate,
    LevelPrice as ORMLevelPrice,
    Payer as ORMPayer,
    PaymentTransaction as ORMPaymentTransaction,
    Student as ORMStudent,
)


def _decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


def level_price_to_domain(orm_price: ORMLevelPrice) -> domain.PriceCatalogEntry:
    """Convert SQLAlchemy LevelPrice model to domain PriceCatalogEntry."""
    return domain.PriceCatalogEntry(
        level=orm_price.level,
        price_usd=_decimal(orm_price.price_usd),
    )


def exchange_rate_to_domain(orm_rate: ORMExchangeRate) -> domain.ExchangeRate:
    """Convert SQLAlchemy ExchangeRateSetting model to domain ExchangeRate."""
    return domain.ExchangeRate(
        rate=_decimal(orm_rate.rate),
        effective_at=orm_rate.effective_at,
    )


def student_to_domain(orm_student: ORMStudent) -> domain.Student:
    """Convert SQLAlchemy Student model to domain Student entity."""
    return domain.Student(
        id=orm_student.id,
        first_name=orm_student.first_name,
        last_name=orm_student.last_name,
        level=orm_student.level,
        section=orm_student.section,
        monthly_fee=_decimal(orm_student.monthly_fee),
    )


def payer_to_domain(orm_payer: ORMPayer) -> domain.Payer:
    """Convert SQLAlchemy Payer model to domain Payer entity."""
    return domain.Payer(
        national_id=orm_payer.national_id,
        first_name=orm_payer.first_name,
        last_name=orm_payer.last_name or "",
        phone=orm_payer.phone or "",
        email=orm_payer.email or "",
        address=orm_payer.address or "",
        account_code=orm_payer.account_code,
        students=tuple(student_to_domain(s) for s in orm_payer.students),
    )


def student_to_orm(student: domain.Student, payer_id: str, position: int) -> ORMStudent:
    """Convert domain Student entity to a new SQLAlchemy Student row."""
    return ORMStudent(
        id=student.id,
        payer_id=payer_id,
        position=position,
        first_name=student.first_name,
        last_name=student.last_name,
        level=student.level,
        section=student.section,
        monthly_fee=student.monthly_fee,
    )


def update_student_row(orm_student: ORMStudent, student: domain.Student, position: int) -> None:
    """Copy domain Student fields onto an existing SQLAlchemy Student row."""
    orm_student.position = position
    orm_student.first_name = student.first_name
    orm_student.last_name = student.last_name
    orm_student.level = student.level
    orm_student.section = student.section
    orm_student.monthly_fee = student.monthly_fee


def transaction_to_domain(orm_txn: ORMPaymentTransaction) -> domain.PaymentTransaction:
    """Convert SQLAlchemy PaymentTransaction model to domain entity."""
    return domain.PaymentTransaction(
        id=orm_txn.id,
        created_at=orm_txn.created_at,
        registered_date=orm_txn.registered_date,
        paid_date=orm_txn.paid_date,
        payer_id=orm_txn.payer_id,
        student_id=orm_txn.student_id,
        month=orm_txn.month,
        year=orm_txn.year,
        method=domain.PaymentMethod(orm_txn.method),
        reference=orm_txn.reference,
        amount_usd=_decimal(orm_txn.amount_usd),
        amount_local=_decimal(orm_txn.amount_local),
        rate_applied=_decimal(orm_txn.rate_applied),
        notes=orm_txn.notes or "",
        status=domain.PaymentStatus(orm_txn.status),
        payer_name=orm_txn.payer_name or "",
        account_code=orm_txn.account_code or "",
        payment_type=domain.PaymentType(orm_txn.payment_type or "PARTIAL"),
    )


def transaction_to_orm(txn: domain.PaymentTransaction) -> ORMPaymentTransaction:
    """Convert domain PaymentTransaction entity to a new SQLAlchemy row."""
    return ORMPaymentTransaction(
        id=txn.id,
        created_at=txn.created_at,
        registered_date=txn.registered_date,
        paid_date=txn.paid_date,
        payer_id=txn.payer_id,
        student_id=txn.student_id,
        month=txn.month,
        year=txn.year,
        method=txn.method.value,
        reference=txn.reference,
        amount_usd=txn.amount_usd,
        amount_local=txn.amount_local,
        rate_applied=txn.rate_applied,
        notes=txn.notes,
        status=txn.status.value,
        payer_name=txn.payer_name,
        account_code=txn.account_code,
        payment_type=txn.payment_type.value,
    )
