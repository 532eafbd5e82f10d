"""SQLAlchemy models for feeledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class LevelPrice(Base):
    """Price catalog row: monthly fee per education level."""

    __tablename__ = "level_prices"

    level = Column(String, primary_key=True)
    price_usd = Column(Numeric(10, 2), nullable=False)


class ExchangeRateSetting(Base):
    """Single-row table holding the global exchange rate."""

    __tablename__ = "exchange_rate"

    id = Column(Integer, primary_key=True)
    rate = Column(Numeric(14, 4), nullable=False)
    effective_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Payer(Base):
    """Payer (billing account) model."""

    __tablename__ = "payers"

    national_id = Column(String, primary_key=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False, default="")
    phone = Column(String, nullable=False, default="")
    email = Column(String, nullable=False, default="")
    address = Column(String, nullable=False, default="")
    account_code = Column(String, nullable=False)

    # Relationships
    students = relationship(
        "Student",
        back_populates="payer",
        cascade="all, delete-orphan",
        order_by="Student.position",
    )


class Student(Base):
    """Student model, owned by a payer."""

    __tablename__ = "students"

    id = Column(String, primary_key=True)
    payer_id = Column(String, ForeignKey("payers.national_id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    level = Column(String, nullable=False)
    section = Column(String, nullable=False, default="A")
    monthly_fee = Column(Numeric(10, 2), nullable=False)

    # Relationships
    payer = relationship("Payer", back_populates="students")


class PaymentTransaction(Base):
    """Payment transaction model."""

    __tablename__ = "payment_transactions"

    id = Column(String, primary_key=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    registered_date = Column(Date, nullable=False)
    paid_date = Column(Date, nullable=False)
    payer_id = Column(String, nullable=False, index=True)
    student_id = Column(String, nullable=True)
    month = Column(Integer, nullable=True)
    year = Column(Integer, nullable=True)
    method = Column(String, nullable=False)
    reference = Column(String, nullable=False)
    amount_usd = Column(Numeric(10, 2), nullable=False)
    amount_local = Column(Numeric(14, 2), nullable=True)
    rate_applied = Column(Numeric(14, 4), nullable=True)
    notes = Column(String, nullable=False, default="")
    status = Column(String, nullable=False)
    payer_name = Column(String, nullable=False, default="")
    account_code = Column(String, nullable=False, default="")
    payment_type = Column(String, nullable=False, default="PARTIAL")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
