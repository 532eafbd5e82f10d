"""Tests for the Database interface returning domain models."""

from datetime import date, datetime, UTC
from decimal import Decimal

import pytest
from sqlalchemy import text

from conftest import make_payer, make_student, make_transaction
from feeledger.domain import entities
from feeledger.domain.errors import ConflictError, ConnectivityError, NotFoundError


class TestDatabaseInterface:
    """Tests to verify the Database interface returns domain models."""

    def test_empty_database(self, temp_db):
        """A fresh database holds nothing."""
        assert temp_db.get_payers() == []
        assert temp_db.get_transactions() == []
        assert temp_db.get_price_catalog() == []
        assert temp_db.get_exchange_rate() is None

    def test_save_and_get_payer(self, temp_db):
        """Payers round-trip with their students in order."""
        payer = make_payer(
            "V1", students=[make_student(index=1), make_student(index=2, level="Maternal", fee="120")]
        )
        temp_db.save_payer(payer)

        stored = temp_db.get_payer_by_national_id("V1")
        assert isinstance(stored, entities.Payer)
        assert all(isinstance(s, entities.Student) for s in stored.students)
        assert [s.id for s in stored.students] == ["V1-1", "V1-2"]
        assert stored.students[1].monthly_fee == Decimal("120")
        assert temp_db.get_payer_by_national_id("V2") is None

    def test_save_payer_replaces_students(self, temp_db):
        """Saving a payer again upserts it and replaces its student list."""
        temp_db.save_payer(make_payer("V1", students=[make_student(index=1), make_student(index=2)]))

        updated = make_payer("V1", students=[make_student(index=2, level="Maternal")])
        temp_db.save_payer(updated)

        stored = temp_db.get_payer_by_national_id("V1")
        assert [s.id for s in stored.students] == ["V1-2"]
        assert stored.students[0].level == "Maternal"
        assert len(temp_db.get_payers()) == 1

    def test_price_catalog_and_exchange_rate(self, temp_db):
        """Catalog rows and the single exchange rate are stored."""
        temp_db.save_level_price("Maternal", Decimal("125"))
        temp_db.save_level_price("Maternal", Decimal("126.50"))
        (entry,) = temp_db.get_price_catalog()
        assert entry == entities.PriceCatalogEntry(level="Maternal", price_usd=Decimal("126.50"))

        temp_db.save_exchange_rate(
            entities.ExchangeRate(rate=Decimal("36.5"), effective_at=datetime(2025, 9, 1, tzinfo=UTC))
        )
        rate = temp_db.get_exchange_rate()
        assert isinstance(rate, entities.ExchangeRate)
        assert rate.rate == Decimal("36.5")

    def test_save_and_get_transaction(self, temp_db):
        """Transactions round-trip as domain entities."""
        txn = make_transaction(
            "t1",
            amount="10.50",
            method=entities.PaymentMethod.MOBILE_PAYMENT,
            status=entities.PaymentStatus.PENDING_VERIFICATION,
            amount_local="630",
            rate_applied="60",
        )
        temp_db.save_transaction(txn)

        stored = temp_db.get_transaction("t1")
        assert isinstance(stored, entities.PaymentTransaction)
        assert stored.method == entities.PaymentMethod.MOBILE_PAYMENT
        assert stored.status == entities.PaymentStatus.PENDING_VERIFICATION
        assert stored.amount_usd == Decimal("10.50")
        assert stored.amount_local == Decimal("630")
        assert stored.paid_date == date(2025, 9, 10)
        assert temp_db.get_transaction("missing") is None

    def test_find_transactions_by_reference(self, temp_db):
        """Reference lookups are scoped to the payer."""
        temp_db.save_transaction(make_transaction("t1", reference="R", minutes=1))
        temp_db.save_transaction(make_transaction("t2", reference="R", minutes=2))
        temp_db.save_transaction(make_transaction("t3", reference="R", payer_id="V2"))

        found = temp_db.find_transactions_by_reference("R", "V1")
        assert [t.id for t in found] == ["t1", "t2"]

    def test_update_transaction_status_by_id(self, temp_db):
        """Status updates by ID are persisted."""
        temp_db.save_transaction(make_transaction("t1", status=entities.PaymentStatus.PENDING_VERIFICATION))
        temp_db.update_transaction_status("t1", None, None, entities.PaymentStatus.REJECTED)
        assert temp_db.get_transaction("t1").status == entities.PaymentStatus.REJECTED

    def test_update_transaction_status_by_reference(self, temp_db):
        """Without an ID the reference and payer locate the row."""
        temp_db.save_transaction(
            make_transaction("t1", reference="PM-9", status=entities.PaymentStatus.PENDING_VERIFICATION)
        )
        temp_db.update_transaction_status(None, "PM-9", "V1", entities.PaymentStatus.VERIFIED)
        assert temp_db.get_transaction("t1").status == entities.PaymentStatus.VERIFIED

    def test_update_transaction_status_not_found(self, temp_db):
        """Updating a missing transaction raises NotFoundError."""
        with pytest.raises(NotFoundError):
            temp_db.update_transaction_status("nope", None, None, entities.PaymentStatus.VERIFIED)
        with pytest.raises(NotFoundError):
            temp_db.update_transaction_status(None, "R", "V1", entities.PaymentStatus.VERIFIED)

    def test_update_transaction_status_ambiguous_reference(self, temp_db):
        """A reference reused by the payer is refused and neither row changes."""
        for txn_id, minutes in (("t1", 1), ("t2", 2)):
            temp_db.save_transaction(
                make_transaction(
                    txn_id,
                    reference="R",
                    minutes=minutes,
                    status=entities.PaymentStatus.PENDING_VERIFICATION,
                )
            )

        with pytest.raises(ConflictError, match="matches 2 transactions"):
            temp_db.update_transaction_status(None, "R", "V1", entities.PaymentStatus.VERIFIED)

        assert temp_db.get_transaction("t1").status == entities.PaymentStatus.PENDING_VERIFICATION
        assert temp_db.get_transaction("t2").status == entities.PaymentStatus.PENDING_VERIFICATION

    def test_malformed_rows_raise_connectivity_error(self, temp_db):
        """Rows that cannot be mapped surface as ConnectivityError."""
        temp_db.save_transaction(make_transaction("t1"))
        session = temp_db.session_factory()
        session.execute(text("UPDATE payment_transactions SET method = 'Barter'"))
        session.commit()
        session.close()

        with pytest.raises(ConnectivityError):
            temp_db.get_transactions()

    def test_reads_are_fresh(self, temp_db):
        """Writes made through another session are visible on the next read."""
        temp_db.save_transaction(make_transaction("t1", status=entities.PaymentStatus.PENDING_VERIFICATION))
        assert temp_db.get_transaction("t1").status == entities.PaymentStatus.PENDING_VERIFICATION

        session = temp_db.session_factory()
        session.execute(text("UPDATE payment_transactions SET status = 'REJECTED'"))
        session.commit()
        session.close()

        assert temp_db.get_transaction("t1").status == entities.PaymentStatus.REJECTED
