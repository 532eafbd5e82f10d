"""Tests for currency conversion and payment drafts."""

from decimal import Decimal

import pytest

from feeledger.domain.currency import (
    PaymentDraft,
    find_discrepancy,
    local_to_usd,
    round_money,
    to_decimal,
    usd_to_local,
)
from feeledger.domain.entities import PaymentMethod
from feeledger.domain.errors import ConsistencyWarning


RATE = Decimal("60")


def test_round_money_half_up():
    """Cents are rounded half up."""
    assert round_money(Decimal("1.005")) == Decimal("1.01")
    assert round_money(Decimal("1.004")) == Decimal("1.00")
    assert round_money(Decimal("-2.675")) == Decimal("-2.68")


def test_conversions_round_and_reject_bad_rates():
    """Conversions are rounded; a non-positive rate yields None."""
    assert usd_to_local(Decimal("110"), RATE) == Decimal("6600.00")
    assert local_to_usd(Decimal("100"), Decimal("3")) == Decimal("33.33")
    assert usd_to_local(Decimal("10"), Decimal("0")) is None
    assert local_to_usd(Decimal("10"), Decimal("-1")) is None


def test_to_decimal_rejects_non_numbers():
    """Booleans, garbage and infinities are not amounts."""
    assert to_decimal("12.50") == Decimal("12.50")
    assert to_decimal(7) == Decimal("7")
    assert to_decimal(True) is None
    assert to_decimal("abc") is None
    assert to_decimal("Infinity") is None
    assert to_decimal(None) is None


def test_find_discrepancy_consistent_payment():
    """Matching amounts produce no warning."""
    assert find_discrepancy(PaymentMethod.MOBILE_PAYMENT, "110", "6600", RATE) is None


def test_find_discrepancy_within_tolerance():
    """A one-cent difference is tolerated."""
    assert find_discrepancy(PaymentMethod.BANK_TRANSFER, "10.00", "600.01", RATE) is None


def test_find_discrepancy_mismatch_is_warning():
    """A mismatch is returned as a warning, never raised."""
    warning = find_discrepancy(PaymentMethod.MOBILE_PAYMENT, "110", "6000", RATE)
    assert isinstance(warning, ConsistencyWarning)
    assert "expected 6600.00" in str(warning)


def test_find_discrepancy_missing_local_fields():
    """Local-currency methods need both a local amount and a rate."""
    warning = find_discrepancy(PaymentMethod.CASH_LOCAL, "10", None, RATE)
    assert isinstance(warning, ConsistencyWarning)


def test_find_discrepancy_malformed_values():
    """Malformed values are reported instead of raising."""
    assert isinstance(find_discrepancy(PaymentMethod.CASH_USD, "ten", None, None), ConsistencyWarning)
    assert isinstance(
        find_discrepancy(PaymentMethod.MOBILE_PAYMENT, "10", "lots", RATE), ConsistencyWarning
    )


def test_find_discrepancy_ignores_usd_methods():
    """USD methods carry no local amount to check."""
    assert find_discrepancy(PaymentMethod.ZELLE, "110", None, None) is None


def test_draft_usd_edit_updates_local():
    """Typing a USD amount fills the local amount for local methods."""
    draft = PaymentDraft(method=PaymentMethod.MOBILE_PAYMENT, rate=RATE)
    draft.set_amount_usd("110")
    assert draft.amount_local == Decimal("6600.00")
    assert draft.rate_applied == RATE


def test_draft_local_edit_updates_usd():
    """Typing a local amount derives USD."""
    draft = PaymentDraft(method=PaymentMethod.CASH_LOCAL, rate=Decimal("36.5"))
    draft.set_amount_local("1000")
    assert draft.amount_usd == Decimal("27.40")


def test_draft_set_method_clears_amounts():
    """Switching method clears amounts entered for the previous one."""
    draft = PaymentDraft(method=PaymentMethod.MOBILE_PAYMENT, rate=RATE)
    draft.set_amount_usd("10")
    draft.set_method(PaymentMethod.CASH_USD)
    assert draft.amount_usd is None
    assert draft.amount_local is None
    assert draft.rate_applied is None


def test_draft_fill_total_never_negative():
    """A payer in credit pre-fills zero."""
    draft = PaymentDraft(method=PaymentMethod.CASH_USD, rate=RATE)
    draft.fill_total(Decimal("-20"))
    assert draft.amount_usd == Decimal("0.00")

    draft.fill_total(Decimal("85.50"))
    assert draft.amount_usd == Decimal("85.50")


@pytest.mark.parametrize("local", ["1000", "999.99", "1234.56", "7"])
def test_draft_reconcile_restores_consistency(local):
    """After reconcile the local amount agrees with USD within a cent."""
    rate = Decimal("36.37")
    draft = PaymentDraft(method=PaymentMethod.MOBILE_PAYMENT, rate=rate)
    draft.set_amount_local(local)
    draft.reconcile()

    assert abs(draft.amount_local - draft.amount_usd * rate) <= Decimal("0.01")
    assert find_discrepancy(draft.method, draft.amount_usd, draft.amount_local, rate) is None


def test_draft_reconcile_drops_local_for_usd_methods():
    """USD methods never carry a local amount."""
    draft = PaymentDraft(method=PaymentMethod.ZELLE, rate=RATE, amount_usd=Decimal("5"))
    draft.amount_local = Decimal("300")
    draft.reconcile()
    assert draft.amount_local is None
