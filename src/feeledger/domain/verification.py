"""Payment verification workflow.

A transaction starts PENDING_VERIFICATION when its method needs a bank or
reference check, VERIFIED otherwise. Operators then move it with:

    APPROVE: PENDING_VERIFICATION -> VERIFIED
    REJECT:  PENDING_VERIFICATION -> REJECTED
    RECOVER: REJECTED -> VERIFIED

VERIFIED is final. A mistake in a verified payment is corrected with a new
transaction, never by reopening the old one.
"""

import logging
from enum import Enum
from typing import Optional

from feeledger.database.base import Database
from feeledger.domain.entities import PaymentMethod, PaymentStatus, PaymentTransaction
from feeledger.domain.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
    ambiguous_reference,
    invalid_transition,
    transaction_not_found,
    transaction_reference_not_found,
)
from feeledger.domain.ledger import LedgerQuery, filter_transactions

logger = logging.getLogger(__name__)


class VerificationAction(str, Enum):
    """Operator actions on a transaction's status."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"
    RECOVER = "RECOVER"


_TRANSITIONS: dict[tuple[PaymentStatus, VerificationAction], PaymentStatus] = {
    (PaymentStatus.PENDING_VERIFICATION, VerificationAction.APPROVE): PaymentStatus.VERIFIED,
    (PaymentStatus.PENDING_VERIFICATION, VerificationAction.REJECT): PaymentStatus.REJECTED,
    (PaymentStatus.REJECTED, VerificationAction.RECOVER): PaymentStatus.VERIFIED,
}


def initial_status(method: PaymentMethod) -> PaymentStatus:
    """Status a new transaction starts in for the given method."""
    if method.requires_verification:
        return PaymentStatus.PENDING_VERIFICATION
    return PaymentStatus.VERIFIED


def next_status(current: PaymentStatus, action: VerificationAction) -> PaymentStatus:
    """Apply an action to a status.

    Raises:
        InvalidTransitionError: If the action is not allowed from current
    """
    try:
        return _TRANSITIONS[(current, action)]
    except KeyError:
        raise InvalidTransitionError(invalid_transition(action.value, current.value))


def allowed_actions(current: PaymentStatus) -> tuple[VerificationAction, ...]:
    """Actions an operator may apply to a transaction in the given status."""
    return tuple(action for (status, action) in _TRANSITIONS if status == current)


class VerificationService:
    """Service for reviewing and transitioning payment transactions."""

    def __init__(self, db: Database):
        """Initialize verification service.

        Args:
            db: Database instance
        """
        self.db = db

    def pending_queue(self, search: Optional[str] = None) -> list[PaymentTransaction]:
        """List transactions awaiting verification, oldest first.

        Args:
            search: Optional text matched against reference, payer ID or payer name
        """
        query = LedgerQuery(
            statuses=frozenset({PaymentStatus.PENDING_VERIFICATION}), search=search
        )
        return filter_transactions(self.db.get_transactions(), query)

    def rejected_history(self, search: Optional[str] = None) -> list[PaymentTransaction]:
        """List rejected transactions, newest first."""
        query = LedgerQuery(statuses=frozenset({PaymentStatus.REJECTED}), search=search)
        return filter_transactions(self.db.get_transactions(), query)

    def locate(
        self,
        transaction_id: Optional[str] = None,
        reference: Optional[str] = None,
        payer_id: Optional[str] = None,
    ) -> PaymentTransaction:
        """Find the transaction an action targets.

        The transaction ID is the primary key. Without it, the
        (reference, payer_id) pair is used; that lookup is ambiguous when a
        payer reuses a reference, in which case a ConflictError is raised.

        Raises:
            ValidationError: If neither an ID nor a reference and payer is given
            NotFoundError: If no transaction matches
            ConflictError: If the fallback lookup matches several transactions
        """
        if transaction_id:
            txn = self.db.get_transaction(transaction_id)
            if txn is None:
                raise NotFoundError(transaction_not_found(transaction_id))
            return txn

        if not reference or not payer_id:
            raise ValidationError(
                "A transaction ID, or both a reference and a payer ID, are required"
            )

        logger.warning(
            "Locating transaction by reference '%s' for payer %s instead of by ID",
            reference,
            payer_id,
        )
        matches = self.db.find_transactions_by_reference(reference, payer_id)
        if not matches:
            raise NotFoundError(transaction_reference_not_found(reference, payer_id))
        if len(matches) > 1:
            raise ConflictError(ambiguous_reference(reference, payer_id, len(matches)))
        return matches[0]

    def apply(
        self,
        action: VerificationAction,
        transaction_id: Optional[str] = None,
        reference: Optional[str] = None,
        payer_id: Optional[str] = None,
    ) -> PaymentTransaction:
        """Apply a verification action and persist the new status.

        Returns:
            The transaction with its new status

        Raises:
            NotFoundError: If the transaction doesn't exist (nothing is written)
            InvalidTransitionError: If the action is not allowed
            ConflictError: If the fallback lookup is ambiguous
        """
        txn = self.locate(transaction_id=transaction_id, reference=reference, payer_id=payer_id)
        new_status = next_status(txn.status, action)

        self.db.update_transaction_status(
            transaction_id=txn.id,
            reference=txn.reference,
            payer_id=txn.payer_id,
            new_status=new_status,
        )
        logger.info(
            "%s transaction %s (payer %s, %s USD): %s -> %s",
            action.value,
            txn.id,
            txn.payer_id,
            txn.amount_usd,
            txn.status.value,
            new_status.value,
        )

        updated = self.db.get_transaction(txn.id)
        if updated is None:
            raise NotFoundError(transaction_not_found(txn.id))
        return updated

    def approve(self, transaction_id: Optional[str] = None, **lookup) -> PaymentTransaction:
        """Approve a pending transaction."""
        return self.apply(VerificationAction.APPROVE, transaction_id, **lookup)

    def reject(self, transaction_id: Optional[str] = None, **lookup) -> PaymentTransaction:
        """Reject a pending transaction."""
        return self.apply(VerificationAction.REJECT, transaction_id, **lookup)

    def recover(self, transaction_id: Optional[str] = None, **lookup) -> PaymentTransaction:
        """Approve a previously rejected transaction."""
        return self.apply(VerificationAction.RECOVER, transaction_id, **lookup)
