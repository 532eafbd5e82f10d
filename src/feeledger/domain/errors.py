"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class InvalidTransitionError(ValidationError):
    """Requested verification action is not allowed from the current status."""


class NotFoundError(DomainError):
    """Requested payer or transaction does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations or ambiguous lookups."""


class ConnectivityError(DomainError):
    """Storage is unreachable or returned malformed data."""


class ConsistencyWarning(UserWarning):
    """Money fields of a payment disagree beyond rounding tolerance.

    Never raised: instances are returned to the caller and logged.
    """


def payer_not_found(national_id: str) -> str:
    """Return message for missing payer."""
    return f"Payer '{national_id}' not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction by ID."""
    return f"Transaction {transaction_id} not found"


def transaction_reference_not_found(reference: str, payer_id: str) -> str:
    """Return message for missing transaction by reference and payer."""
    return f"No transaction with reference '{reference}' for payer '{payer_id}'"


def ambiguous_reference(reference: str, payer_id: str, count: int) -> str:
    """Return message when a reference lookup matches several transactions."""
    return (
        f"Reference '{reference}' matches {count} transactions for payer "
        f"'{payer_id}'. Use the transaction ID instead."
    )


def duplicate_payer(national_id: str) -> str:
    """Return message for an already enrolled national ID."""
    return f"Payer '{national_id}' is already enrolled"


def invalid_transition(action: str, status: str) -> str:
    """Return message for a verification action not allowed from a status."""
    return f"Cannot {action.lower()} a transaction with status {status}"
