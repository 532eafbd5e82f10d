"""Domain layer for feeledger application.

Services live in their own modules (``feeledger.domain.payment`` and so on)
and are imported from there; this package only re-exports the entities so
that the database layer can import them without a cycle.
"""

from feeledger.domain.entities import (
    Payer,
    PaymentMethod,
    PaymentStatus,
    PaymentTransaction,
    PriceCatalog,
    Student,
)

__all__ = [
    "Payer",
    "PaymentMethod",
    "PaymentStatus",
    "PaymentTransaction",
    "PriceCatalog",
    "Student",
]
