"""Abstract database interface."""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

# Import entities directly to avoid pulling domain services into the cycle
from feeledger.domain.entities import (
    ExchangeRate,
    Payer,
    PaymentStatus,
    PaymentTransaction,
    PriceCatalogEntry,
)


class Database(ABC):
    """Abstract storage interface for feeledger.

    Every read returns fresh data; implementations must not cache between
    calls. Writes either succeed or raise, and callers treat them as fallible.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Configuration operations
    @abstractmethod
    def get_price_catalog(self) -> list[PriceCatalogEntry]:
        """Get all catalog rows."""
        pass

    @abstractmethod
    def save_level_price(self, level: str, price_usd: Decimal) -> None:
        """Insert or overwrite the price of a level."""
        pass

    @abstractmethod
    def get_exchange_rate(self) -> Optional[ExchangeRate]:
        """Get the global exchange rate, or None if never set."""
        pass

    @abstractmethod
    def save_exchange_rate(self, exchange_rate: ExchangeRate) -> None:
        """Overwrite the global exchange rate."""
        pass

    # Payer operations
    @abstractmethod
    def get_payers(self) -> list[Payer]:
        """List all payers with their students."""
        pass

    @abstractmethod
    def get_payer_by_national_id(self, national_id: str) -> Optional[Payer]:
        """Get payer by national ID."""
        pass

    @abstractmethod
    def save_payer(self, payer: Payer) -> None:
        """Upsert a payer keyed by national ID, replacing its student list."""
        pass

    # Transaction operations
    @abstractmethod
    def get_transactions(self) -> list[PaymentTransaction]:
        """List all payment transactions."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[PaymentTransaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def find_transactions_by_reference(
        self, reference: str, payer_id: str
    ) -> list[PaymentTransaction]:
        """Find transactions of a payer carrying the given reference."""
        pass

    @abstractmethod
    def save_transaction(self, transaction: PaymentTransaction) -> None:
        """Persist a new transaction."""
        pass

    @abstractmethod
    def update_transaction_status(
        self,
        transaction_id: Optional[str],
        reference: Optional[str],
        payer_id: Optional[str],
        new_status: PaymentStatus,
    ) -> None:
        """Update the status of a transaction.

        The transaction is located by ID; when no ID is given, by the
        (reference, payer_id) pair.

        Raises:
            NotFoundError: If no transaction matches (nothing is written)
            ConflictError: If the (reference, payer_id) pair matches several
                transactions (nothing is written)
        """
        pass
