"""Price catalog and exchange rate domain service."""

import logging
from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional

from feeledger.database.base import Database
from feeledger.domain.currency import round_rate
from feeledger.domain.defaults import DEFAULT_EXCHANGE_RATE
from feeledger.domain.entities import ExchangeRate, PriceCatalog
from feeledger.domain.errors import ConnectivityError, ValidationError

logger = logging.getLogger(__name__)


class PricingService:
    """Service for the price catalog and the global exchange rate."""

    def __init__(self, db: Database, fallback_rate: Decimal = DEFAULT_EXCHANGE_RATE):
        """Initialize pricing service.

        Args:
            db: Database instance
            fallback_rate: Rate used when the stored rate cannot be read
        """
        self.db = db
        self.fallback_rate = fallback_rate

    def get_price_catalog(self) -> PriceCatalog:
        """Get the current price catalog.

        Levels missing from the catalog are resolved against the compiled-in
        defaults at balance time.
        """
        return PriceCatalog.from_entries(self.db.get_price_catalog())

    def set_level_price(self, level: str, price_usd: Decimal) -> None:
        """Set the monthly fee for a level.

        Raises:
            ValidationError: If level is blank or price is not positive
        """
        if not level or not level.strip():
            raise ValidationError("Level name is required")
        if price_usd <= 0:
            raise ValidationError(f"Price must be greater than 0, got {price_usd}")
        self.db.save_level_price(level.strip(), price_usd)
        logger.info("Set monthly fee for '%s' to %s USD", level.strip(), price_usd)

    def get_exchange_rate(self) -> ExchangeRate:
        """Get the configured exchange rate.

        Falls back to the configured fallback rate when storage is unreachable
        or holds no positive rate, rather than converting with zero.
        """
        try:
            rate = self.db.get_exchange_rate()
        except ConnectivityError as e:
            logger.warning("Could not read exchange rate (%s); using fallback %s", e, self.fallback_rate)
            return self._fallback()

        if rate is None or rate.rate <= 0:
            logger.warning("No exchange rate configured; using fallback %s", self.fallback_rate)
            return self._fallback()
        return rate

    def set_exchange_rate(self, rate: Decimal, effective_at: Optional[datetime] = None) -> ExchangeRate:
        """Overwrite the global exchange rate.

        Payments already recorded keep the rate captured when they were saved.

        Raises:
            ValidationError: If rate is not positive after rounding
        """
        rate = round_rate(rate)
        if rate <= 0:
            raise ValidationError(f"Exchange rate must be greater than 0, got {rate}")
        exchange_rate = ExchangeRate(rate=rate, effective_at=effective_at or datetime.now(UTC))
        self.db.save_exchange_rate(exchange_rate)
        logger.info("Exchange rate set to %s", rate)
        return exchange_rate

    def _fallback(self) -> ExchangeRate:
        return ExchangeRate(rate=self.fallback_rate, effective_at=datetime.now(UTC))
