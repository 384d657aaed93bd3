"""
Pivot currency converter.

Formula: P_target = (P_usd / R_usd) × R_target
Where:
- P_usd = base price in USD cents
- R_usd = USD cents per pivot unit
- R_target = target minor units per pivot unit

Only the final amount is rounded.
"""

import logging
from decimal import Decimal, DecimalException

from steam_pricing.pricing.currency import REFERENCE_CURRENCY, Currency
from steam_pricing.pricing.exceptions import PricingError, RateUnavailableError
from steam_pricing.pricing.rate_provider import RateProvider
from steam_pricing.pricing.rounding import round_amount, to_decimal

logger = logging.getLogger(__name__)


class PivotConverter:
    """Converts reference-currency amounts through the pivot unit."""

    def __init__(self, rate_provider: RateProvider) -> None:
        self.rate_provider = rate_provider

    def _rate(self, currency: Currency) -> Decimal:
        try:
            return self.rate_provider.fetch_rate(currency)
        except PricingError as e:
            raise RateUnavailableError(currency.value, e.message) from e

    def convert(self, base_amount_cents: int, currency: Currency) -> Decimal:
        """
        Convert a USD cent amount into ``currency`` minor units.

        Args:
            base_amount_cents: Amount in USD cents.
            currency: Target currency.

        Returns:
            Decimal: Converted amount rounded to 2 decimal places.

        Raises:
            RateUnavailableError: If either rate lookup fails or the rates
                give an amount that cannot be represented.
        """
        if currency == REFERENCE_CURRENCY:
            return round_amount(base_amount_cents)

        rate_ref = self._rate(REFERENCE_CURRENCY)
        rate_target = self._rate(currency)

        try:
            pivot_amount = to_decimal(base_amount_cents) / rate_ref
            converted = round_amount(pivot_amount * rate_target)
        except DecimalException as e:
            # Rates far outside the 28-digit context cannot be quantized
            raise RateUnavailableError(
                currency.value, f"rate out of range (ref={rate_ref}, target={rate_target})"
            ) from e
        logger.debug(
            f"Converted {base_amount_cents} USD cents -> {converted} {currency.value} "
            f"(ref={rate_ref}, target={rate_target})"
        )
        return converted
