"""
Exchange-rate provider module.

Fetches the price of one pivot unit (BTC) in a given currency from the
currency service. The service answers ``GET /api/currency/BTC<CODE>`` with
``{"value": <price in major units>}``; rates are returned in minor units of
the requested currency.
"""

import logging
from decimal import Decimal, InvalidOperation

import requests

from steam_pricing.pricing.currency import PIVOT_CURRENCY, Currency
from steam_pricing.pricing.exceptions import MalformedResponseError, UpstreamUnavailableError
from steam_pricing.utils.config_loader import AppConfig
from steam_pricing.utils.http_session import create_session

logger = logging.getLogger(__name__)

UPSTREAM_NAME = "rates"


class RateProvider:
    """
    Client for the pivot exchange-rate service.

    Attributes:
        config: Application configuration.
        base_url: Base URL of the currency service.
        timeout: Per-request timeout in seconds.
        session: Requests session.
    """

    def __init__(self, config: AppConfig, session: requests.Session | None = None) -> None:
        """
        Initialize the rate provider.

        Args:
            config: Application configuration with rate service settings.
            session: Optional pre-built session (for tests).
        """
        self.config = config
        self.base_url = config.rates.base_url.rstrip("/")
        self.timeout = config.rates.timeout_seconds
        self.session = session or create_session(config.rates.max_retries)

    def pair_symbol(self, currency: Currency) -> str:
        """Pair symbol used by the currency service, e.g. ``BTCEUR``."""
        return f"{PIVOT_CURRENCY.value}{currency.value}"

    def fetch_rate(self, currency: Currency) -> Decimal:
        """
        Fetch the value of one pivot unit in ``currency`` minor units.

        Args:
            currency: Target currency.

        Returns:
            Decimal: Minor units of ``currency`` per pivot unit.

        Raises:
            UpstreamUnavailableError: On transport failure or non-2xx status.
            MalformedResponseError: If the payload cannot be parsed.
        """
        if currency == PIVOT_CURRENCY:
            return Decimal(PIVOT_CURRENCY.minor_units)

        symbol = self.pair_symbol(currency)
        url = f"{self.base_url}/api/currency/{symbol}"
        logger.debug(f"Fetching rate {symbol} from {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            logger.warning(f"Rate request for {symbol} timed out after {self.timeout}s")
            raise UpstreamUnavailableError(f"Rate request timed out for {symbol}", UPSTREAM_NAME) from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"Rate request for {symbol} failed: {e}")
            raise UpstreamUnavailableError(f"Rate service error for {symbol}: {e}", UPSTREAM_NAME) from e

        try:
            payload = response.json()
            value = Decimal(str(payload["value"]))
        except (ValueError, KeyError, TypeError, InvalidOperation) as e:
            logger.warning(f"Could not parse rate response for {symbol}: {e}")
            raise MalformedResponseError(f"Unparsable rate payload for {symbol}", UPSTREAM_NAME) from e

        if not value.is_finite() or value <= 0:
            raise MalformedResponseError(f"Non-positive rate for {symbol}: {value}", UPSTREAM_NAME)

        rate = value * currency.minor_units
        logger.debug(f"Rate {symbol} = {value} ({rate} minor units)")
        return rate
