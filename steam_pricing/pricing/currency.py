"""
Supported currencies.

USD is the reference currency the catalog prices in; BTC is the pivot unit
every conversion is routed through. Amounts are kept in minor units, whose
scale per currency is given by ``exponent``.
"""

from enum import Enum

from steam_pricing.pricing.exceptions import InvalidCurrencyError


class Currency(str, Enum):
    """Currency codes accepted by the price cache."""

    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    RUB = "RUB"
    BTC = "BTC"

    @property
    def exponent(self) -> int:
        """Number of minor-unit digits (2 for cents, 8 for satoshi)."""
        return _EXPONENTS[self]

    @property
    def minor_units(self) -> int:
        """Minor units in one major unit."""
        return 10 ** self.exponent

    @classmethod
    def parse(cls, code) -> "Currency":
        """
        Resolve a currency code.

        Args:
            code: Currency code or Currency member. Case-insensitive.

        Returns:
            Currency: Matching member.

        Raises:
            InvalidCurrencyError: If the code is not supported.
        """
        if isinstance(code, cls):
            return code
        if isinstance(code, str):
            try:
                return cls(code.strip().upper())
            except ValueError:
                pass
        raise InvalidCurrencyError(code, supported=[c.value for c in cls])


_EXPONENTS = {
    Currency.USD: 2,
    Currency.EUR: 2,
    Currency.GBP: 2,
    Currency.RUB: 2,
    Currency.BTC: 8,
}

REFERENCE_CURRENCY = Currency.USD
PIVOT_CURRENCY = Currency.BTC
