"""
Data models for Steam API responses.
"""

from dataclasses import dataclass
from typing import Any

from steam_pricing.pricing.exceptions import MalformedResponseError


@dataclass
class SteamPriceOverview:
    """
    ``price_overview`` block of the store app-details response.

    Attributes:
        currency: ISO currency code of the listed price.
        initial: Price before discount, in minor units.
        final: Price actually charged, in minor units.
        discount_percent: Active discount.
    """

    currency: str
    initial: int
    final: int
    discount_percent: int = 0

    @classmethod
    def from_api_response(cls, data: Any) -> "SteamPriceOverview":
        """
        Create SteamPriceOverview from API response.

        Raises:
            MalformedResponseError: If required fields are missing or invalid.
        """
        if not isinstance(data, dict):
            raise MalformedResponseError("price_overview is not an object", "catalog")

        final = data.get("final")
        # bool is an int subclass; reject it explicitly
        if not isinstance(final, int) or isinstance(final, bool) or final < 0:
            raise MalformedResponseError(f"Invalid final price: {final!r}", "catalog")

        initial = data.get("initial", final)
        if not isinstance(initial, int) or isinstance(initial, bool):
            initial = final

        discount = data.get("discount_percent", 0)
        if not isinstance(discount, int):
            discount = 0

        return cls(
            currency=str(data.get("currency", "")).upper(),
            initial=initial,
            final=final,
            discount_percent=discount,
        )
