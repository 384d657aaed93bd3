"""
Data models for stored price records.
"""

import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from steam_pricing.pricing.currency import Currency
from steam_pricing.pricing.rounding import round_amount

BASE_PRICE_FIELD = "base_price"


def zero_prices() -> dict[Currency, Decimal]:
    """Fresh mapping with every supported currency set to 0.00."""
    return {currency: round_amount(0) for currency in Currency}


@dataclass
class CatalogEntry:
    """One title from the catalog app list."""

    item_id: str
    name: str = ""


@dataclass
class PriceRecord:
    """
    Cached pricing for one catalog title.

    Attributes:
        item_id: Catalog (Steam appid) identifier.
        record_key: Internal key assigned at creation.
        name: Title name.
        base_price: Reference price in USD cents; 0 means not yet fetched.
        converted_prices: Minor-unit amount per currency, 0 means stale.
        lock: Guard held for every read-modify-write of this record.
    """

    item_id: str
    record_key: str
    name: str = ""
    base_price: int = 0
    converted_prices: dict[Currency, Decimal] = field(default_factory=zero_prices)
    lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    @property
    def is_fetched(self) -> bool:
        """True once a positive base price is known."""
        return self.base_price > 0

    def copy_unlocked(self) -> "PriceRecord":
        """Copy fields; the caller must already hold ``lock``."""
        return PriceRecord(
            item_id=self.item_id,
            record_key=self.record_key,
            name=self.name,
            base_price=self.base_price,
            converted_prices=dict(self.converted_prices),
        )

    def snapshot(self) -> "PriceRecord":
        """Copy fields while holding the record guard."""
        with self.lock:
            return self.copy_unlocked()

    def reset_prices(self) -> None:
        """Zero every currency field; the caller must hold ``lock``."""
        self.base_price = 0
        self.converted_prices = zero_prices()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "item_id": self.item_id,
            "record_key": self.record_key,
            "name": self.name,
            "base_price": self.base_price,
            "prices": {c.value: float(v) for c, v in self.converted_prices.items()},
        }
