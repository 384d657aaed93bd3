"""
Pricing module.

Handles currency definitions, pivot exchange-rate lookups, conversion and
rounding of monetary amounts.
"""

from steam_pricing.pricing.converter import PivotConverter
from steam_pricing.pricing.currency import PIVOT_CURRENCY, REFERENCE_CURRENCY, Currency
from steam_pricing.pricing.rate_provider import RateProvider
from steam_pricing.pricing.rounding import round_amount

__all__ = [
    "Currency",
    "REFERENCE_CURRENCY",
    "PIVOT_CURRENCY",
    "PivotConverter",
    "RateProvider",
    "round_amount",
]
