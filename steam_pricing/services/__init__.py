"""
Service layer: the price cache and health reporting.
"""

from steam_pricing.services.health_service import HealthService
from steam_pricing.services.price_cache import PriceCache, build_price_cache

__all__ = ["PriceCache", "build_price_cache", "HealthService"]
