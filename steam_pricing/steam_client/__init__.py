"""
Steam catalog client module.

Provides a client for the Steam app list and store price endpoints.
"""

from steam_pricing.steam_client.api_client import SteamStoreClient
from steam_pricing.steam_client.models import SteamPriceOverview

__all__ = [
    "SteamStoreClient",
    "SteamPriceOverview",
]
