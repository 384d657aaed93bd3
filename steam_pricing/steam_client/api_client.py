"""
Steam catalog API client implementation.

Wrapper for the two Steam endpoints the price cache needs:
- the app list (bootstrap of all price records)
- the store app-details endpoint, filtered to ``price_overview``
"""

import logging
from typing import Any

import requests

from steam_pricing.pricing.currency import REFERENCE_CURRENCY
from steam_pricing.pricing.exceptions import (
    ItemNotFoundError,
    MalformedResponseError,
    UpstreamUnavailableError,
)
from steam_pricing.steam_client.models import SteamPriceOverview
from steam_pricing.storage.models import CatalogEntry
from steam_pricing.utils.config_loader import AppConfig
from steam_pricing.utils.http_session import create_session

logger = logging.getLogger(__name__)

UPSTREAM_NAME = "catalog"

APP_LIST_ENDPOINT = "/ISteamApps/GetAppList/v2"
APP_DETAILS_ENDPOINT = "/api/appdetails"


class SteamStoreClient:
    """
    Client for the Steam catalog.

    Attributes:
        config: Application configuration.
        api_url: Base URL of the Steam web API.
        store_url: Base URL of the Steam store.
        country_code: Store country used to pin prices to the reference currency.
        timeout: Per-request timeout in seconds.
        session: Requests session.
    """

    def __init__(self, config: AppConfig, session: requests.Session | None = None) -> None:
        """
        Initialize the Steam client.

        Args:
            config: Application configuration with catalog settings.
            session: Optional pre-built session (for tests).
        """
        self.config = config
        self.api_url = config.catalog.api_url.rstrip("/")
        self.store_url = config.catalog.store_url.rstrip("/")
        self.country_code = config.catalog.country_code
        self.language = config.catalog.language
        self.timeout = config.catalog.timeout_seconds
        self.session = session or create_session(config.catalog.max_retries)

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        Perform a GET request and decode its JSON body.

        Raises:
            UpstreamUnavailableError: On transport failure or non-2xx status.
            MalformedResponseError: If the body is not JSON.
        """
        logger.debug(f"GET {url} params={params}")
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            logger.error(f"Request timeout for {url}: {e}")
            raise UpstreamUnavailableError(f"Request timeout for {url}", UPSTREAM_NAME) from e
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error for {url}: {e}")
            raise UpstreamUnavailableError(f"Network error for {url}: {str(e)[:200]}", UPSTREAM_NAME) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"HTTP error for {url}: {e}")
            raise UpstreamUnavailableError(f"HTTP error: {e}", UPSTREAM_NAME) from e

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Can't parse response body from {url}: {e}")
            raise MalformedResponseError(f"Invalid JSON from {url}", UPSTREAM_NAME) from e

    def fetch_app_list(self) -> list[CatalogEntry]:
        """
        Fetch every app in the Steam catalog.

        Returns:
            list[CatalogEntry]: One entry per app.

        Raises:
            UpstreamUnavailableError: On transport failure.
            MalformedResponseError: If the payload has an unexpected shape.
        """
        data = self._get_json(f"{self.api_url}{APP_LIST_ENDPOINT}")

        try:
            apps = data["applist"]["apps"]
            entries = [
                CatalogEntry(item_id=str(app["appid"]), name=str(app.get("name", "")))
                for app in apps
            ]
        except (KeyError, TypeError, AttributeError) as e:
            raise MalformedResponseError(f"Unexpected app list payload: {e}", UPSTREAM_NAME) from e

        logger.info(f"Fetched {len(entries)} apps from Steam catalog")
        return entries

    def fetch_price(self, item_id: str) -> int:
        """
        Fetch the reference-currency price of a title.

        Args:
            item_id: Steam appid.

        Returns:
            int: Final price in USD cents.

        Raises:
            ItemNotFoundError: If the catalog has no priced entry for ``item_id``.
            MalformedResponseError: If the payload cannot be parsed.
            UpstreamUnavailableError: On transport failure.
        """
        item_id = str(item_id)
        params = {
            "appids": item_id,
            "cc": self.country_code,
            "l": self.language,
            "filters": "price_overview",
        }
        data = self._get_json(f"{self.store_url}{APP_DETAILS_ENDPOINT}", params=params)

        if not isinstance(data, dict):
            raise MalformedResponseError("App details payload is not an object", UPSTREAM_NAME)

        # Steam returns {"<appid>": {"success": bool, "data": {...}}}
        app = data.get(item_id)
        if app is None:
            raise ItemNotFoundError(item_id, f"Catalog has no entry for {item_id}")
        if not isinstance(app, dict):
            raise MalformedResponseError(f"Unexpected entry for {item_id}", UPSTREAM_NAME)
        if not app.get("success"):
            raise ItemNotFoundError(item_id, f"Catalog lookup failed for {item_id}")

        details = app.get("data")
        # Unpriced titles come back with an empty list instead of an object
        if details is None or (isinstance(details, list) and not details):
            raise ItemNotFoundError(item_id, f"No price listed for {item_id}")
        if not isinstance(details, dict):
            raise MalformedResponseError(
                f"Unexpected data block for {item_id}: {type(details).__name__}", UPSTREAM_NAME
            )
        if "price_overview" not in details:
            raise ItemNotFoundError(item_id, f"No price listed for {item_id}")

        overview = SteamPriceOverview.from_api_response(details["price_overview"])
        if overview.currency != REFERENCE_CURRENCY.value:
            raise MalformedResponseError(
                f"Expected {REFERENCE_CURRENCY.value} price for {item_id}, got {overview.currency}",
                UPSTREAM_NAME,
            )

        logger.debug(f"Catalog price for {item_id}: {overview.final} cents")
        return overview.final
