"""
Price cache service.

Orchestrates lookup -> freshness check -> fetch-if-absent -> conversion ->
locked mutation -> persistence for one title and one currency per call.

Each record carries its own lock; a call holds only that lock, including
while it talks to the catalog and rate services, so calls for different
titles never wait on each other.
"""

import logging
import threading
from typing import Any

from steam_pricing.pricing.converter import PivotConverter
from steam_pricing.pricing.currency import Currency
from steam_pricing.pricing.exceptions import ItemNotFoundError, StorageFaultError
from steam_pricing.pricing.rate_provider import RateProvider
from steam_pricing.steam_client.api_client import SteamStoreClient
from steam_pricing.storage.models import BASE_PRICE_FIELD, PriceRecord
from steam_pricing.storage.record_store import RecordStore, SqliteRecordStore
from steam_pricing.utils.config_loader import AppConfig
from steam_pricing.utils.logging_config import LogContext

logger = logging.getLogger(__name__)


class PriceCache:
    """
    Lazily fetched, per-record locked price cache.

    Attributes:
        store: Record store holding the live records.
        catalog: Source of reference-currency base prices.
        converter: Pivot converter for other currencies.
    """

    def __init__(
        self,
        store: RecordStore,
        catalog: SteamStoreClient,
        converter: PivotConverter,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.converter = converter

        self._stats_lock = threading.Lock()
        self._stats = {
            "catalog_fetches": 0,
            "cache_hits": 0,
            "conversions": 0,
            "clears": 0,
            "storage_faults": 0,
        }

    def _count(self, key: str, amount: int = 1) -> None:
        with self._stats_lock:
            self._stats[key] += amount

    def _require(self, item_id: str) -> PriceRecord:
        record = self.store.get(str(item_id))
        if record is None:
            raise ItemNotFoundError(str(item_id))
        return record

    def fetch_base_price(self, item_id: str) -> int:
        """
        Fetch the reference-currency price of a title from the catalog.

        The caller is responsible for persisting the result.

        Returns:
            int: Price in USD cents.
        """
        self._count("catalog_fetches")
        return self.catalog.fetch_price(item_id)

    def get_price(self, item_id: str, currency: Any) -> PriceRecord:
        """
        Price a title in the requested currency.

        Args:
            item_id: Catalog identifier.
            currency: Currency code (e.g. "EUR") or Currency member.

        Returns:
            PriceRecord: Snapshot of the updated record.

        Raises:
            ItemNotFoundError: Unknown item, or the catalog has no price for it.
            InvalidCurrencyError: Unsupported currency code.
            UpstreamUnavailableError: Catalog transport failure.
            MalformedResponseError: Unparsable catalog payload.
            RateUnavailableError: A pivot rate lookup failed.
            StorageFaultError: A persistence write failed; ``error.record``
                holds the computed result.
        """
        with LogContext(item_id=str(item_id), currency=getattr(currency, "value", currency)):
            return self._price(item_id, currency)

    def _price(self, item_id: str, currency: Any) -> PriceRecord:
        record = self._require(item_id)
        target = Currency.parse(currency)
        failed_fields: list[str] = []

        with record.lock:
            if record.base_price == 0:
                amount = self.fetch_base_price(record.item_id)
                if amount > 0:
                    record.base_price = amount
                    if not self.store.set_field(record.record_key, BASE_PRICE_FIELD, amount):
                        failed_fields.append(BASE_PRICE_FIELD)
                else:
                    logger.warning(f"Catalog returned a zero price for {record.item_id}; not caching it")
            else:
                self._count("cache_hits")

            value = self.converter.convert(record.base_price, target)
            self._count("conversions")

            record.converted_prices[target] = value
            if not self.store.set_field(record.record_key, target.value, value):
                failed_fields.append(target.value)

            snapshot = record.copy_unlocked()

        if failed_fields:
            self._count("storage_faults", len(failed_fields))
            logger.error(f"Persistence failed for {record.item_id}: {failed_fields}")
            raise StorageFaultError(record.item_id, failed_fields, record=snapshot)

        logger.debug(f"Priced {record.item_id}: {value} {target.value} (minor units)")
        return snapshot

    def get_record(self, item_id: str) -> PriceRecord:
        """
        Return a consistent snapshot of a record.

        Raises:
            ItemNotFoundError: If the item is unknown.
        """
        return self._require(item_id).snapshot()

    def clear_price(self, item_id: str) -> None:
        """
        Zero every currency field of one record, base price included.

        Raises:
            ItemNotFoundError: If the item is unknown.
            StorageFaultError: If any field could not be persisted.
        """
        record = self._require(item_id)
        with record.lock:
            record.reset_prices()
            failed_fields = []
            if not self.store.set_field(record.record_key, BASE_PRICE_FIELD, 0):
                failed_fields.append(BASE_PRICE_FIELD)
            for currency, value in record.converted_prices.items():
                if not self.store.set_field(record.record_key, currency.value, value):
                    failed_fields.append(currency.value)
            snapshot = record.copy_unlocked()

        self._count("clears")
        if failed_fields:
            self._count("storage_faults", len(failed_fields))
            raise StorageFaultError(record.item_id, failed_fields, record=snapshot)
        logger.info(f"Price of {record.item_id} reset to zero values")

    def bootstrap(self, reset: bool = True) -> int:
        """
        Populate the store from the catalog app list.

        Args:
            reset: If False and the store already holds records, keep them.

        Returns:
            int: Number of records in the store afterwards.
        """
        if not reset and len(self.store) > 0:
            logger.info(f"Keeping {len(self.store)} persisted price records")
            return len(self.store)

        entries = self.catalog.fetch_app_list()
        count = self.store.reset_all(entries)
        logger.info(f"Initialized {count} price records from catalog")
        return count

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        with self._stats_lock:
            stats = dict(self._stats)
        stats["records"] = len(self.store)
        return stats


def build_price_cache(config: AppConfig) -> PriceCache:
    """
    Wire a PriceCache from configuration.

    Args:
        config: Application configuration.

    Returns:
        PriceCache: Cache backed by SQLite, the Steam client and the rate service.
    """
    store = SqliteRecordStore(config.storage.db_path)
    catalog = SteamStoreClient(config)
    converter = PivotConverter(RateProvider(config))
    return PriceCache(store=store, catalog=catalog, converter=converter)
