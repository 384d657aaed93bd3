"""
Tests for the price cache service.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from steam_pricing.pricing.converter import PivotConverter
from steam_pricing.pricing.currency import Currency
from steam_pricing.pricing.exceptions import (
    InvalidCurrencyError,
    ItemNotFoundError,
    MalformedResponseError,
    RateUnavailableError,
    StorageFaultError,
    UpstreamUnavailableError,
)
from steam_pricing.services.price_cache import PriceCache
from steam_pricing.utils.logging_config import ContextFilter
from tests.fixtures.fakes import FakeCatalog, FakeRateProvider


class TestGetPrice:
    """Tests for PriceCache.get_price."""

    def test_fetches_base_price_on_first_call(self, price_cache, catalog, store) -> None:
        record = price_cache.get_price("10", "USD")

        assert record.base_price == 5000
        assert record.converted_prices[Currency.USD] == Decimal("5000.00")
        assert catalog.fetch_calls == ["10"]
        assert store.get("10").base_price == 5000

    def test_second_call_skips_catalog(self, price_cache, catalog) -> None:
        first = price_cache.get_price("10", "USD")
        second = price_cache.get_price("10", "USD")

        assert first.converted_prices[Currency.USD] == second.converted_prices[Currency.USD]
        assert catalog.fetch_calls == ["10"]
        assert price_cache.get_stats()["cache_hits"] == 1

    def test_pivot_conversion(self, price_cache) -> None:
        # 5000 cents / 10000 * 8000 = 4000 EUR cents
        record = price_cache.get_price("10", "EUR")
        assert record.converted_prices[Currency.EUR] == Decimal("4000.00")

    def test_pivot_currency_in_satoshi(self, price_cache) -> None:
        # 5000 / 10000 = 0.5 BTC = 50,000,000 satoshi
        record = price_cache.get_price("10", "BTC")
        assert record.converted_prices[Currency.BTC] == Decimal("50000000.00")

    def test_lowercase_currency_accepted(self, price_cache) -> None:
        record = price_cache.get_price("10", "gbp")
        assert record.converted_prices[Currency.GBP] == Decimal("2500.00")

    def test_returns_snapshot_not_live_record(self, price_cache, store) -> None:
        record = price_cache.get_price("10", "EUR")
        record.converted_prices[Currency.EUR] = Decimal("1.00")

        assert store.get("10").converted_prices[Currency.EUR] == Decimal("4000.00")
        assert record.lock is not store.get("10").lock

    def test_persists_converted_value(self, price_cache, store) -> None:
        price_cache.get_price("10", "EUR")

        written = [(f, v) for _, f, v in store.writes]
        assert ("base_price", 5000) in written
        assert ("EUR", Decimal("4000.00")) in written

    def test_unknown_item(self, price_cache, catalog) -> None:
        with pytest.raises(ItemNotFoundError):
            price_cache.get_price("999", "USD")
        assert catalog.fetch_calls == []

    def test_invalid_currency_rejected_without_side_effects(
        self, price_cache, catalog, rates, store
    ) -> None:
        with pytest.raises(InvalidCurrencyError) as exc_info:
            price_cache.get_price("10", "JPY")

        assert exc_info.value.status_code == 400
        assert catalog.fetch_calls == []
        assert rates.calls == []
        assert store.writes == []

    def test_catalog_failure_leaves_no_partial_state(
        self, price_cache, catalog, store, unavailable
    ) -> None:
        catalog.error = unavailable

        with pytest.raises(UpstreamUnavailableError):
            price_cache.get_price("10", "EUR")

        record = store.get("10")
        assert record.base_price == 0
        assert all(v == 0 for v in record.converted_prices.values())
        assert store.writes == []
        assert not record.lock.locked()

    @pytest.mark.parametrize(
        "error",
        [
            ItemNotFoundError("10", "No price listed for 10"),
            MalformedResponseError("Invalid JSON", "catalog"),
        ],
    )
    def test_catalog_errors_propagate_unchanged(self, price_cache, catalog, error) -> None:
        catalog.error = error
        with pytest.raises(type(error)):
            price_cache.get_price("10", "USD")

    def test_rate_failure_writes_only_base_price(self, price_cache, rates, store) -> None:
        rates.failures[Currency.EUR] = UpstreamUnavailableError("down", "rates")

        with pytest.raises(RateUnavailableError):
            price_cache.get_price("10", "EUR")

        assert [f for _, f, _ in store.writes] == ["base_price"]
        assert store.get("10").converted_prices[Currency.EUR] == Decimal("0.00")

    def test_zero_catalog_price_is_not_cached(self, store, rates) -> None:
        catalog = FakeCatalog(prices={"10": 0})
        cache = PriceCache(store=store, catalog=catalog, converter=PivotConverter(rates))

        cache.get_price("10", "USD")
        cache.get_price("10", "USD")

        assert store.get("10").base_price == 0
        assert catalog.fetch_calls == ["10", "10"]

    def test_storage_fault_reports_result(self, price_cache, store) -> None:
        store.failing_fields.add("EUR")

        with pytest.raises(StorageFaultError) as exc_info:
            price_cache.get_price("10", "EUR")

        error = exc_info.value
        assert error.details["fields"] == ["EUR"]
        assert error.record.converted_prices[Currency.EUR] == Decimal("4000.00")
        # The in-memory value is kept
        assert store.get("10").converted_prices[Currency.EUR] == Decimal("4000.00")
        assert price_cache.get_stats()["storage_faults"] == 1


class TestConcurrency:
    """Record guard behaviour under concurrent access."""

    def test_same_record_calls_do_not_interleave(self, store) -> None:
        catalog = FakeCatalog(delay=0.02)
        rates = FakeRateProvider(delay=0.01)
        cache = PriceCache(store=store, catalog=catalog, converter=PivotConverter(rates))

        currencies = ["EUR", "GBP", "RUB", "BTC"] * 2
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda c: cache.get_price("10", c), currencies))

        assert len(results) == 8
        assert rates.max_active == 1
        assert catalog.fetch_calls == ["10"]

        record = store.get("10")
        assert record.converted_prices[Currency.EUR] == Decimal("4000.00")
        assert record.converted_prices[Currency.GBP] == Decimal("2500.00")
        assert record.converted_prices[Currency.RUB] == Decimal("350000.00")
        assert record.converted_prices[Currency.BTC] == Decimal("50000000.00")

    def test_other_records_are_not_blocked(self, price_cache, store) -> None:
        held = store.get("10")
        done = threading.Event()

        def price_other():
            price_cache.get_price("20", "USD")
            done.set()

        with held.lock:
            worker = threading.Thread(target=price_other)
            worker.start()
            assert done.wait(timeout=2.0)
        worker.join(timeout=2.0)

    def test_get_record_waits_for_guard(self, price_cache, store) -> None:
        record = store.get("10")
        results = []

        with record.lock:
            record.base_price = 1234
            reader = threading.Thread(target=lambda: results.append(price_cache.get_record("10")))
            reader.start()
            reader.join(timeout=0.05)
            assert results == []
            record.converted_prices[Currency.EUR] = Decimal("987.00")

        reader.join(timeout=2.0)
        assert results[0].base_price == 1234
        assert results[0].converted_prices[Currency.EUR] == Decimal("987.00")


class TestClearPrice:
    """Tests for PriceCache.clear_price."""

    def test_clears_exactly_one_record(self, price_cache, store) -> None:
        price_cache.get_price("10", "EUR")
        price_cache.get_price("20", "GBP")
        other_before = store.get("20").snapshot()

        price_cache.clear_price("10")

        cleared = store.get("10")
        assert cleared.base_price == 0
        assert all(v == Decimal("0.00") for v in cleared.converted_prices.values())
        assert store.get("20").snapshot() == other_before

    def test_clear_then_get_refetches(self, price_cache, catalog) -> None:
        price_cache.get_price("10", "USD")
        price_cache.clear_price("10")
        price_cache.get_price("10", "USD")

        assert catalog.fetch_calls == ["10", "10"]

    def test_clear_unknown_item(self, price_cache) -> None:
        with pytest.raises(ItemNotFoundError):
            price_cache.clear_price("404")

    def test_clear_reports_storage_fault(self, price_cache, store) -> None:
        store.failing_fields.add("base_price")
        with pytest.raises(StorageFaultError):
            price_cache.clear_price("10")


class TestBootstrap:
    """Tests for PriceCache.bootstrap."""

    def test_bootstrap_resets_store(self, price_cache, store) -> None:
        price_cache.get_price("10", "USD")
        count = price_cache.bootstrap()

        assert count == 3
        assert store.get("10").base_price == 0

    def test_bootstrap_keeps_existing_records(self, price_cache, store) -> None:
        price_cache.get_price("10", "USD")
        key = store.get("10").record_key

        assert price_cache.bootstrap(reset=False) == 3
        assert store.get("10").record_key == key
        assert store.get("10").base_price == 5000

    def test_bootstrap_propagates_catalog_error(self, price_cache, catalog, unavailable) -> None:
        catalog.error = unavailable
        with pytest.raises(UpstreamUnavailableError):
            price_cache.bootstrap()


class TestLogging:
    """Log records emitted while pricing carry the item and currency."""

    def test_records_carry_item_and_currency(self, store, rates) -> None:
        records = []

        class ListHandler(logging.Handler):
            def emit(self, record):
                records.append(record)

        handler = ListHandler()
        handler.addFilter(ContextFilter())
        cache_logger = logging.getLogger("steam_pricing.services.price_cache")
        cache_logger.addHandler(handler)
        try:
            cache = PriceCache(
                store=store, catalog=FakeCatalog(prices={"10": 0}), converter=PivotConverter(rates)
            )
            cache.get_price("10", Currency.EUR)
        finally:
            cache_logger.removeHandler(handler)

        assert records
        assert records[0].context_fields == {"item_id": "10", "currency": "EUR"}
