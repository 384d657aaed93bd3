"""
Shared fixtures: fakes wired into a price cache over an in-memory record
store seeded with a few titles.
"""

import pytest

from steam_pricing.pricing.converter import PivotConverter
from steam_pricing.pricing.exceptions import UpstreamUnavailableError
from steam_pricing.services.price_cache import PriceCache
from steam_pricing.utils.config_loader import AppConfig
from tests.fixtures.fakes import (
    CATALOG_ENTRIES,
    FakeCatalog,
    FakeRateProvider,
    FlakyRecordStore,
)


@pytest.fixture
def config() -> AppConfig:
    """Default configuration with an in-memory database."""
    config = AppConfig()
    config.storage.db_path = ":memory:"
    config.rates.base_url = "http://rates.test"
    return config


@pytest.fixture
def store():
    """Record store seeded with the sample catalog."""
    store = FlakyRecordStore(":memory:")
    store.reset_all(CATALOG_ENTRIES)
    yield store
    store.close()


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def rates() -> FakeRateProvider:
    return FakeRateProvider()


@pytest.fixture
def price_cache(store, catalog, rates) -> PriceCache:
    """Price cache wired to fakes."""
    return PriceCache(store=store, catalog=catalog, converter=PivotConverter(rates))


@pytest.fixture
def unavailable() -> UpstreamUnavailableError:
    return UpstreamUnavailableError("connection refused", "catalog")
