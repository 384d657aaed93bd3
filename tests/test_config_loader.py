"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest

from steam_pricing.utils.config_loader import AppConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("STEAM_PRICING_CONFIG", "RATES_BASE_URL", "STEAM_DB_PATH", "LOG_FORMAT"):
        monkeypatch.delenv(key, raising=False)


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "absent.yaml")

        assert config == AppConfig()
        assert config.rates.base_url == "http://currency_app_1:8888"
        assert config.server.port == 8099

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path) == AppConfig()

    def test_parses_sections(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            """
catalog:
  country_code: gb
  timeout_seconds: 3
rates:
  base_url: http://rates.local:9000
  max_retries: 2
storage:
  db_path: /tmp/prices.db
  reset_on_start: false
server:
  port: 9001
logging:
  level: DEBUG
  format: json
""",
            encoding="utf-8",
        )

        config = load_config(path)

        assert config.catalog.country_code == "gb"
        assert config.catalog.timeout_seconds == 3.0
        assert config.catalog.store_url == "https://store.steampowered.com"
        assert config.rates.base_url == "http://rates.local:9000"
        assert config.rates.max_retries == 2
        assert config.storage.db_path == "/tmp/prices.db"
        assert config.storage.reset_on_start is False
        assert config.server.port == 9001
        assert config.server.api_prefix == "/api"
        assert config.logging.format == "json"

    def test_path_from_environment(self, tmp_path: Path, monkeypatch) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("server:\n  port: 7000\n", encoding="utf-8")
        monkeypatch.setenv("STEAM_PRICING_CONFIG", str(path))

        assert load_config().server.port == 7000

    def test_environment_overrides(self, tmp_path: Path, monkeypatch) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("rates:\n  base_url: http://from-file\n", encoding="utf-8")
        monkeypatch.setenv("RATES_BASE_URL", "http://from-env")
        monkeypatch.setenv("STEAM_DB_PATH", ":memory:")
        monkeypatch.setenv("LOG_FORMAT", "JSON")

        config = load_config(path)

        assert config.rates.base_url == "http://from-env"
        assert config.storage.db_path == ":memory:"
        assert config.logging.format == "json"
