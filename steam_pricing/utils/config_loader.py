"""
Configuration loader module.

Loads application configuration from YAML files and environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("config/config.yaml")


@dataclass
class CatalogConfig:
    """Steam catalog (store + web API) configuration."""

    api_url: str = "http://api.steampowered.com"
    store_url: str = "https://store.steampowered.com"
    country_code: str = "us"
    language: str = "english"
    timeout_seconds: float = 10.0
    max_retries: int = 0


@dataclass
class RatesConfig:
    """Exchange-rate service configuration."""

    base_url: str = "http://currency_app_1:8888"
    timeout_seconds: float = 5.0
    max_retries: int = 0


@dataclass
class StorageConfig:
    """Record store configuration."""

    db_path: str = "data/prices.sqlite3"
    reset_on_start: bool = True


@dataclass
class ServerConfig:
    """HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 8099
    api_prefix: str = "/api"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "text"
    file: str | None = None


@dataclass
class AppConfig:
    """
    Main application configuration.

    Aggregates all configuration sections into a single object.
    """

    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    rates: RatesConfig = field(default_factory=RatesConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_env(env_file: Path = Path(".env")) -> None:
    """
    Load environment variables from .env file.

    Args:
        env_file: Path to .env file.
    """
    if env_file.exists():
        load_dotenv(env_file)
        logger.debug(f"Loaded environment from: {env_file}")
    else:
        logger.debug(f"No .env file found at: {env_file}")


def load_config(config_file: Path | None = None) -> AppConfig:
    """
    Load application configuration from YAML file.

    The path defaults to ``$STEAM_PRICING_CONFIG`` or ``config/config.yaml``.
    Environment overrides are applied on top of the file values.

    Args:
        config_file: Path to configuration YAML file.

    Returns:
        AppConfig: Loaded configuration object.

    Raises:
        yaml.YAMLError: If config file is invalid.
    """
    if config_file is None:
        config_file = Path(os.environ.get("STEAM_PRICING_CONFIG", str(DEFAULT_CONFIG_FILE)))
    config_file = Path(config_file)

    if not config_file.exists():
        logger.warning(f"Config file not found: {config_file}. Using defaults.")
        config = AppConfig()
    else:
        with open(config_file, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            config = AppConfig()
        else:
            config = _parse_config(raw_config)
            logger.info(f"Loaded configuration from: {config_file}")

    _apply_env_overrides(config)
    return config


def _parse_config(raw: dict[str, Any]) -> AppConfig:
    """
    Parse raw YAML dict into AppConfig dataclass.

    Args:
        raw: Raw dictionary from YAML file.

    Returns:
        AppConfig: Parsed configuration object.
    """
    defaults = AppConfig()

    catalog_raw = raw.get("catalog") or {}
    catalog = CatalogConfig(
        api_url=catalog_raw.get("api_url", defaults.catalog.api_url),
        store_url=catalog_raw.get("store_url", defaults.catalog.store_url),
        country_code=catalog_raw.get("country_code", defaults.catalog.country_code),
        language=catalog_raw.get("language", defaults.catalog.language),
        timeout_seconds=float(catalog_raw.get("timeout_seconds", defaults.catalog.timeout_seconds)),
        max_retries=int(catalog_raw.get("max_retries", defaults.catalog.max_retries)),
    )

    rates_raw = raw.get("rates") or {}
    rates = RatesConfig(
        base_url=rates_raw.get("base_url", defaults.rates.base_url),
        timeout_seconds=float(rates_raw.get("timeout_seconds", defaults.rates.timeout_seconds)),
        max_retries=int(rates_raw.get("max_retries", defaults.rates.max_retries)),
    )

    storage_raw = raw.get("storage") or {}
    storage = StorageConfig(
        db_path=str(storage_raw.get("db_path", defaults.storage.db_path)),
        reset_on_start=bool(storage_raw.get("reset_on_start", defaults.storage.reset_on_start)),
    )

    server_raw = raw.get("server") or {}
    server = ServerConfig(
        host=server_raw.get("host", defaults.server.host),
        port=int(server_raw.get("port", defaults.server.port)),
        api_prefix=server_raw.get("api_prefix", defaults.server.api_prefix),
    )

    logging_raw = raw.get("logging") or {}
    logging_config = LoggingConfig(
        level=logging_raw.get("level", defaults.logging.level),
        format=logging_raw.get("format", defaults.logging.format),
        file=logging_raw.get("file", defaults.logging.file),
    )

    return AppConfig(
        catalog=catalog,
        rates=rates,
        storage=storage,
        server=server,
        logging=logging_config,
    )


def _apply_env_overrides(config: AppConfig) -> None:
    """Apply environment variable overrides in place."""
    rates_url = get_env_var("RATES_BASE_URL")
    if rates_url:
        config.rates.base_url = rates_url

    db_path = get_env_var("STEAM_DB_PATH")
    if db_path:
        config.storage.db_path = db_path

    log_format = get_env_var("LOG_FORMAT")
    if log_format:
        config.logging.format = log_format.lower()


def get_env_var(key: str, default: str | None = None) -> str | None:
    """
    Get an environment variable with optional default.

    Args:
        key: Environment variable name.
        default: Default value if not set.

    Returns:
        Environment variable value or default.
    """
    return os.environ.get(key, default)
