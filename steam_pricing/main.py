"""
CLI entry point for the Steam price cache.

Wires together config, logging and the price cache, and provides commands
for serving the API and for one-off operations against the record store.
"""

import argparse
import logging
import sys
from pathlib import Path

from steam_pricing.pricing.exceptions import PricingError, StorageFaultError
from steam_pricing.services.price_cache import PriceCache, build_price_cache
from steam_pricing.utils.config_loader import AppConfig, load_config, load_env
from steam_pricing.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Steam Price Cache",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m steam_pricing.main serve
    python -m steam_pricing.main bootstrap
    python -m steam_pricing.main price 237110 EUR
    python -m steam_pricing.main clear 237110
        """,
    )

    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: $STEAM_PRICING_CONFIG or config/config.yaml)",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("serve", help="Run the HTTP API")
    subparsers.add_parser("bootstrap", help="Reload all records from the Steam app list")

    price = subparsers.add_parser("price", help="Price one title in a currency")
    price.add_argument("appid", help="Steam appid")
    price.add_argument("currency", help="USD, EUR, GBP, RUB or BTC")

    show = subparsers.add_parser("show", help="Show stored prices of one title")
    show.add_argument("appid", help="Steam appid")

    clear = subparsers.add_parser("clear", help="Reset prices of one title to zero")
    clear.add_argument("appid", help="Steam appid")

    return parser.parse_args(argv)


def print_record(record) -> None:
    """Print a price record in a readable form."""
    print(f"\n{record.name or '(unnamed)'} [{record.item_id}]")
    print(f"  Base price: {record.base_price} USD cents")
    for currency, amount in record.converted_prices.items():
        print(f"  {currency.value}: {amount}")


def run_serve(config: AppConfig) -> int:
    """Start uvicorn with the configured host and port."""
    import uvicorn

    from steam_pricing.webapp.main import create_app

    uvicorn.run(create_app(config), host=config.server.host, port=config.server.port)
    return 0


def run_command(args: argparse.Namespace, price_cache: PriceCache) -> int:
    """
    Run a one-off command against the price cache.

    Returns:
        int: Exit code (0 for success, non-zero for errors).
    """
    try:
        if args.command == "bootstrap":
            count = price_cache.bootstrap(reset=True)
            print(f"\n✓ Loaded {count} titles")
        elif args.command == "price":
            record = price_cache.get_price(args.appid, args.currency)
            print_record(record)
        elif args.command == "show":
            print_record(price_cache.get_record(args.appid))
        elif args.command == "clear":
            price_cache.clear_price(args.appid)
            print(f"\n✓ Cleared prices for {args.appid}")
    except StorageFaultError as e:
        logger.error(e.message)
        print(f"\n⚠ Warning: {e.message}")
        if e.record is not None:
            print_record(e.record)
        return 2
    except PricingError as e:
        logger.error(f"{e.error_code}: {e.message}")
        print(f"\n✗ Error: {e.message}")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    load_env()
    config = load_config(args.config)
    setup_logging(config.logging, level="DEBUG" if args.verbose else None)

    if args.command == "serve":
        return run_serve(config)

    price_cache = build_price_cache(config)
    try:
        return run_command(args, price_cache)
    finally:
        price_cache.store.close()


if __name__ == "__main__":
    sys.exit(main())
