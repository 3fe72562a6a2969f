"""Command-line entry point: ``python -m storefront``."""
from __future__ import annotations

import argparse
import asyncio
import sys

from storefront.core.config import Settings, load_settings
from storefront.core.exceptions import CatalogLoadError, ConfigurationException
from storefront.core.formatting import format_rub
from storefront.logging_config import logger, setup_logging


async def _print_products(settings: Settings) -> int:
    from storefront.core.bootstrap import build_application
    from storefront.services.catalog_service import CATALOG_LOAD_MESSAGE

    storefront = build_application(settings)
    try:
        result = await storefront.catalog.load()
    except CatalogLoadError as exc:
        print(f"{CATALOG_LOAD_MESSAGE} {exc.message}", file=sys.stderr)
        return 1
    finally:
        await storefront.close()

    for product in result.products:
        print(f"{product.category:<20} {product.name:<30} {product.unit:<6} {format_rub(product.price)}")
    if result.from_cache:
        print("(cached catalog, refresh failed)", file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="storefront",
        description="Farm storefront - catalog, cart and order proxy",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the same-origin API proxy")
    serve.add_argument("--host", default=None, help="Bind host (default: HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT or 8080)")

    sub.add_parser("products", help="Fetch and print the catalog")

    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationException as exc:
        print(f"Configuration error: {exc.message}", file=sys.stderr)
        return 2

    setup_logging(args.log_level or settings.log_level)

    if args.command == "serve":
        from storefront.api.proxy import run_proxy_server

        if args.host:
            settings.server.host = args.host
        if args.port:
            settings.server.port = args.port
        run_proxy_server(settings)
        return 0

    try:
        return asyncio.run(_print_products(settings))
    except ConfigurationException as exc:
        logger.error("Configuration error: %s", exc.message)
        return 2


if __name__ == "__main__":
    sys.exit(main())
