#!/usr/bin/env python3
"""Clear the cached ARS/USD exchange rate.

The next price conversion fetches a fresh rate from the configured source.
Use after changing USD_EXCHANGE_RATE or EXCHANGE_RATE_SOURCE_URL.
"""
import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import structlog

from storefront_service.application.exchange_rate import ExchangeRateCache
from storefront_service.config import settings
from storefront_service.container import build_exchange_rate_cache
from storefront_service.infrastructure.http import create_http_client
from storefront_service.infrastructure.rate_store import RedisKeyValueStore
from storefront_service.infrastructure.redis_client import RedisClient
from storefront_service.logging import configure_logging


logger = structlog.get_logger()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="fetch and store a new rate right after clearing",
    )
    return parser.parse_args(argv)


async def clear_cache(cache: ExchangeRateCache, refresh: bool) -> None:
    await cache.clear()
    if refresh:
        rate = await cache.get_exchange_rate()
        logger.info("exchange_rate_reloaded", rate=rate.rate_value, source=rate.source.value)


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(level=settings.log_level, log_format="console")

    if not settings.redis_enabled:
        logger.warning("exchange_rate_cache_is_process_local", hint="restart the service to clear it")
        return 1

    redis_client = RedisClient(settings.redis_url)
    await redis_client.connect()
    try:
        async with create_http_client(settings.http_timeout_seconds) as http_client:
            cache = build_exchange_rate_cache(settings, http_client, RedisKeyValueStore(redis_client.client))
            await clear_cache(cache, args.refresh)
    finally:
        await redis_client.close()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
