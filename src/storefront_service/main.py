import asyncio
import signal
from typing import NoReturn

import structlog

from storefront_service.api.http_app import create_app
from storefront_service.api.server import AppServer, MetricsServer
from storefront_service.application.ports import KeyValueStore
from storefront_service.config import settings
from storefront_service.container import build_services
from storefront_service.infrastructure.http import create_http_client
from storefront_service.infrastructure.rate_store import InMemoryKeyValueStore, RedisKeyValueStore
from storefront_service.infrastructure.redis_client import RedisClient
from storefront_service.logging import configure_logging


logger = structlog.get_logger()


async def main() -> NoReturn:
    configure_logging(
        level=settings.log_level,
        log_format=settings.log_format,
    )

    logger.info(
        "starting_storefront_service",
        http_port=settings.http_port,
        metrics_port=settings.metrics_port,
        log_level=settings.log_level,
        redis_enabled=settings.redis_enabled,
        metrics_enabled=settings.metrics_enabled,
        api_base=settings.api_base or None,
    )

    if not settings.mercadopago_access_token:
        logger.warning("mercadopago_token_missing")

    http_client = create_http_client(settings.http_timeout_seconds)

    redis_client: RedisClient | None = None
    store: KeyValueStore
    if settings.redis_enabled:
        redis_client = RedisClient(settings.redis_url)
        await redis_client.connect()
        store = RedisKeyValueStore(redis_client.client)
    else:
        store = InMemoryKeyValueStore()

    metrics_server: MetricsServer | None = None
    if settings.metrics_enabled:
        metrics_server = MetricsServer(
            host=settings.metrics_host,
            port=settings.metrics_port,
        )
        await metrics_server.start()

    app = create_app(build_services(settings, http_client, store))
    server = AppServer(app, name="http", host=settings.http_host, port=settings.http_port)

    stopping = False

    async def shutdown() -> None:
        nonlocal stopping
        if stopping:
            return
        stopping = True
        logger.info("shutting_down")
        await server.stop()
        if metrics_server:
            await metrics_server.stop()
        if redis_client:
            await redis_client.close()
        await http_client.aclose()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda: asyncio.create_task(shutdown()),
        )

    await server.start()
    if server.task:
        await server.task
    await shutdown()

    raise SystemExit(0)


if __name__ == "__main__":
    asyncio.run(main())
