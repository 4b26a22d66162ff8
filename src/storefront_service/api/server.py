import asyncio
import contextlib

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest


logger = structlog.get_logger()


def create_metrics_app() -> FastAPI:
    """Create FastAPI application for metrics endpoint."""
    app = FastAPI(
        title="Storefront Service Metrics",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.get("/metrics", response_class=PlainTextResponse)
    async def metrics() -> PlainTextResponse:
        """Prometheus metrics endpoint."""
        return PlainTextResponse(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST,
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint for the metrics server."""
        return {"status": "healthy"}

    return app


class AppServer:
    """Runs a FastAPI app on uvicorn as a background task of the current loop."""

    def __init__(self, app: FastAPI, name: str, host: str = "0.0.0.0", port: int = 8000) -> None:
        self._app = app
        self._name = name
        self._host = host
        self._port = port
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def task(self) -> "asyncio.Task[None] | None":
        return self._task

    async def start(self) -> None:
        config = uvicorn.Config(
            self._app,
            host=self._host,
            port=self._port,
            log_level="warning",
            access_log=False,
        )
        self._server = uvicorn.Server(config)

        self._task = asyncio.create_task(self._server.serve())
        logger.info("server_started", server=self._name, host=self._host, port=self._port)

    async def stop(self) -> None:
        if self._server:
            self._server.should_exit = True

        if self._task:
            try:
                await asyncio.wait_for(self._task, timeout=5.0)
            except TimeoutError:
                self._task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._task

        logger.info("server_stopped", server=self._name)


class MetricsServer(AppServer):
    """Async metrics server using uvicorn."""

    def __init__(self, host: str = "0.0.0.0", port: int = 9090) -> None:
        super().__init__(create_metrics_app(), name="metrics", host=host, port=port)
