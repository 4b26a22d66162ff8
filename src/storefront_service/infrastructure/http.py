import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from storefront_service.infrastructure.metrics import OUTBOUND_REQUEST_DURATION


DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def create_http_client(timeout_seconds: float, **kwargs: Any) -> httpx.AsyncClient:
    """Shared async client. Timeouts surface as ``httpx.TimeoutException``."""
    headers = {**DEFAULT_HEADERS, **kwargs.pop("headers", {})}
    return httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds), headers=headers, **kwargs)


@asynccontextmanager
async def observe_outbound(target: str) -> AsyncIterator[None]:
    start = time.perf_counter()
    outcome = "ok"
    try:
        yield
    except Exception:
        outcome = "error"
        raise
    finally:
        OUTBOUND_REQUEST_DURATION.labels(target=target, outcome=outcome).observe(time.perf_counter() - start)


def describe_error_response(response: httpx.Response) -> str:
    """Build a readable reason from an error response.

    The external API reports errors as ``{"mensaje": ...}`` or
    ``{"error": ...}``; anything else falls back to the raw body.
    """
    prefix = f"HTTP {response.status_code}"
    if "application/json" in response.headers.get("content-type", ""):
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("mensaje") or body.get("error") or body.get("message")
            if message:
                return f"{prefix}: {message}"
    text = response.text.strip()
    return f"{prefix}: {text}" if text else prefix
