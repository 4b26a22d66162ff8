import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import Request, Response
from ulid import ULID

from storefront_service.infrastructure.metrics import HTTP_REQUEST_DURATION, HTTP_REQUESTS_TOTAL
from storefront_service.logging import bind_request_context, clear_request_context


logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


def _route_template(request: Request) -> str:
    """Matched route path, so metrics are not labelled per payment id or coordinate."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or "unmatched"


async def observability_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(ULID())
    bind_request_context(request_id=request_id, method=request.method, path=request.url.path)

    start_time = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
    finally:
        duration = time.perf_counter() - start_time
        path = _route_template(request)
        HTTP_REQUEST_DURATION.labels(method=request.method, path=path).observe(duration)
        HTTP_REQUESTS_TOTAL.labels(method=request.method, path=path, status_code=str(status_code)).inc()
        logger.info(
            "request_completed",
            status_code=status_code,
            duration_ms=round(duration * 1000, 2),
        )
        clear_request_context()
