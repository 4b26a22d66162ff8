import time
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from prometheus_client import Counter, Histogram


LATENCY_BUCKETS = [0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]

HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "path", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration",
    ["method", "path"],
    buckets=LATENCY_BUCKETS,
)

WEBHOOK_NOTIFICATIONS_TOTAL = Counter(
    "webhook_notifications_total",
    "Total payment provider notifications received",
    ["event_type", "outcome"],
)

DELIVERY_CHECKS_TOTAL = Counter(
    "delivery_checks_total",
    "Total delivery availability checks",
    ["available"],
)

EXCHANGE_RATE_LOOKUPS_TOTAL = Counter(
    "exchange_rate_lookups_total",
    "Total exchange rate lookups by where the rate came from",
    ["source"],
)

OUTBOUND_REQUEST_DURATION = Histogram(
    "outbound_request_duration_seconds",
    "Duration of calls to external APIs",
    ["target", "outcome"],
    buckets=LATENCY_BUCKETS,
)

RECONCILIATION_DURATION_SECONDS = Histogram(
    "reconciliation_duration_seconds",
    "Payment notification reconciliation duration",
    buckets=LATENCY_BUCKETS,
)


P = ParamSpec("P")
R = TypeVar("R")


def track_reconciliation_duration(
    func: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]:
    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        start = time.perf_counter()
        try:
            return await func(*args, **kwargs)
        finally:
            duration = time.perf_counter() - start
            RECONCILIATION_DURATION_SECONDS.observe(duration)

    return wrapper
