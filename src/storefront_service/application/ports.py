"""Capabilities the application services depend on.

Infrastructure adapters implement these; tests substitute AsyncMocks.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol

from storefront_service.domain.models import OrderStatusUpdate, PaymentRecord, ServiceArea


Clock = Callable[[], datetime]


class PaymentProvider(Protocol):
    async def fetch_payment(self, payment_id: str) -> PaymentRecord: ...

    async def create_preference(self, body: dict[str, Any]) -> dict[str, Any]: ...


class OrderSystem(Protocol):
    async def forward_payment_update(self, update: OrderStatusUpdate) -> None: ...


class ServiceAreaSource(Protocol):
    async def get_service_areas(self) -> list[ServiceArea]: ...


class RateSourcePort(Protocol):
    async def fetch_rate(self) -> float: ...


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, *keys: str) -> None: ...
