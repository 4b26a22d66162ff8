"""Shared pytest fixtures for storefront service tests."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from storefront_service.domain.models import PaymentRecord, ServiceArea
from storefront_service.infrastructure.rate_store import InMemoryKeyValueStore


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def palermo_area() -> ServiceArea:
    """Service area centered in Buenos Aires with a 2 km radius."""
    return ServiceArea(
        name="Palermo",
        address="Av. Santa Fe 3200",
        latitude=-34.6,
        longitude=-58.45,
        radius_meters=2000,
    )


@pytest.fixture
def ciudad_jardin_area() -> ServiceArea:
    return ServiceArea(
        name="Ciudad Jardín",
        address="Av. Rivadavia 16000",
        latitude=-34.6,
        longitude=-58.6,
        radius_meters=3000,
    )


@pytest.fixture
def mock_payment_provider() -> AsyncMock:
    """Create mock PaymentProvider."""
    provider = AsyncMock()
    provider.fetch_payment = AsyncMock(return_value=create_payment_record())
    provider.create_preference = AsyncMock(
        return_value={
            "id": "pref-123",
            "init_point": "https://www.mercadopago.com.ar/checkout/v1/redirect?pref_id=pref-123",
            "sandbox_init_point": "https://sandbox.mercadopago.com.ar/checkout/v1/redirect?pref_id=pref-123",
        }
    )
    return provider


@pytest.fixture
def mock_order_system() -> AsyncMock:
    """Create mock OrderSystem."""
    order_system = AsyncMock()
    order_system.forward_payment_update = AsyncMock(return_value=None)
    return order_system


@pytest.fixture
def mock_area_source(palermo_area: ServiceArea) -> AsyncMock:
    """Create mock ServiceAreaSource returning one area."""
    source = AsyncMock()
    source.get_service_areas = AsyncMock(return_value=[palermo_area])
    return source


@pytest.fixture
def mock_rate_source() -> AsyncMock:
    source = AsyncMock()
    source.fetch_rate = AsyncMock(return_value=1250.0)
    return source


def create_payment_record(
    payment_id: str = "123456789",
    status: str = "approved",
    order_id: str | None = "order-001",
    **metadata: object,
) -> PaymentRecord:
    """Helper to create PaymentRecord with custom values."""
    meta: dict[str, object] = dict(metadata)
    if order_id is not None:
        meta["orderId"] = order_id
    return PaymentRecord(id=payment_id, status=status, metadata=meta)
