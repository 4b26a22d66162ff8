"""Unit tests for ExternalApiClient using httpx.MockTransport."""

import json

import httpx
import pytest

from storefront_service.domain.exceptions import ReconciliationForwardError, ServiceAreaFetchError
from storefront_service.domain.models import InternalOrderStatus, OrderStatusUpdate
from storefront_service.infrastructure.external_api import ExternalApiClient


API_BASE = "https://backend.example.com/api"


def make_client(handler, api_base: str = API_BASE) -> ExternalApiClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ExternalApiClient(http_client, api_base=api_base)


@pytest.fixture
def update() -> OrderStatusUpdate:
    return OrderStatusUpdate(
        order_id="order-001",
        payment_id="123456789",
        payment_status="approved",
        internal_status=InternalOrderStatus.SUCCESS,
        metadata={"orderId": "order-001"},
    )


class TestGetServiceAreas:
    """Tests for ExternalApiClient.get_service_areas."""

    @pytest.mark.asyncio
    async def test_parses_locations(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == f"{API_BASE}/settings/general"
            return httpx.Response(
                200,
                json={
                    "locations": [
                        {"nombre": "Palermo", "direccion": "Santa Fe 3200", "lat": -34.6, "lng": -58.45, "radio": 2000},
                        {"nombre": "Sin radio", "direccion": "x", "lat": -34.7, "lng": -58.5},
                        "garbage",
                    ]
                },
            )

        areas = await make_client(handler).get_service_areas()

        assert len(areas) == 1
        assert areas[0].name == "Palermo"
        assert areas[0].radius_meters == 2000.0

    @pytest.mark.asyncio
    async def test_malformed_entries_are_skipped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "locations": [
                        {"nombre": "Texto", "direccion": "x", "lat": "abc", "lng": -58.45, "radio": 2000},
                        {"nombre": "Objeto", "direccion": "x", "lat": -34.6, "lng": {"v": 1}, "radio": 2000},
                        {"nombre": "Infinito", "direccion": "x", "lat": -34.6, "lng": -58.45, "radio": "inf"},
                        {"nombre": "Palermo", "direccion": "Santa Fe 3200", "lat": -34.6, "lng": -58.45, "radio": 2000},
                    ]
                },
            )

        areas = await make_client(handler).get_service_areas()

        assert [area.name for area in areas] == ["Palermo"]

    @pytest.mark.asyncio
    async def test_missing_locations_is_empty(self) -> None:
        areas = await make_client(lambda r: httpx.Response(200, json={})).get_service_areas()

        assert areas == []

    @pytest.mark.asyncio
    async def test_error_status_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"mensaje": "Error interno"})

        with pytest.raises(ServiceAreaFetchError, match="Error interno"):
            await make_client(handler).get_service_areas()

    @pytest.mark.asyncio
    async def test_unconfigured_base_raises(self) -> None:
        with pytest.raises(ServiceAreaFetchError):
            await make_client(lambda r: httpx.Response(200, json={}), api_base="").get_service_areas()

    @pytest.mark.asyncio
    async def test_connection_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ServiceAreaFetchError):
            await make_client(handler).get_service_areas()


class TestForwardPaymentUpdate:
    """Tests for ExternalApiClient.forward_payment_update."""

    @pytest.mark.asyncio
    async def test_posts_update(self, update: OrderStatusUpdate) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        await make_client(handler).forward_payment_update(update)

        assert seen[0].method == "POST"
        assert str(seen[0].url) == f"{API_BASE}/orders/order-001/payment-webhook"
        assert json.loads(seen[0].content) == {
            "paymentId": "123456789",
            "paymentStatus": "approved",
            "status": "success",
            "metadata": {"orderId": "order-001"},
        }

    @pytest.mark.asyncio
    async def test_error_status_raises(self, update: OrderStatusUpdate) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(ReconciliationForwardError, match="HTTP 502: Bad Gateway") as exc_info:
            await make_client(handler).forward_payment_update(update)

        assert exc_info.value.order_id == "order-001"

    @pytest.mark.asyncio
    async def test_timeout_raises(self, update: OrderStatusUpdate) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.WriteTimeout("timed out", request=request)

        with pytest.raises(ReconciliationForwardError):
            await make_client(handler).forward_payment_update(update)
