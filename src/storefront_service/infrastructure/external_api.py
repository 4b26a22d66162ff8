from typing import Any

import httpx
import structlog

from storefront_service.domain.exceptions import ReconciliationForwardError, ServiceAreaFetchError
from storefront_service.domain.models import OrderStatusUpdate, ServiceArea
from storefront_service.infrastructure.http import describe_error_response, observe_outbound


logger = structlog.get_logger()


class ExternalApiClient:
    """
    Client for the storefront's external REST backend.

    Implements the ServiceAreaSource and OrderSystem ports: store locations
    live under ``/settings/general`` and the order of record accepts payment
    updates at ``/orders/{id}/payment-webhook``.
    """

    def __init__(self, http_client: httpx.AsyncClient, api_base: str) -> None:
        self._http = http_client
        self._api_base = api_base.rstrip("/")

    def _url(self, path: str) -> str:
        if not self._api_base:
            raise RuntimeError("External API base URL is not configured")
        return f"{self._api_base}/{path.lstrip('/')}"

    async def get_service_areas(self) -> list[ServiceArea]:
        try:
            async with observe_outbound("settings_general"):
                response = await self._http.get(self._url("/settings/general"))
        except (httpx.HTTPError, RuntimeError) as e:
            raise ServiceAreaFetchError(repr(e)) from e

        if response.is_error:
            raise ServiceAreaFetchError(describe_error_response(response))

        try:
            data: Any = response.json()
        except ValueError as e:
            raise ServiceAreaFetchError("settings response is not JSON") from e

        raw_locations = data.get("locations") if isinstance(data, dict) else None
        areas: list[ServiceArea] = []
        for raw in raw_locations or []:
            area = ServiceArea.from_settings(raw) if isinstance(raw, dict) else None
            if area is None:
                logger.warning("service_area_incomplete", location=raw)
                continue
            areas.append(area)
        return areas

    async def forward_payment_update(self, update: OrderStatusUpdate) -> None:
        try:
            async with observe_outbound("order_payment_webhook"):
                response = await self._http.post(
                    self._url(f"/orders/{update.order_id}/payment-webhook"),
                    json=update.to_payload(),
                )
        except (httpx.HTTPError, RuntimeError) as e:
            raise ReconciliationForwardError(update.order_id, repr(e)) from e

        if response.is_error:
            raise ReconciliationForwardError(update.order_id, describe_error_response(response))
