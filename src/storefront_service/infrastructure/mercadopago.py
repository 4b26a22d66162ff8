from typing import Any

import httpx
import structlog

from storefront_service.domain.exceptions import ProviderFetchError
from storefront_service.domain.models import PaymentRecord
from storefront_service.infrastructure.http import describe_error_response, observe_outbound


logger = structlog.get_logger()


class MercadoPagoClient:
    """Mercado Pago REST adapter implementing the PaymentProvider port."""

    def __init__(self, http_client: httpx.AsyncClient, access_token: str, api_base: str) -> None:
        self._http = http_client
        self._access_token = access_token
        self._api_base = api_base.rstrip("/")

    def _auth_headers(self) -> dict[str, str]:
        if not self._access_token:
            raise RuntimeError("MERCADOPAGO_ACCESS_TOKEN is not configured")
        return {"Authorization": f"Bearer {self._access_token}"}

    async def fetch_payment(self, payment_id: str) -> PaymentRecord:
        if not (payment_id.isascii() and payment_id.isdigit()):
            raise ProviderFetchError(payment_id, "payment id must be numeric")
        url = f"{self._api_base}/v1/payments/{payment_id}"

        try:
            async with observe_outbound("mercadopago_payment"):
                response = await self._http.get(url, headers=self._auth_headers())
        except httpx.HTTPError as e:
            logger.error("payment_fetch_transport_error", payment_id=payment_id, error=repr(e))
            raise ProviderFetchError(payment_id, repr(e)) from e

        if response.is_error:
            reason = describe_error_response(response)
            logger.error("payment_fetch_failed", payment_id=payment_id, status_code=response.status_code)
            raise ProviderFetchError(payment_id, reason, status_code=response.status_code)

        data = _json_object(response, payment_id)
        data.setdefault("id", payment_id)
        return PaymentRecord.from_provider(data)

    async def create_preference(self, body: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._api_base}/checkout/preferences"
        reference = str(body.get("external_reference", ""))

        try:
            async with observe_outbound("mercadopago_preference"):
                response = await self._http.post(url, json=body, headers=self._auth_headers())
        except httpx.HTTPError as e:
            raise ProviderFetchError(reference, repr(e)) from e

        if response.is_error:
            logger.error("preference_create_failed", order_id=reference, status_code=response.status_code)
            raise ProviderFetchError(reference, describe_error_response(response), status_code=response.status_code)

        return _json_object(response, reference)


def _json_object(response: httpx.Response, reference: str) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError as e:
        raise ProviderFetchError(reference, "response body is not JSON") from e
    if not isinstance(data, dict):
        raise ProviderFetchError(reference, "response body is not a JSON object")
    return data
