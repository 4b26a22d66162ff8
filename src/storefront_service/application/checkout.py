from typing import Any

import structlog

from storefront_service.application.ports import PaymentProvider
from storefront_service.domain.exceptions import ProviderFetchError, ValidationError
from storefront_service.domain.models import CheckoutPreference, CheckoutRequest


logger = structlog.get_logger()


class CheckoutService:
    """Creates hosted-checkout preferences that the webhook can later correlate."""

    def __init__(
        self,
        provider: PaymentProvider,
        public_base_url: str,
        currency: str = "ARS",
        statement_descriptor: str = "BAUL DE MODA",
    ) -> None:
        self._provider = provider
        self._public_base_url = public_base_url.rstrip("/")
        self._currency = currency
        self._statement_descriptor = statement_descriptor

    def build_preference_body(self, request: CheckoutRequest) -> dict[str, Any]:
        base = self._public_base_url
        payer: dict[str, Any] = {"email": request.payer.email}
        if request.payer.name:
            payer["name"] = request.payer.name
        if request.payer.phone:
            payer["phone"] = {"number": request.payer.phone}

        return {
            "items": [
                {
                    "id": f"item-{index}",
                    "title": item.title,
                    "unit_price": float(item.unit_price),
                    "quantity": int(item.quantity),
                    "currency_id": self._currency,
                }
                for index, item in enumerate(request.items, start=1)
            ],
            "payer": payer,
            "back_urls": {
                "success": f"{base}/checkout/success",
                "failure": f"{base}/checkout/failure",
                "pending": f"{base}/checkout/pending",
            },
            "notification_url": f"{base}/api/mercadopago/webhook",
            "metadata": {
                "orderId": request.order_id,
                "customerEmail": request.payer.email,
            },
            "statement_descriptor": self._statement_descriptor,
            "external_reference": request.order_id,
            "auto_return": "approved",
        }

    async def create_checkout(self, request: CheckoutRequest) -> CheckoutPreference:
        if not request.items:
            raise ValidationError("Cart has no items")
        if not request.order_id:
            raise ValidationError("Order id is required")
        if not request.payer.email:
            raise ValidationError("Payer email is required")

        log = logger.bind(order_id=request.order_id, items=len(request.items))

        response = await self._provider.create_preference(self.build_preference_body(request))

        preference_id = response.get("id")
        init_point = response.get("init_point")
        if not preference_id or not init_point:
            log.error("preference_response_incomplete", response=response)
            raise ProviderFetchError(request.order_id, "preference response missing id or init_point")

        log.info("checkout_preference_created", preference_id=preference_id)
        return CheckoutPreference(
            preference_id=str(preference_id),
            init_point=str(init_point),
            sandbox_init_point=response.get("sandbox_init_point"),
        )
