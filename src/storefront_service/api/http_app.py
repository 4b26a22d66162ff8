from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront_service.api.middleware import observability_middleware
from storefront_service.api.schemas import CheckoutBody, CheckoutResponse, ExchangeRateResponse
from storefront_service.application.checkout import CheckoutService
from storefront_service.application.delivery import DeliveryService
from storefront_service.application.exchange_rate import PriceConverter
from storefront_service.application.ports import RateSourcePort
from storefront_service.application.reconciliation import OrderPaymentReconciler, parse_notification
from storefront_service.domain.exceptions import DomainError, RateFetchError, ValidationError
from storefront_service.domain.models import RateSource


logger = structlog.get_logger()

DEFAULT_EXCHANGE_RATE = 1000.0


@dataclass
class Services:
    delivery: DeliveryService
    reconciler: OrderPaymentReconciler
    checkout: CheckoutService
    price_converter: PriceConverter
    published_rate: RateSourcePort


def _services(request: Request) -> Services:
    return request.app.state.services


def _error_body(error: str, details: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        log = logger.bind(error_type=type(exc).__name__, status_code=exc.status_code)
        if exc.status_code >= 500:
            log.error("request_failed", error=str(exc))
        else:
            log.warning("request_rejected", error=str(exc))
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.public_message, exc.details or str(exc)),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("request_rejected", error_type="RequestValidationError", errors=exc.errors())
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        return JSONResponse(status_code=400, content=_error_body("Invalid request", details))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_error", error=str(exc), exc_info=exc)
        return JSONResponse(status_code=500, content=_error_body("Internal error", str(exc)))


def create_app(services: Services) -> FastAPI:
    """Create the storefront HTTP application around already-built services."""
    app = FastAPI(title="Storefront Service")
    app.state.services = services
    app.middleware("http")(observability_middleware)
    register_exception_handlers(app)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    @app.post("/api/mercadopago/webhook")
    async def mercadopago_webhook(request: Request) -> dict[str, Any]:
        try:
            payload = await request.json()
        except ValueError as e:
            raise ValidationError("Notification body is not valid JSON") from e

        notification = parse_notification(payload)
        outcome = await _services(request).reconciler.handle_notification(notification)

        if not outcome.handled or outcome.update is None:
            return {"message": outcome.message}
        return {"success": True, "orderId": outcome.update.order_id}

    @app.get("/api/exchange-rate", response_model=ExchangeRateResponse)
    async def exchange_rate(request: Request) -> ExchangeRateResponse:
        source = RateSource.MANUAL
        try:
            rate = await _services(request).published_rate.fetch_rate()
        except RateFetchError as e:
            logger.warning("published_rate_fallback", error=str(e))
            rate = DEFAULT_EXCHANGE_RATE
            source = RateSource.FALLBACK

        return ExchangeRateResponse(
            rate=rate,
            currency="USD",
            lastUpdated=datetime.now(UTC).isoformat(),
            source=source.value,
        )

    @app.get("/api/delivery/availability")
    async def delivery_availability(
        request: Request,
        lat: float = Query(...),
        lng: float = Query(...),
    ) -> dict[str, Any]:
        result = await _services(request).delivery.check_availability(lat, lng)
        return result.to_dict()

    @app.get("/api/check-delivery-radius")
    async def check_delivery_radius(
        request: Request,
        lat: float = Query(...),
        lng: float = Query(...),
    ) -> JSONResponse:
        nearest = await _services(request).delivery.nearest_area(lat, lng)
        if nearest is None:
            return JSONResponse(status_code=404, content=_error_body("No stores configured"))

        area = nearest.area
        return JSONResponse(
            content={
                "isInRadius": nearest.in_radius,
                "distanceMeters": round(nearest.distance_meters, 2),
                "maxRadiusMeters": area.radius_meters,
                "nearestStore": {
                    "nombre": area.name,
                    "direccion": area.address,
                    "lat": area.latitude,
                    "lng": area.longitude,
                    "radio": area.radius_meters,
                },
            }
        )

    @app.get("/api/prices/usd")
    async def price_in_usd(request: Request, amount: float = Query(..., ge=0)) -> dict[str, object]:
        quote = await _services(request).price_converter.quote(amount)
        return quote.to_dict()

    @app.post("/api/create-checkout", response_model=CheckoutResponse)
    async def create_checkout(request: Request, body: CheckoutBody) -> CheckoutResponse:
        preference = await _services(request).checkout.create_checkout(body.to_request())
        return CheckoutResponse(id=preference.preference_id, init_point=preference.init_point)

    return app
