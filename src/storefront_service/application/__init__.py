"""Application layer - services and use cases."""

from storefront_service.application.checkout import CheckoutService
from storefront_service.application.delivery import DeliveryService
from storefront_service.application.exchange_rate import ExchangeRateCache, PriceConverter, PriceQuote
from storefront_service.application.reconciliation import (
    OrderPaymentReconciler,
    ReconciliationOutcome,
    parse_notification,
)


__all__ = [
    "CheckoutService",
    "DeliveryService",
    "ExchangeRateCache",
    "OrderPaymentReconciler",
    "PriceConverter",
    "PriceQuote",
    "ReconciliationOutcome",
    "parse_notification",
]
