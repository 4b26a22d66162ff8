"""Domain layer - storefront entities and pure rules."""

from storefront_service.domain.exceptions import (
    DomainError,
    InvalidCoordinatesError,
    MissingOrderReferenceError,
    ProviderFetchError,
    RateFetchError,
    ReconciliationForwardError,
    ServiceAreaFetchError,
    ValidationError,
)
from storefront_service.domain.models import (
    CheckoutItem,
    CheckoutPreference,
    CheckoutRequest,
    DeliveryCheckResult,
    ExchangeRate,
    InternalOrderStatus,
    NearestAreaResult,
    OrderStatusUpdate,
    Payer,
    PaymentNotification,
    PaymentRecord,
    RateSource,
    ServiceArea,
)


__all__ = [
    "CheckoutItem",
    "CheckoutPreference",
    "CheckoutRequest",
    "DeliveryCheckResult",
    "DomainError",
    "ExchangeRate",
    "InternalOrderStatus",
    "InvalidCoordinatesError",
    "MissingOrderReferenceError",
    "NearestAreaResult",
    "OrderStatusUpdate",
    "Payer",
    "PaymentNotification",
    "PaymentRecord",
    "ProviderFetchError",
    "RateFetchError",
    "RateSource",
    "ReconciliationForwardError",
    "ServiceArea",
    "ServiceAreaFetchError",
    "ValidationError",
]
