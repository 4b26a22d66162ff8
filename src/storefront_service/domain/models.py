import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class RateSource(Enum):
    MANUAL = "manual"
    FALLBACK = "fallback"
    CACHED = "cached"


class InternalOrderStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"

    @classmethod
    def from_provider_status(cls, provider_status: str) -> "InternalOrderStatus":
        if provider_status == "approved":
            return cls.SUCCESS
        if provider_status == "rejected":
            return cls.FAILED
        return cls.PENDING


@dataclass(frozen=True)
class ServiceArea:
    name: str
    address: str
    latitude: float
    longitude: float
    radius_meters: float

    @classmethod
    def from_settings(cls, raw: dict[str, Any]) -> "ServiceArea | None":
        """Build an area from the external settings payload.

        Entries are stored with Spanish keys (``nombre``, ``direccion``,
        ``lat``, ``lng``, ``radio``) and the radius in meters. Returns None when
        coordinates or radius are missing, zero or not numbers.
        """
        lat = raw.get("lat")
        lng = raw.get("lng")
        radius = raw.get("radio")
        if not lat or not lng or not radius:
            return None
        try:
            latitude, longitude, radius_meters = float(lat), float(lng), float(radius)
        except (TypeError, ValueError):
            return None
        if not all(math.isfinite(value) for value in (latitude, longitude, radius_meters)) or radius_meters <= 0:
            return None
        return cls(
            name=str(raw.get("nombre", "")),
            address=str(raw.get("direccion", "")),
            latitude=latitude,
            longitude=longitude,
            radius_meters=radius_meters,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "radiusMeters": self.radius_meters,
        }


@dataclass(frozen=True)
class DeliveryCheckResult:
    available: bool
    matched_area: ServiceArea | None = None
    distance_meters: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "available": self.available,
            "matchedArea": self.matched_area.to_dict() if self.matched_area else None,
            "distanceMeters": self.distance_meters,
        }


@dataclass(frozen=True)
class NearestAreaResult:
    area: ServiceArea
    distance_meters: float
    in_radius: bool


@dataclass(frozen=True)
class ExchangeRate:
    rate_value: float
    currency_code: str
    source: RateSource
    fetched_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class PaymentNotification:
    provider_event_type: str
    provider_payment_id: str


@dataclass(frozen=True)
class PaymentRecord:
    id: str
    status: str
    metadata: dict[str, Any] = field(default_factory=dict)
    external_reference: str | None = None

    @classmethod
    def from_provider(cls, data: dict[str, Any]) -> "PaymentRecord":
        return cls(
            id=str(data.get("id", "")),
            status=str(data.get("status", "")),
            metadata=dict(data.get("metadata") or {}),
            external_reference=data.get("external_reference"),
        )

    @property
    def order_id(self) -> str | None:
        # Mercado Pago returns metadata keys snake_cased.
        order_id = self.metadata.get("orderId") or self.metadata.get("order_id")
        return str(order_id) if order_id else None


@dataclass(frozen=True)
class OrderStatusUpdate:
    order_id: str
    payment_id: str
    payment_status: str
    internal_status: InternalOrderStatus
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payment(cls, payment: PaymentRecord, order_id: str) -> "OrderStatusUpdate":
        return cls(
            order_id=order_id,
            payment_id=payment.id,
            payment_status=payment.status,
            internal_status=InternalOrderStatus.from_provider_status(payment.status),
            metadata=payment.metadata,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "paymentId": self.payment_id,
            "paymentStatus": self.payment_status,
            "status": self.internal_status.value,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class CheckoutItem:
    title: str
    unit_price: float
    quantity: int


@dataclass(frozen=True)
class Payer:
    email: str
    name: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class CheckoutRequest:
    order_id: str
    items: list[CheckoutItem]
    payer: Payer


@dataclass(frozen=True)
class CheckoutPreference:
    preference_id: str
    init_point: str
    sandbox_init_point: str | None = None
