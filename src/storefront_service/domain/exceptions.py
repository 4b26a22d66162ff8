class DomainError(Exception):
    """Base exception for domain errors."""

    status_code: int = 500
    public_message: str = "Internal error"

    def __init__(self, message: str, details: str | None = None) -> None:
        self.details = details
        super().__init__(message)


class ValidationError(DomainError):
    """Raised when a caller supplied a malformed payload."""

    status_code = 400
    public_message = "Invalid request"


class InvalidCoordinatesError(ValidationError):
    """Raised when a coordinate is missing, not finite or out of range."""

    def __init__(self, lat: float, lng: float) -> None:
        self.lat = lat
        self.lng = lng
        super().__init__(f"Invalid coordinates: lat={lat}, lng={lng}")


class MissingOrderReferenceError(DomainError):
    """Raised when a payment carries no order id to correlate with."""

    status_code = 400
    public_message = "Order id not found in payment"

    def __init__(self, payment_id: str) -> None:
        self.payment_id = payment_id
        super().__init__(f"Payment {payment_id} has no order reference in metadata")


class ProviderFetchError(DomainError):
    """Raised when the payment provider call fails."""

    public_message = "Could not retrieve payment information"

    def __init__(self, payment_id: str, reason: str, status_code: int | None = None) -> None:
        self.payment_id = payment_id
        self.provider_status = status_code
        super().__init__(f"Payment provider request for {payment_id} failed: {reason}", details=reason)


class ReconciliationForwardError(DomainError):
    """Raised when the order system rejects or never receives a status update."""

    public_message = "Could not forward payment update to order system"

    def __init__(self, order_id: str, reason: str) -> None:
        self.order_id = order_id
        super().__init__(f"Forwarding update for order {order_id} failed: {reason}", details=reason)


class RateFetchError(DomainError):
    """Raised when the exchange rate source cannot produce a rate."""

    public_message = "Could not fetch exchange rate"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Exchange rate fetch failed: {reason}", details=reason)


class ServiceAreaFetchError(DomainError):
    """Raised when the service-area configuration cannot be loaded."""

    public_message = "Could not load delivery areas"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Service area fetch failed: {reason}", details=reason)
