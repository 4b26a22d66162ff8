from dataclasses import dataclass
from typing import Any

import structlog

from storefront_service.application.ports import OrderSystem, PaymentProvider
from storefront_service.domain.exceptions import MissingOrderReferenceError, ValidationError
from storefront_service.domain.models import OrderStatusUpdate, PaymentNotification
from storefront_service.infrastructure.metrics import (
    WEBHOOK_NOTIFICATIONS_TOTAL,
    track_reconciliation_duration,
)


logger = structlog.get_logger()

PAYMENT_EVENT_TYPE = "payment"
# Metric label for every non-payment type; the type itself is only logged.
OTHER_EVENT_TYPE = "other"


@dataclass
class ReconciliationOutcome:
    handled: bool
    update: OrderStatusUpdate | None = None
    message: str | None = None


def parse_notification(payload: Any) -> PaymentNotification:
    """Extract the event type and payment id from a webhook body.

    Mercado Pago sends ``{"type": "payment", "data": {"id": "123"}}``; the id
    is sometimes a number.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Notification body must be a JSON object")

    event_type = payload.get("type")
    data = payload.get("data")
    payment_id = data.get("id") if isinstance(data, dict) else None

    if not event_type or not isinstance(event_type, str):
        raise ValidationError("Notification type is required")
    if payment_id is None or payment_id == "":
        raise ValidationError("Notification data.id is required")
    if event_type == PAYMENT_EVENT_TYPE and not (str(payment_id).isascii() and str(payment_id).isdigit()):
        raise ValidationError("Payment id must be numeric")

    return PaymentNotification(
        provider_event_type=event_type,
        provider_payment_id=str(payment_id),
    )


class OrderPaymentReconciler:
    """
    Translates payment provider notifications into order status updates.

    The provider is the source of truth for the payment; the external order
    system owns the order. Nothing is stored here, so a redelivered
    notification is simply processed again.
    """

    def __init__(self, provider: PaymentProvider, order_system: OrderSystem) -> None:
        self._provider = provider
        self._order_system = order_system

    @track_reconciliation_duration
    async def handle_notification(self, notification: PaymentNotification) -> ReconciliationOutcome:
        log = logger.bind(
            event_type=notification.provider_event_type,
            payment_id=notification.provider_payment_id,
        )

        if not notification.provider_event_type or not notification.provider_payment_id:
            WEBHOOK_NOTIFICATIONS_TOTAL.labels(event_type="unknown", outcome="invalid").inc()
            raise ValidationError("Notification type and payment id are required")

        if notification.provider_event_type != PAYMENT_EVENT_TYPE:
            log.info("notification_ignored")
            WEBHOOK_NOTIFICATIONS_TOTAL.labels(event_type=OTHER_EVENT_TYPE, outcome="ignored").inc()
            return ReconciliationOutcome(handled=False, message="Notification type not handled")

        try:
            update = await self._reconcile(notification.provider_payment_id, log)
        except Exception:
            WEBHOOK_NOTIFICATIONS_TOTAL.labels(event_type=PAYMENT_EVENT_TYPE, outcome="error").inc()
            raise

        WEBHOOK_NOTIFICATIONS_TOTAL.labels(event_type=PAYMENT_EVENT_TYPE, outcome="reconciled").inc()
        return ReconciliationOutcome(handled=True, update=update)

    async def _reconcile(self, payment_id: str, log: structlog.stdlib.BoundLogger) -> OrderStatusUpdate:
        payment = await self._provider.fetch_payment(payment_id)
        log.info("payment_fetched", step="1/3", status=payment.status)

        order_id = payment.order_id
        if not order_id:
            log.error("payment_missing_order_reference", metadata=payment.metadata)
            raise MissingOrderReferenceError(payment_id)

        update = OrderStatusUpdate.from_payment(payment, order_id)
        log.info(
            "payment_status_mapped",
            step="2/3",
            order_id=order_id,
            payment_status=update.payment_status,
            status=update.internal_status.value,
        )

        await self._order_system.forward_payment_update(update)
        log.info("order_update_forwarded", step="3/3", order_id=order_id)
        return update
