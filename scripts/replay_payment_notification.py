#!/usr/bin/env python3
"""Replay a Mercado Pago payment notification.

Runs the same reconciliation as the webhook for one or more payment ids,
for example after the order API was down while notifications arrived.
"""
import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import structlog

from storefront_service.application.reconciliation import OrderPaymentReconciler
from storefront_service.config import settings
from storefront_service.domain.exceptions import DomainError
from storefront_service.domain.models import PaymentNotification
from storefront_service.infrastructure.external_api import ExternalApiClient
from storefront_service.infrastructure.http import create_http_client
from storefront_service.infrastructure.mercadopago import MercadoPagoClient
from storefront_service.logging import configure_logging


logger = structlog.get_logger()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("payment_ids", nargs="+", help="Mercado Pago payment ids")
    parser.add_argument(
        "--event-type",
        default="payment",
        help="notification type to replay (default: payment)",
    )
    return parser.parse_args(argv)


async def replay(reconciler: OrderPaymentReconciler, payment_ids: list[str], event_type: str) -> int:
    """Reconcile each payment id and return the number of failures."""
    failures = 0
    for payment_id in payment_ids:
        notification = PaymentNotification(provider_event_type=event_type, provider_payment_id=payment_id)
        try:
            outcome = await reconciler.handle_notification(notification)
        except DomainError as e:
            failures += 1
            logger.error("replay_failed", payment_id=payment_id, error=str(e))
            continue

        if outcome.update:
            logger.info(
                "replay_reconciled",
                payment_id=payment_id,
                order_id=outcome.update.order_id,
                status=outcome.update.internal_status.value,
            )
        else:
            logger.info("replay_ignored", payment_id=payment_id, message=outcome.message)
    return failures


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(level=settings.log_level, log_format="console")

    async with create_http_client(settings.http_timeout_seconds) as http_client:
        reconciler = OrderPaymentReconciler(
            provider=MercadoPagoClient(
                http_client,
                access_token=settings.mercadopago_access_token,
                api_base=settings.mercadopago_api_base,
            ),
            order_system=ExternalApiClient(http_client, api_base=settings.api_base),
        )
        failures = await replay(reconciler, args.payment_ids, args.event_type)

    logger.info("replay_finished", total=len(args.payment_ids), failures=failures)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
