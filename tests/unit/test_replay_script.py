"""Unit tests for the payment notification replay script."""

from unittest.mock import AsyncMock, patch

import pytest

from scripts.replay_payment_notification import main, parse_args, replay
from storefront_service.application.reconciliation import ReconciliationOutcome
from storefront_service.domain.exceptions import MissingOrderReferenceError, ProviderFetchError
from storefront_service.domain.models import InternalOrderStatus, OrderStatusUpdate


def reconciled(order_id: str = "order-001") -> ReconciliationOutcome:
    update = OrderStatusUpdate(
        order_id=order_id,
        payment_id="1",
        payment_status="approved",
        internal_status=InternalOrderStatus.SUCCESS,
        metadata={"orderId": order_id},
    )
    return ReconciliationOutcome(handled=True, update=update)


class TestParseArgs:
    def test_multiple_ids(self) -> None:
        args = parse_args(["111", "222"])

        assert args.payment_ids == ["111", "222"]
        assert args.event_type == "payment"

    def test_event_type_override(self) -> None:
        assert parse_args(["111", "--event-type", "merchant_order"]).event_type == "merchant_order"

    def test_requires_payment_id(self) -> None:
        with pytest.raises(SystemExit):
            parse_args([])


class TestReplay:
    """Tests for replay()."""

    @pytest.mark.asyncio
    async def test_all_reconciled(self) -> None:
        reconciler = AsyncMock()
        reconciler.handle_notification = AsyncMock(return_value=reconciled())

        failures = await replay(reconciler, ["111", "222"], "payment")

        assert failures == 0
        notifications = [call.args[0] for call in reconciler.handle_notification.await_args_list]
        assert [n.provider_payment_id for n in notifications] == ["111", "222"]
        assert all(n.provider_event_type == "payment" for n in notifications)

    @pytest.mark.asyncio
    async def test_failures_are_counted_and_do_not_stop_the_run(self) -> None:
        reconciler = AsyncMock()
        reconciler.handle_notification = AsyncMock(
            side_effect=[
                ProviderFetchError("111", "HTTP 404"),
                reconciled(),
                MissingOrderReferenceError("333"),
            ]
        )

        with patch("scripts.replay_payment_notification.logger") as mock_logger:
            failures = await replay(reconciler, ["111", "222", "333"], "payment")

        assert failures == 2
        assert reconciler.handle_notification.await_count == 3
        assert mock_logger.error.call_count == 2

    @pytest.mark.asyncio
    async def test_ignored_notification_is_not_a_failure(self) -> None:
        reconciler = AsyncMock()
        reconciler.handle_notification = AsyncMock(
            return_value=ReconciliationOutcome(handled=False, message="Notification type not handled")
        )

        assert await replay(reconciler, ["111"], "merchant_order") == 0


class TestMain:
    """Tests for main() exit codes."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("failures", "exit_code"), [(0, 0), (2, 1)])
    async def test_exit_code(self, failures: int, exit_code: int) -> None:
        with (
            patch("scripts.replay_payment_notification.configure_logging"),
            patch("scripts.replay_payment_notification.replay", AsyncMock(return_value=failures)) as mock_replay,
        ):
            assert await main(["111", "222"]) == exit_code

        assert mock_replay.await_args.args[1] == ["111", "222"]
