"""Unit tests for the order event handlers and their wiring."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

import pytest

from modules.orders.events import (
    BulkQuoteRequested,
    OrderCancelled,
    OrderCreated,
    OrderStatusChanged,
)
from modules.orders.handlers import (
    bulk_quote_requested_handler,
    order_cancelled_handler,
    order_created_handler,
    order_status_changed_handler,
)
from shared.infrastructure.bus import event_bus

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "event,handler,event_name",
    [
        (
            OrderCreated(
                aggregate_id=uuid4(), user_id=1, total_price=Decimal("10"), is_bulk=False
            ),
            order_created_handler,
            "order.event.created",
        ),
        (
            BulkQuoteRequested(aggregate_id=uuid4(), user_id=1, total_quantity=60),
            bulk_quote_requested_handler,
            "order.event.bulk_quote_requested",
        ),
        (
            OrderStatusChanged(
                aggregate_id=uuid4(), old_status="Pending", new_status="Confirmed"
            ),
            order_status_changed_handler,
            "order.event.status_changed",
        ),
        (
            OrderCancelled(aggregate_id=uuid4(), stock_restored=True),
            order_cancelled_handler,
            "order.event.cancelled",
        ),
    ],
)
def test_handlers_log_the_event(event, handler, event_name):
    with patch("modules.orders.handlers.logger") as logger:
        handler.handle(event)

    logger.info.assert_called_once()
    args, kwargs = logger.info.call_args
    assert args == (event_name,)
    assert kwargs["aggregate_id"] == str(event.aggregate_id)


def test_app_ready_subscribes_the_handlers():
    with patch("modules.orders.handlers.logger") as logger:
        event_bus.publish(
            OrderCancelled(aggregate_id=uuid4(), cancelled_by=1, stock_restored=False)
        )

    assert logger.info.call_args.args == ("order.event.cancelled",)
