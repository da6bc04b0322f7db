"""Event handlers for Orders domain events.

Handlers only log for now; notification fan-out would subscribe here.
"""

from __future__ import annotations

import structlog

from modules.orders.events import (
    BulkQuoteRequested,
    OrderCancelled,
    OrderCreated,
    OrderStatusChanged,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info("order.event.created", **event.to_log_context())


class BulkQuoteRequestedHandler(IEventHandler[BulkQuoteRequested]):
    def handle(self, event: BulkQuoteRequested) -> None:
        logger.info("order.event.bulk_quote_requested", **event.to_log_context())


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info("order.event.status_changed", **event.to_log_context())


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info("order.event.cancelled", **event.to_log_context())


order_created_handler = OrderCreatedHandler()
bulk_quote_requested_handler = BulkQuoteRequestedHandler()
order_status_changed_handler = OrderStatusChangedHandler()
order_cancelled_handler = OrderCancelledHandler()
