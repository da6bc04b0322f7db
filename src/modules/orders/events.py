"""Domain events for the Orders bounded context.

Published on the in-process bus after the surrounding transaction
commits.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class OrderCreated(DomainEvent):
    """An order was placed from a cart."""

    user_id: Any
    total_price: Decimal
    is_bulk: bool


@dataclass(frozen=True, kw_only=True)
class BulkQuoteRequested(DomainEvent):
    """A bulk order is waiting for an admin quote."""

    user_id: Any
    total_quantity: int
    note: str = ""


@dataclass(frozen=True, kw_only=True)
class OrderStatusChanged(DomainEvent):
    """An order moved to a new status."""

    old_status: str
    new_status: str
    changed_by: Optional[Any] = None


@dataclass(frozen=True, kw_only=True)
class OrderCancelled(DomainEvent):
    """An order was cancelled by its owner or an admin."""

    cancelled_by: Optional[Any] = None
    stock_restored: bool = False
