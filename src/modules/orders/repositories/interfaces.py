"""Order repository interface.

Extends ``IRepository[Order]`` with the aggregate-level operations the
order engine needs: atomic creation with lines, row locking, status
history and idempotency-key look-up.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes ``OrderItem`` lines and
    ``OrderStatusHistory`` records.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its lines atomically.

        ``data`` carries the order fields plus ``items``: a list of dicts
        with ``product_id``, ``name``, ``size``, ``quantity`` and
        ``price_at_purchase``.  ``total_price`` is computed from the lines.
        """

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Order]":
        """List orders, newest first, with optional filters."""

    @abstractmethod
    def list_for_user(self, user_id: Any) -> List[Order]:
        """All orders of a user, newest first."""

    @abstractmethod
    def get_for_update(self, id: Any) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def get_by_idempotency_key(self, user_id: Any, key: str) -> Optional[Order]:
        """Retrieve the user's order created with ``key``."""

    @abstractmethod
    def add_history(
        self,
        order_id: Any,
        new_status: str,
        old_status: Optional[str] = None,
        changed_by_id: Optional[Any] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""
