"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Creation
writes the order and its lines inside one ``transaction.atomic()``
block; status updates rely on ``select_for_update()`` row locks taken
by the service.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.orders.exceptions import OrderDeletionForbidden
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

_RELATIONS = ("items", "status_history")


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        fields = dict(data)
        items = fields.pop("items", [])

        order = Order(**fields)
        order.save()

        total = Decimal("0.00")
        for item_data in items:
            item = OrderItem(order=order, **item_data)
            item.save()
            total += item.subtotal

        order.total_price = total
        order.save(update_fields=["total_price"])

        logger.info(
            "order.persisted",
            order_id=str(order.id),
            order_number=order.order_number,
            item_count=len(items),
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[Order]:
        """Retrieve an order with lines and history prefetched.

        Returns ``None`` for non-existent or malformed IDs.
        """
        try:
            return Order.objects.prefetch_related(*_RELATIONS).filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = (
            Order.objects.select_related("user")
            .prefetch_related("items")
            .order_by("-created_at", "-id")
        )
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def list_for_user(self, user_id: Any) -> List[Order]:
        return list(self.list({"user_id": user_id}))

    def get_for_update(self, id: Any) -> Optional[Order]:
        """Lock the order row; lines are loaded for the caller to iterate."""
        try:
            return (
                Order.objects.select_for_update()
                .prefetch_related(*_RELATIONS)
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_by_idempotency_key(self, user_id: Any, key: str) -> Optional[Order]:
        return (
            Order.objects.prefetch_related(*_RELATIONS)
            .filter(user_id=user_id, idempotency_key=key)
            .first()
        )

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        entity.save()
        return entity

    def delete(self, id: Any) -> bool:
        """Orders are never removed; cancellation is the terminal path."""
        raise OrderDeletionForbidden(f"Order {id} cannot be deleted; cancel it instead.")

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def add_history(
        self,
        order_id: Any,
        new_status: str,
        old_status: Optional[str] = None,
        changed_by_id: Optional[Any] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
            changed_by_id=changed_by_id,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=new_status,
        )
        return history
