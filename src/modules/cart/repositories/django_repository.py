"""Django ORM implementation of the Cart repository."""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.cart.models import Cart, CartItem
from modules.cart.repositories.interfaces import ICartRepository

logger = structlog.get_logger(__name__)


class CartDjangoRepository(ICartRepository):
    """Concrete Cart repository backed by Django ORM."""

    def _with_lines(self) -> models.QuerySet:
        return Cart.objects.prefetch_related("items__product")

    def get_by_id(self, id: Any) -> Optional[Cart]:
        try:
            return self._with_lines().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = self._with_lines()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Cart) -> Cart:
        entity.save()
        return entity

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        deleted, _ = Cart.objects.filter(id=id).delete()
        return deleted > 0

    # ------------------------------------------------------------------
    # Per-user access
    # ------------------------------------------------------------------

    def get_by_user(self, user_id: Any, for_update: bool = False) -> Optional[Cart]:
        queryset = self._with_lines()
        if for_update:
            queryset = queryset.select_for_update()
        return queryset.filter(user_id=user_id).first()

    def get_or_create_for_user(self, user_id: Any) -> Cart:
        cart = self.get_by_user(user_id, for_update=True)
        if cart is not None:
            return cart
        cart, created = Cart.objects.get_or_create(user_id=user_id)
        if created:
            logger.info("cart.created", user_id=user_id, cart_id=str(cart.id))
        return self.get_by_user(user_id, for_update=True) or cart

    def delete_for_user(self, user_id: Any) -> bool:
        # CASCADE removes the lines.
        deleted, _ = Cart.objects.filter(user_id=user_id).delete()
        return deleted > 0

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------

    def find_item(self, cart: Cart, product_id: Any, size: str) -> Optional[CartItem]:
        return (
            CartItem.objects.select_related("product")
            .filter(cart=cart, product_id=product_id, size=size)
            .first()
        )

    def get_item(self, cart: Cart, item_id: Any) -> Optional[CartItem]:
        try:
            return (
                CartItem.objects.select_related("product")
                .filter(cart=cart, id=item_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def save_item(self, item: CartItem) -> CartItem:
        item.save()
        return item

    def delete_item(self, item: CartItem) -> None:
        item.delete()
