"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.  Methods
return ``None`` / ``False`` instead of raising for missing rows; the
Service Layer decides whether that is an error.

Stock mutations are single conditional ``UPDATE`` statements built with
``F()`` expressions, so concurrent writers can never push stock below
zero even without a prior lock.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: Any) -> Optional[Product]:
        """Retrieve a live product by primary key.

        Returns ``None`` for non-existent, deleted or malformed IDs.
        """
        try:
            return Product.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        """List live products with optional Django ORM look-ups.

        Examples of valid filters::

            {"category": "Men"}
            {"price__lte": 1999}
        """
        queryset = Product.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        entity.save()
        logger.info("product.saved", product_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        """Soft-delete a product. ``False`` if no live product matched."""
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        return True

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    def get_for_update(self, id: Any) -> Optional[Product]:
        try:
            return Product.objects.alive().select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def lock_many(self, ids: Iterable[Any]) -> Dict[Any, Product]:
        # Rows are always locked in primary-key order.
        locked = (
            Product.objects.alive()
            .select_for_update()
            .filter(id__in=set(ids))
            .order_by("id")
        )
        return {product.id: product for product in locked}

    # ------------------------------------------------------------------
    # Atomic stock updates
    # ------------------------------------------------------------------

    def decrement_stock(self, id: Any, quantity: int) -> bool:
        updated = (
            Product.objects.alive()
            .filter(id=id, stock_quantity__gte=quantity)
            .update(
                stock_quantity=F("stock_quantity") - quantity,
                updated_at=timezone.now(),
            )
        )
        return updated == 1

    def increment_stock(self, id: Any, quantity: int) -> bool:
        # Deleted products still get their units back for bookkeeping.
        updated = Product.objects.filter(id=id).update(
            stock_quantity=F("stock_quantity") + quantity,
            updated_at=timezone.now(),
        )
        return updated == 1

    def get_stock(self, id: Any) -> Optional[int]:
        return (
            Product.objects.alive()
            .filter(id=id)
            .values_list("stock_quantity", flat=True)
            .first()
        )
