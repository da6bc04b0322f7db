"""Product repository interface.

Extends ``IRepository[Product]`` with the row-locking and atomic stock
operations the cart and the order engine rely on.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate.

    Every look-up ignores soft-deleted rows.
    """

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        """List live products with optional filters."""

    @abstractmethod
    def get_for_update(self, id: Any) -> Optional["Product"]:
        """Retrieve a product with a row-level lock (SELECT FOR UPDATE).

        Returns ``None`` if the product does not exist.
        """

    @abstractmethod
    def lock_many(self, ids: Iterable[Any]) -> Dict[Any, "Product"]:
        """Row-lock several products in primary-key order.

        Returns the locked products keyed by id; missing ids are absent.
        """

    @abstractmethod
    def decrement_stock(self, id: Any, quantity: int) -> bool:
        """Conditionally subtract ``quantity`` from stock.

        Executes ``UPDATE ... SET stock = stock - q WHERE id = ? AND
        stock >= q``.  Returns ``False`` when no row qualified.
        """

    @abstractmethod
    def increment_stock(self, id: Any, quantity: int) -> bool:
        """Atomically add ``quantity`` back to stock."""

    @abstractmethod
    def get_stock(self, id: Any) -> Optional[int]:
        """Current stock as stored in the database (fresh read)."""
