"""Cart repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.cart.models import Cart, CartItem


class ICartRepository(IRepository["Cart"]):
    """Repository contract for the per-user Cart aggregate.

    Lines (``CartItem``) are only reached through their cart.
    """

    @abstractmethod
    def get_by_user(self, user_id: Any, for_update: bool = False) -> Optional[Cart]:
        """The user's cart with lines and their products prefetched."""

    @abstractmethod
    def get_or_create_for_user(self, user_id: Any) -> Cart:
        """The user's cart, created empty (and row-locked) if missing."""

    @abstractmethod
    def find_item(self, cart: Cart, product_id: Any, size: str) -> Optional[CartItem]:
        """The line for ``(product, size)`` in ``cart``, if present."""

    @abstractmethod
    def get_item(self, cart: Cart, item_id: Any) -> Optional[CartItem]:
        """A line of ``cart`` by id."""

    @abstractmethod
    def save_item(self, item: CartItem) -> CartItem:
        """Persist a line."""

    @abstractmethod
    def delete_item(self, item: CartItem) -> None:
        """Remove a line from its cart."""

    @abstractmethod
    def delete_for_user(self, user_id: Any) -> bool:
        """Delete the user's cart and its lines. ``False`` if there was none."""
