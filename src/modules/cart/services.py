"""Cart service layer (Use Cases).

Maintains the single per-user cart.  Stock is checked at every
mutation point (add and quantity update) against the quantity the line
would end up holding; checkout re-validates it again because stock can
move between cart edits and the order.

Business rules enforced here:
- The product must exist and offer the requested size.
- One line per (product, size); repeated additions grow that line.
- The line price is the catalog price at the moment of the first add.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

import structlog
from django.db import transaction

from modules.cart.exceptions import CartItemNotFound, CartNotFound
from modules.cart.models import Cart, CartItem
from modules.products.exceptions import InvalidSize, ProductNotFound
from modules.products.stock import StockValidator

if TYPE_CHECKING:
    from modules.cart.dtos import AddCartItemDTO, UpdateCartItemDTO
    from modules.cart.repositories.interfaces import ICartRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class CartService:
    """Application service for the Cart aggregate.

    Receives repositories via constructor injection; the stock
    validator defaults to one built over the product repository.
    """

    def __init__(
        self,
        cart_repository: ICartRepository,
        product_repository: IProductRepository,
        stock_validator: Optional[StockValidator] = None,
    ) -> None:
        self._cart_repo = cart_repository
        self._product_repo = product_repository
        self._stock = stock_validator or StockValidator(product_repository)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_item(self, user_id: Any, dto: AddCartItemDTO) -> Cart:
        """Add units of a product size to the user's cart.

        Raises:
            ProductNotFound: the product does not exist.
            InvalidSize: the product is not sold in ``dto.size``.
            InsufficientStock: the resulting line quantity exceeds stock.
        """
        log = logger.bind(
            user_id=user_id,
            product_id=str(dto.product_id),
            size=dto.size,
            quantity=dto.quantity,
        )

        product = self._product_repo.get_by_id(dto.product_id)
        if not product:
            raise ProductNotFound(f"Product {dto.product_id} not found.")
        if not product.offers_size(dto.size):
            log.warning("cart.invalid_size", offered=product.sizes)
            raise InvalidSize(
                f'Size "{dto.size}" is not available for "{product.name}".'
            )

        cart = self._cart_repo.get_or_create_for_user(user_id)
        item = self._cart_repo.find_item(cart, product.id, dto.size)
        combined = dto.quantity + (item.quantity if item else 0)
        self._stock.check_availability(product, combined)

        if item:
            item.quantity = combined
        else:
            item = CartItem(
                cart_id=cart.id,
                product_id=product.id,
                size=dto.size,
                quantity=dto.quantity,
                price_at_addition=product.price,
            )
        self._cart_repo.save_item(item)

        log.info("cart.item_added", line_quantity=combined)
        return self._reload(user_id)

    @transaction.atomic
    def update_item(self, user_id: Any, item_id: Any, dto: UpdateCartItemDTO) -> Cart:
        """Set a line's quantity; zero or less removes the line.

        Raises:
            CartNotFound: the user has no cart.
            CartItemNotFound: the line is not in the cart.
            InsufficientStock: the new quantity exceeds stock.
        """
        cart, item = self._locate(user_id, item_id)
        log = logger.bind(user_id=user_id, item_id=str(item_id), quantity=dto.quantity)

        if dto.quantity <= 0:
            self._cart_repo.delete_item(item)
            log.info("cart.item_removed")
            return self._reload(user_id)

        product = self._product_repo.get_by_id(item.product_id)
        if not product:
            raise ProductNotFound(f"Product {item.product_id} not found.")
        self._stock.check_availability(product, dto.quantity)

        item.quantity = dto.quantity
        self._cart_repo.save_item(item)
        log.info("cart.item_updated")
        return self._reload(user_id)

    @transaction.atomic
    def remove_item(self, user_id: Any, item_id: Any) -> Cart:
        """Remove a line.

        Raises:
            CartNotFound: the user has no cart.
            CartItemNotFound: the line is not in the cart.
        """
        _, item = self._locate(user_id, item_id)
        self._cart_repo.delete_item(item)
        logger.info("cart.item_removed", user_id=user_id, item_id=str(item_id))
        return self._reload(user_id)

    @transaction.atomic
    def clear(self, user_id: Any) -> None:
        """Delete the user's cart. A missing cart is not an error."""
        deleted = self._cart_repo.delete_for_user(user_id)
        logger.info("cart.cleared", user_id=user_id, had_cart=deleted)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_cart(self, user_id: Any) -> Optional[Cart]:
        """The user's cart with product details, or ``None``."""
        return self._cart_repo.get_by_user(user_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _locate(self, user_id: Any, item_id: Any) -> tuple[Cart, CartItem]:
        cart = self._cart_repo.get_by_user(user_id, for_update=True)
        if not cart:
            raise CartNotFound("Cart not found.")
        item = self._cart_repo.get_item(cart, item_id)
        if not item:
            raise CartItemNotFound("Item not found in cart.")
        return cart, item

    def _reload(self, user_id: Any) -> Cart:
        # Re-fetch so prefetched lines reflect the mutation.
        return self._cart_repo.get_by_user(user_id)
