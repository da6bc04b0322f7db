"""Stock validation and mutation for catalog products.

``StockValidator`` is the only code path that changes stock outside of
admin product edits.  Deduction is a conditional atomic update, so even
a caller that skipped ``check_availability`` (or read a stale value)
cannot oversell.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

import structlog

from modules.products.exceptions import InsufficientStock

if TYPE_CHECKING:
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class StockValidator:
    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    def check_availability(self, product: Product, requested: int) -> None:
        """Raise ``InsufficientStock`` unless ``requested`` units are on hand."""
        if requested > product.stock_quantity:
            logger.warning(
                "stock.insufficient",
                product_id=str(product.id),
                available=product.stock_quantity,
                requested=requested,
            )
            raise InsufficientStock(product.name, product.stock_quantity, requested)

    def deduct(
        self, product_id: Any, quantity: int, product_name: Optional[str] = None
    ) -> None:
        """Remove ``quantity`` units from stock or raise ``InsufficientStock``.

        The exception reports the availability read right after the
        rejected update.
        """
        if quantity < 1:
            raise ValueError("Quantity to deduct must be at least 1.")

        log = logger.bind(product_id=str(product_id), quantity=quantity)
        if self._repo.decrement_stock(product_id, quantity):
            log.info("stock.deducted")
            return

        available = self._repo.get_stock(product_id) or 0
        if product_name is None:
            product = self._repo.get_by_id(product_id)
            product_name = product.name if product else str(product_id)
        log.warning("stock.deduction_rejected", available=available)
        raise InsufficientStock(product_name, available, quantity)

    def restore(self, product_id: Any, quantity: int) -> None:
        """Give ``quantity`` units back to stock."""
        if quantity < 1:
            raise ValueError("Quantity to restore must be at least 1.")
        restored = self._repo.increment_stock(product_id, quantity)
        logger.info(
            "stock.restored",
            product_id=str(product_id),
            quantity=quantity,
            product_found=restored,
        )
