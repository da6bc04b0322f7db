"""Cart and CartItem models.

Business rules implemented:
- Exactly one cart per user (one-to-one).
- At most one line per (cart, product, size); repeated additions grow
  the existing line instead.
- ``price_at_addition`` snapshots the catalog price when the line is
  first created and is never refreshed afterwards.
- Lines are deleted with their cart.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.products.models import ProductSize


class Cart(BaseModel):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cart",
    )

    class Meta:
        db_table = "carts"

    # ------------------------------------------------------------------
    # Derived totals
    # ------------------------------------------------------------------

    @property
    def lines(self) -> list[CartItem]:
        return list(self.items.all())

    @property
    def total_price(self) -> Decimal:
        return sum(
            (item.line_total for item in self.lines),
            Decimal("0.00"),
        )

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def __str__(self) -> str:
        return f"Cart of user {self.user_id}"


class CartItem(BaseModel):
    cart = models.ForeignKey(
        "cart.Cart",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="cart_items",
    )
    size = models.CharField(max_length=10, choices=ProductSize.choices)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price_at_addition = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        db_table = "cart_items"
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["cart", "product", "size"],
                name="cart_items_unique_product_size",
            ),
            models.CheckConstraint(
                check=models.Q(quantity__gte=1),
                name="cart_items_quantity_positive",
            ),
        ]

    @property
    def line_total(self) -> Decimal:
        return self.price_at_addition * self.quantity

    def __str__(self) -> str:
        return f"{self.product_id} [{self.size}] x{self.quantity}"
