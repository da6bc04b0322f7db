"""Product catalog model.

Business rules implemented:
- Price is never negative; discount is a percentage between 0 and 100.
- Stock quantity cannot be negative (database check constraint; the
  stock validator only ever decrements conditionally).
- ``sizes`` is a non-empty subset of ``ProductSize``.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel); a
  deleted product is gone for the catalog, cart and checkout.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)


class ProductCategory(models.TextChoices):
    MEN = "Men", "Men"
    WOMEN = "Women", "Women"
    KIDS = "Kids", "Kids"
    ACCESSORIES = "Accessories", "Accessories"
    FOOTWEAR = "Footwear", "Footwear"


class ProductSize(models.TextChoices):
    XS = "XS", "XS"
    S = "S", "S"
    M = "M", "M"
    L = "L", "L"
    XL = "XL", "XL"
    XXL = "XXL", "XXL"
    FREE_SIZE = "Free Size", "Free Size"


class Product(SoftDeleteModel):
    """Catalog entry.

    ``images`` holds a list of ``{"url": ..., "alt_text": ...}`` objects.
    ``stock_quantity`` is mutated by admin CRUD and by
    ``modules.products.stock.StockValidator``; checkout never writes it
    through ``save()``.
    """

    name = models.CharField(max_length=255)
    description = models.TextField()
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    category = models.CharField(max_length=20, choices=ProductCategory.choices)
    sub_category = models.CharField(max_length=100, blank=True, default="")
    sizes = models.JSONField(default=list)
    stock_quantity = models.PositiveIntegerField(default=0)
    images = models.JSONField(default=list, blank=True)
    is_featured = models.BooleanField(default=False)
    discount = models.PositiveSmallIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )

    class Meta:
        db_table = "products"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["category"], name="products_category_idx"),
            models.Index(fields=["price"], name="products_price_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                check=models.Q(price__gte=0),
                name="products_price_non_negative",
            ),
            models.CheckConstraint(
                check=models.Q(stock_quantity__gte=0),
                name="products_stock_non_negative",
            ),
            models.CheckConstraint(
                check=models.Q(discount__gte=0) & models.Q(discount__lte=100),
                name="products_discount_percentage",
            ),
        ]

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def discounted_price(self) -> Decimal:
        """``price * (1 - discount / 100)`` rounded to cents."""
        factor = Decimal(100 - (self.discount or 0)) / Decimal(100)
        return (Decimal(self.price) * factor).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )

    def offers_size(self, size: str) -> bool:
        return size in (self.sizes or [])

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if not self.sizes:
            raise ValidationError({"sizes": "At least one size is required."})
        unknown = set(self.sizes) - set(ProductSize.values)
        if unknown:
            raise ValidationError(
                {"sizes": f"Unknown sizes: {', '.join(sorted(unknown))}."}
            )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product.persisted",
                product_id=str(self.id),
                name=self.name,
                category=self.category,
            )

    def __str__(self) -> str:
        return f"{self.name} ({self.category})"
