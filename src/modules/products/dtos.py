"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  These are
the contracts between the API layer (DRF serializers) and the Service
layer.  DTOs are immutable (``frozen=True``).

- ``ProductImageDTO``: one catalog image.
- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for partial product updates.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.products.models import ProductCategory, ProductSize


def _validate_sizes(sizes: List[str]) -> List[str]:
    if not sizes:
        raise ValueError("At least one size is required.")
    unknown = [s for s in sizes if s not in ProductSize.values]
    if unknown:
        raise ValueError(f"Unknown sizes: {', '.join(unknown)}.")
    # preserve the caller's order, drop duplicates
    return list(dict.fromkeys(sizes))


def _validate_category(category: str) -> str:
    if category not in ProductCategory.values:
        raise ValueError(
            f"Category must be one of: {', '.join(ProductCategory.values)}."
        )
    return category


class ProductImageDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    alt_text: str = ""


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``price`` is non-negative.
    - ``stock_quantity`` is non-negative.
    - ``discount`` is a percentage between 0 and 100.
    - ``category`` and every entry of ``sizes`` are known values.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category: str
    sizes: List[str]
    sub_category: str = ""
    stock_quantity: int = Field(default=0, ge=0)
    images: List[ProductImageDTO] = []
    is_featured: bool = False
    discount: int = Field(default=0, ge=0, le=100)

    @field_validator("category")
    @classmethod
    def category_must_be_known(cls, v: str) -> str:
        return _validate_category(v)

    @field_validator("sizes")
    @classmethod
    def sizes_must_be_known(cls, v: List[str]) -> List[str]:
        return _validate_sizes(v)


class UpdateProductDTO(BaseModel):
    """Immutable DTO for product update requests.

    All fields are optional; only supplied fields are applied.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    category: Optional[str] = None
    sizes: Optional[List[str]] = None
    sub_category: Optional[str] = None
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    images: Optional[List[ProductImageDTO]] = None
    is_featured: Optional[bool] = None
    discount: Optional[int] = Field(default=None, ge=0, le=100)

    @field_validator("category")
    @classmethod
    def category_must_be_known(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _validate_category(v)

    @field_validator("sizes")
    @classmethod
    def sizes_must_be_known(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return v if v is None else _validate_sizes(v)

    def changes(self) -> dict:
        """Fields explicitly supplied, images flattened to plain dicts."""
        return self.model_dump(exclude_none=True)
