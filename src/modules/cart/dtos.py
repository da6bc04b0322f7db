"""Cart DTOs for the Service Layer (Pydantic v2, immutable)."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AddCartItemDTO(BaseModel):
    """A request to put ``quantity`` units of one product size in the cart."""

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int = Field(default=1, ge=1)
    size: str = Field(min_length=1)


class UpdateCartItemDTO(BaseModel):
    """New quantity for a line; zero or less removes the line."""

    model_config = ConfigDict(frozen=True)

    quantity: int
