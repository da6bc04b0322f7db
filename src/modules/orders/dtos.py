"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  These are
the contracts between the API layer (DRF serializers) and the Service
layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderDTO``: checkout request (the lines come from the cart).
- ``UpdateOrderStatusDTO``: admin status transition.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.orders.constants import OrderStatus, PaymentMethod


class CreateOrderDTO(BaseModel):
    """Immutable DTO for checkout.

    ``address_id`` is optional: without it the user's default address is
    used.  ``bulk_order_note`` is kept only if the order turns out bulk.
    """

    model_config = ConfigDict(frozen=True)

    payment_method: str = PaymentMethod.ONLINE.value
    address_id: Optional[UUID] = None
    bulk_order_note: str = Field(default="", max_length=2000)
    idempotency_key: Optional[str] = Field(default=None, max_length=255)

    @field_validator("payment_method")
    @classmethod
    def payment_method_must_be_known(cls, v: str) -> str:
        if v not in PaymentMethod.values:
            raise ValueError(
                f"Payment method must be one of: {', '.join(PaymentMethod.values)}."
            )
        return v

    @field_validator("idempotency_key")
    @classmethod
    def blank_key_is_no_key(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


class UpdateOrderStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    tracking_number: Optional[str] = Field(default=None, max_length=100)
    notes: str = ""

    @field_validator("status")
    @classmethod
    def status_must_be_known(cls, v: str) -> str:
        if v not in OrderStatus.values:
            raise ValueError(
                f"Status must be one of: {', '.join(OrderStatus.values)}."
            )
        return v
