"""Product domain exceptions.

Raised by the Service Layer (and the stock validator) when business
rules are violated.  The API layer catches these and translates them
into HTTP responses.
"""

from __future__ import annotations


class ProductNotFound(Exception):
    """The requested product does not exist or has been soft-deleted."""


class InvalidSize(Exception):
    """The requested size is not offered for the product."""


class InsufficientStock(Exception):
    """Not enough units in stock to satisfy a request.

    Carries the product name and the exact quantities so the API can
    return them to the client.
    """

    def __init__(self, product_name: str, available: int, requested: int) -> None:
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f'"{product_name}" only has {available} units left in stock.'
        )
