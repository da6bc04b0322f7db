"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.  The API
layer catches these and translates them into HTTP responses.  Stock
failures surface as ``modules.products.exceptions.InsufficientStock``
and missing addresses as the ``modules.accounts`` exceptions.
"""

from __future__ import annotations


class OrderNotFound(Exception):
    """The requested order does not exist."""


class InvalidOrderStatus(Exception):
    """An illegal status transition or cancellation was attempted."""


class OrderAccessDenied(Exception):
    """The caller may not see or act on this order."""


class EmptyCart(Exception):
    """Checkout attempted with no cart or a cart without lines."""


class ProductGone(Exception):
    """A product in the cart was deleted from the catalog."""


class OrderDeletionForbidden(Exception):
    """Orders are kept for their audit trail; cancel them instead."""
