"""Cart domain exceptions."""

from __future__ import annotations


class CartNotFound(Exception):
    """The user has no cart."""


class CartItemNotFound(Exception):
    """The line does not exist in the user's cart."""
