"""Account and address-book domain exceptions."""

from __future__ import annotations


class EmailAlreadyRegistered(Exception):
    """Signup attempted with an email that already has an account."""


class AddressNotFound(Exception):
    """The address does not exist or belongs to another user."""


class NoAddressAvailable(Exception):
    """Checkout without an explicit address and no default address set."""
