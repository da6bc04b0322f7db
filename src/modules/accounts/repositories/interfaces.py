"""Account repository interfaces.

``IAddressRepository`` exposes the owner-scoped look-ups the order
engine needs when resolving a shipping address.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractBaseUser

    from modules.accounts.models import Address


class IUserRepository(ABC):
    """Repository contract for storefront users."""

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[AbstractBaseUser]:
        """Retrieve a user by primary key."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[AbstractBaseUser]:
        """Retrieve a user by email (case-insensitive)."""

    @abstractmethod
    def create_user(self, email: str, password: str, name: str) -> AbstractBaseUser:
        """Create a customer account with a hashed password."""


class IAddressRepository(IRepository["Address"]):
    """Repository contract for the address book."""

    @abstractmethod
    def get_for_user(self, user_id: Any, address_id: Any) -> Optional[Address]:
        """Retrieve an address only if it belongs to ``user_id``."""

    @abstractmethod
    def get_default(self, user_id: Any) -> Optional[Address]:
        """Retrieve the user's default address, if any."""

    @abstractmethod
    def list_for_user(self, user_id: Any) -> List[Address]:
        """All addresses of a user, default first."""

    @abstractmethod
    def clear_default(self, user_id: Any) -> int:
        """Unset ``is_default`` on every address of the user."""
