"""The authenticated caller, passed explicitly into service operations.

Services never read ``request.user``; views build a ``Principal`` from
the authenticated user and hand it down, so ownership and role checks
are visible in every service signature.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Principal:
    user_id: int
    is_admin: bool = False

    @classmethod
    def from_user(cls, user: Any) -> Principal:
        """Admins are staff users (``is_staff``); everyone else is a customer."""
        return cls(user_id=user.pk, is_admin=bool(user.is_staff))

    def owns(self, owner_id: Any) -> bool:
        return owner_id == self.user_id
