"""Account service layer (Use Cases).

Signup and address-book management.  Token issuance is handled by
SimpleJWT; this service only creates the accounts it authenticates.

Business rules enforced here:
- Email addresses are unique (case-insensitive).
- At most one default address per user.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List

import structlog
from django.db import IntegrityError, transaction

from modules.accounts.exceptions import AddressNotFound, EmailAlreadyRegistered
from modules.accounts.models import Address

if TYPE_CHECKING:
    from modules.accounts.dtos import CreateAddressDTO, SignupDTO
    from modules.accounts.repositories.interfaces import (
        IAddressRepository,
        IUserRepository,
    )

logger = structlog.get_logger(__name__)


class AccountService:
    def __init__(
        self,
        user_repository: IUserRepository,
        address_repository: IAddressRepository,
    ) -> None:
        self._user_repo = user_repository
        self._address_repo = address_repository

    # ------------------------------------------------------------------
    # Signup
    # ------------------------------------------------------------------

    @transaction.atomic
    def signup(self, dto: SignupDTO):
        """Create a customer account.

        Raises:
            EmailAlreadyRegistered: if the email is taken.
        """
        if self._user_repo.get_by_email(dto.email):
            logger.warning("account.duplicate_email")
            raise EmailAlreadyRegistered("Email is already registered.")

        try:
            with transaction.atomic():
                user = self._user_repo.create_user(
                    email=dto.email, password=dto.password, name=dto.name
                )
        except IntegrityError as exc:
            # Lost a race with a concurrent signup for the same email.
            raise EmailAlreadyRegistered("Email is already registered.") from exc

        logger.info("account.signed_up", user_id=user.pk)
        return user

    # ------------------------------------------------------------------
    # Address book
    # ------------------------------------------------------------------

    def list_addresses(self, user_id: Any) -> List[Address]:
        return self._address_repo.list_for_user(user_id)

    @transaction.atomic
    def add_address(self, user_id: Any, dto: CreateAddressDTO) -> Address:
        """Append an address; a new default replaces the previous one."""
        if dto.is_default:
            self._address_repo.clear_default(user_id)

        address = Address(user_id=user_id, **dto.model_dump())
        address = self._address_repo.save(address)
        logger.info(
            "account.address_added",
            user_id=user_id,
            address_id=str(address.id),
            is_default=address.is_default,
        )
        return address

    @transaction.atomic
    def set_default_address(self, user_id: Any, address_id: Any) -> Address:
        """Mark one of the user's addresses as the default.

        Raises:
            AddressNotFound: if the address is absent or not the user's.
        """
        address = self._address_repo.get_for_user(user_id, address_id)
        if not address:
            raise AddressNotFound(f"Address {address_id} not found.")

        self._address_repo.clear_default(user_id)
        address.is_default = True
        address = self._address_repo.save(address)
        logger.info(
            "account.default_address_set",
            user_id=user_id,
            address_id=str(address.id),
        )
        return address

    @transaction.atomic
    def delete_address(self, user_id: Any, address_id: Any) -> None:
        """Remove an address.  Deleting the default leaves the user without one.

        Raises:
            AddressNotFound: if the address is absent or not the user's.
        """
        address = self._address_repo.get_for_user(user_id, address_id)
        if not address:
            raise AddressNotFound(f"Address {address_id} not found.")
        self._address_repo.delete(address.id)
        logger.info(
            "account.address_deleted",
            user_id=user_id,
            address_id=str(address_id),
        )
