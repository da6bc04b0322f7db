"""Django ORM implementations of the account repositories."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.accounts.models import Address
from modules.accounts.repositories.interfaces import (
    IAddressRepository,
    IUserRepository,
)

logger = structlog.get_logger(__name__)


class UserDjangoRepository(IUserRepository):
    """Users are Django's auth users; ``username`` mirrors the email."""

    def get_by_id(self, id: Any):
        return get_user_model().objects.filter(pk=id).first()

    def get_by_email(self, email: str):
        return get_user_model().objects.filter(email__iexact=email).first()

    def create_user(self, email: str, password: str, name: str):
        user = get_user_model().objects.create_user(
            username=email,
            email=email,
            password=password,
            first_name=name,
        )
        logger.info("account.user_saved", user_id=user.pk)
        return user


class AddressDjangoRepository(IAddressRepository):
    """Concrete address-book repository backed by Django ORM."""

    def get_by_id(self, id: Any) -> Optional[Address]:
        try:
            return Address.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = Address.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Address) -> Address:
        entity.save()
        return entity

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        address = self.get_by_id(id)
        if not address:
            return False
        address.delete()
        return True

    # ------------------------------------------------------------------
    # Owner-scoped look-ups
    # ------------------------------------------------------------------

    def get_for_user(self, user_id: Any, address_id: Any) -> Optional[Address]:
        try:
            return Address.objects.filter(id=address_id, user_id=user_id).first()
        except (ValueError, ValidationError):
            return None

    def get_default(self, user_id: Any) -> Optional[Address]:
        return Address.objects.filter(user_id=user_id, is_default=True).first()

    def list_for_user(self, user_id: Any) -> List[Address]:
        return list(Address.objects.filter(user_id=user_id))

    def clear_default(self, user_id: Any) -> int:
        return Address.objects.filter(user_id=user_id, is_default=True).update(
            is_default=False
        )
