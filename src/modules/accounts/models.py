"""Address book owned by a storefront user.

Business rules implemented:
- An address belongs to exactly one user and is deleted with them.
- At most one default address per user (partial unique constraint; the
  service clears the previous default in the same transaction).
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel


class Address(BaseModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="addresses",
    )
    label = models.CharField(max_length=50, default="Home")
    street = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=100, default="India")
    is_default = models.BooleanField(default=False)

    class Meta:
        db_table = "addresses"
        ordering = ["-is_default", "created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user"],
                condition=models.Q(is_default=True),
                name="addresses_single_default_per_user",
            ),
        ]

    def snapshot(self) -> dict:
        """Plain value copy stored on orders."""
        return {
            "label": self.label,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
        }

    def __str__(self) -> str:
        return f"{self.label}: {self.street}, {self.city}"
