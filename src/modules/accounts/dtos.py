"""Account DTOs for the Service Layer.

Pydantic v2 contracts between the API layer and ``AccountService``.
DTOs are immutable (``frozen=True``).

- ``SignupDTO``: input for account creation.
- ``CreateAddressDTO``: input for adding an address-book entry.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class SignupDTO(BaseModel):
    """Immutable DTO for signup requests.

    ``email`` is normalised to lower case; ``password`` needs at least
    six characters.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=150)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.lower()


class CreateAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    street: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    postal_code: str = Field(min_length=1, max_length=20)
    label: str = Field(default="Home", max_length=50)
    country: str = Field(default="India", min_length=1, max_length=100)
    is_default: bool = False
