"""User Schemas — registration and profile update bodies.

Invariants:
    - Every string field is stripped; whitespace-only counts as missing
    - Wire names are camelCase (firstName, lastName); snake_case accepted too
    - UserUpdate fields are all optional; the service rejects an empty update
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.core.domain_types import EMAIL_PATTERN


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("cannot be empty or whitespace")
    return v


class UserCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName", max_length=200)
    last_name: str = Field(alias="lastName", max_length=200)
    email: str = Field(max_length=254)
    password: str = Field(max_length=1000)
    address: str = Field(max_length=1000)

    @field_validator("first_name", "last_name", "password", "address")
    @classmethod
    def strip_fields(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("must be a valid email address")
        return v


class UserUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str | None = Field(None, alias="firstName", max_length=200)
    last_name: str | None = Field(None, alias="lastName", max_length=200)
    password: str | None = Field(None, max_length=1000)
    address: str | None = Field(None, max_length=1000)

    @field_validator("first_name", "last_name", "password", "address")
    @classmethod
    def strip_optional(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None
