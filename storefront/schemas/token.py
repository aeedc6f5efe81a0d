"""Token Schemas — login and extend bodies."""

from pydantic import BaseModel, Field, field_validator

from storefront.core.domain_types import EMAIL_PATTERN


class TokenCreate(BaseModel):
    email: str = Field(max_length=254)
    password: str = Field(min_length=1, max_length=1000)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("must be a valid email address")
        return v

    @field_validator("password")
    @classmethod
    def strip_password(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("password cannot be empty or whitespace")
        return v


class TokenExtend(BaseModel):
    """Extend request — `extend` must be literally true."""
    extend: bool = Field(strict=True)

    @field_validator("extend")
    @classmethod
    def must_be_true(cls, v: bool) -> bool:
        if not v:
            raise ValueError("extend must be true")
        return v
