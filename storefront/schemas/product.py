"""Product Schemas — catalog create/update bodies.

Invariants:
    - price is a strict positive integer (cents); floats and numeric strings rejected
    - title stripped, non-empty
"""

from pydantic import BaseModel, Field, field_validator


class ProductCreate(BaseModel):
    title: str = Field(max_length=500)
    price: int = Field(gt=0, strict=True)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty or whitespace")
        return v


class ProductUpdate(BaseModel):
    title: str | None = Field(None, max_length=500)
    price: int | None = Field(None, gt=0, strict=True)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None
