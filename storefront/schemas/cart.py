"""Cart Schemas — add-line and change-quantity bodies."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CartItemAdd(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="product", max_length=254)
    quantity: int = Field(gt=0, strict=True)

    @field_validator("product_id")
    @classmethod
    def strip_product(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("product cannot be empty or whitespace")
        return v


class CartItemUpdate(BaseModel):
    quantity: int = Field(gt=0, strict=True)
