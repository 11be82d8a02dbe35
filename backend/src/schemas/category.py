"""Pydantic schemas for category endpoints."""
from typing import Self

from pydantic import Field, model_validator

from schemas.validators import CamelModel, HexColor, OptionalText


class CategoryCreate(CamelModel):
    """Schema for creating a category. orderIndex is assigned as max+1."""

    name: str = Field(min_length=1, max_length=50)
    icon: OptionalText = Field(default=None, max_length=50)
    color: HexColor = None


class CategoryUpdate(CamelModel):
    """Schema for partially updating a category."""

    name: str | None = Field(default=None, min_length=1, max_length=50)
    icon: OptionalText = Field(default=None, max_length=50)
    color: HexColor = None
    order_index: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_required_fields_not_cleared(self) -> Self:
        """Reject an explicit null for name or orderIndex."""
        for field in ("name", "order_index"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"'{field}' cannot be null")
        return self


class CategoryResponse(CamelModel):
    """Schema for category responses."""

    id: str
    name: str
    icon: str | None
    color: str | None
    order_index: int
