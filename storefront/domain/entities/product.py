"""Product entity model."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.core.sanitize import clean_optional_text, normalize_image_path


class Product(BaseModel):
    """Catalog row as published by the spreadsheet API."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(..., min_length=1, description="Product ID (unique)")
    category: str = Field("", description="Catalog category")
    name: str = Field(..., min_length=1, description="Product name")
    unit: str = Field("шт", description="Unit label, e.g. kg or шт")
    price: Decimal = Field(..., ge=0, description="Unit price")
    sort: float = Field(0, description="Display ordering key")
    description: Optional[str] = Field(None, description="Optional description")
    image: Optional[str] = Field(None, description="Image URL or site path")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        """Numeric ids from the sheet become strings."""
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        return str(v).strip() if v is not None else ""

    @field_validator("category", "name", "unit", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("sort", mode="before")
    @classmethod
    def default_sort(cls, v: Any) -> Any:
        return 0 if v in (None, "") else v

    @field_validator("description", mode="before")
    @classmethod
    def clean_description(cls, v: Any) -> str | None:
        return clean_optional_text(v)

    @field_validator("image", mode="before")
    @classmethod
    def clean_image(cls, v: Any) -> str | None:
        return normalize_image_path(v)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary for caching."""
        return {
            "id": self.id,
            "category": self.category,
            "name": self.name,
            "unit": self.unit,
            "price": str(self.price),
            "sort": self.sort,
            "description": self.description,
            "image": self.image,
        }
