from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from api.attendance.lateness import ensure_utc


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    sort_order: int = Field(100, validation_alias=AliasChoices("sort_order", "sortOrder"))

    @field_validator("name", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    sort_order: Optional[int] = Field(None, validation_alias=AliasChoices("sort_order", "sortOrder"))

    @field_validator("name", mode="before")
    @classmethod
    def _strip(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v


class CategoryOut(BaseModel):
    id: str
    name: str
    slug: str
    sort_order: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class MenuItemOut(BaseModel):
    id: str
    name: str
    price: float
    image_url: Optional[str] = None
    active: bool
    sort_order: int
    created_at: datetime
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    category_slug: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @classmethod
    def from_item(cls, item) -> "MenuItemOut":
        out = cls.model_validate(item)
        if item.category is not None:
            out.category_name = item.category.name
            out.category_slug = item.category.slug
        return out
