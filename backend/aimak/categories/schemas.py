# backend/aimak/categories/schemas.py
from datetime import datetime
from typing import Optional

from pydantic import Field

from ..models import CustomModel


class CategoryCreate(CustomModel):
    name_kz: str = Field(..., min_length=1, max_length=120, json_schema_extra={"example": "САЯСАТ"})
    name_ru: str = Field(..., min_length=1, max_length=120, json_schema_extra={"example": "ПОЛИТИКА"})
    slug: Optional[str] = Field(None, max_length=120, description="Derived from name_kz when omitted")
    description_kz: Optional[str] = None
    description_ru: Optional[str] = None
    sort_order: int = 0


class CategoryUpdate(CustomModel):
    name_kz: Optional[str] = Field(None, min_length=1, max_length=120)
    name_ru: Optional[str] = Field(None, min_length=1, max_length=120)
    slug: Optional[str] = Field(None, max_length=120)
    description_kz: Optional[str] = None
    description_ru: Optional[str] = None
    sort_order: Optional[int] = None


class CategoryOut(CustomModel):
    id: int
    slug: str
    name_kz: str
    name_ru: str
    description_kz: Optional[str] = None
    description_ru: Optional[str] = None
    sort_order: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CategoryWithCount(CategoryOut):
    articles_count: int = 0


class CategorySeedResult(CustomModel):
    created: int
    skipped: int
    total: int
