# backend/aimak/tags/schemas.py
from datetime import datetime
from typing import Optional

from pydantic import Field

from ..models import CustomModel


class TagCreate(CustomModel):
    name_kz: str = Field(..., min_length=1, max_length=120)
    name_ru: Optional[str] = Field(None, max_length=120, description="Falls back to name_kz")
    slug: Optional[str] = Field(None, max_length=120, description="Derived from name_kz when omitted")


class TagUpdate(CustomModel):
    name_kz: Optional[str] = Field(None, min_length=1, max_length=120)
    name_ru: Optional[str] = Field(None, min_length=1, max_length=120)
    slug: Optional[str] = Field(None, max_length=120)


class TagOut(CustomModel):
    id: int
    slug: str
    name_kz: str
    name_ru: str
    created_at: Optional[datetime] = None


class TagWithCount(TagOut):
    articles_count: int = 0
