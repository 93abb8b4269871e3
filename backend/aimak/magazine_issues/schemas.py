# backend/aimak/magazine_issues/schemas.py
from datetime import date, datetime
from typing import Optional

from pydantic import Field, model_validator

from ..models import CustomModel
from ..users.schema import AuthorSummary


class MagazineIssueCreate(CustomModel):
    issue_number: int = Field(..., ge=1)
    publish_date: date
    year: Optional[int] = Field(None, ge=1900, le=2100, description="Defaults to publish_date.year")
    month: Optional[int] = Field(None, ge=1, le=12, description="Defaults to publish_date.month")
    title_kz: str = Field(..., min_length=1, max_length=255)
    title_ru: str = Field(..., min_length=1, max_length=255)
    description_kz: Optional[str] = None
    description_ru: Optional[str] = None
    pdf_url: str = Field(..., min_length=1, max_length=500)
    pdf_filename: Optional[str] = Field(None, max_length=255)
    file_size: Optional[int] = Field(None, ge=0)
    pages_count: Optional[int] = Field(None, ge=1)
    cover_image_url: Optional[str] = Field(None, max_length=500)
    is_published: bool = True
    is_pinned: bool = False

    @model_validator(mode="after")
    def fill_period_from_publish_date(self):
        if self.year is None:
            self.year = self.publish_date.year
        if self.month is None:
            self.month = self.publish_date.month
        return self


class MagazineIssueUpdate(CustomModel):
    issue_number: Optional[int] = Field(None, ge=1)
    publish_date: Optional[date] = None
    year: Optional[int] = Field(None, ge=1900, le=2100)
    month: Optional[int] = Field(None, ge=1, le=12)
    title_kz: Optional[str] = Field(None, min_length=1, max_length=255)
    title_ru: Optional[str] = Field(None, min_length=1, max_length=255)
    description_kz: Optional[str] = None
    description_ru: Optional[str] = None
    pdf_url: Optional[str] = Field(None, min_length=1, max_length=500)
    pdf_filename: Optional[str] = Field(None, max_length=255)
    file_size: Optional[int] = Field(None, ge=0)
    pages_count: Optional[int] = Field(None, ge=1)
    cover_image_url: Optional[str] = Field(None, max_length=500)
    is_published: Optional[bool] = None
    is_pinned: Optional[bool] = None


class MagazineIssueOut(CustomModel):
    id: int
    issue_number: int
    year: int
    month: int
    publish_date: date
    title_kz: str
    title_ru: str
    description_kz: Optional[str] = None
    description_ru: Optional[str] = None
    pdf_url: str
    pdf_filename: Optional[str] = None
    file_size: Optional[int] = None
    pages_count: Optional[int] = None
    cover_image_url: Optional[str] = None
    is_published: bool
    is_pinned: bool
    views_count: int
    downloads_count: int
    uploaded_by: Optional[AuthorSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
