# backend/aimak/articles/schemas.py
from ..models import CustomModel
from ..categories.schemas import CategoryOut
from ..tags.schemas import TagOut
from ..translation.schemas import Language
from ..users.schema import AuthorSummary
from .models import ArticleStatus
from pydantic import Field
from typing import Optional, List
from datetime import datetime


class ArticleCreate(CustomModel):
    title_kz: str = Field(..., min_length=1, max_length=500)
    content_kz: str = Field(..., min_length=1)
    excerpt_kz: Optional[str] = None
    title_ru: Optional[str] = Field(None, max_length=500)
    content_ru: Optional[str] = None
    excerpt_ru: Optional[str] = None
    cover_image: Optional[str] = Field(None, max_length=500)
    category_id: int
    tag_ids: List[int] = Field(default_factory=list)
    status: Optional[ArticleStatus] = None
    published: Optional[bool] = None
    is_breaking: bool = False
    is_featured: bool = False
    is_pinned: bool = False
    allow_comments: bool = True
    auto_translate: bool = Field(True, description="Fill missing Russian fields by machine translation")


class ArticleUpdate(CustomModel):
    title_kz: Optional[str] = Field(None, min_length=1, max_length=500)
    content_kz: Optional[str] = Field(None, min_length=1)
    excerpt_kz: Optional[str] = None
    title_ru: Optional[str] = Field(None, max_length=500)
    content_ru: Optional[str] = None
    excerpt_ru: Optional[str] = None
    cover_image: Optional[str] = Field(None, max_length=500)
    category_id: Optional[int] = None
    tag_ids: Optional[List[int]] = Field(None, description="Replaces the tag set when present")
    status: Optional[ArticleStatus] = None
    published: Optional[bool] = None
    is_breaking: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_pinned: Optional[bool] = None
    allow_comments: Optional[bool] = None


class ArticleOut(CustomModel):
    id: int
    title_kz: str
    slug_kz: str
    content_kz: str
    excerpt_kz: Optional[str] = None
    title_ru: Optional[str] = None
    slug_ru: Optional[str] = None
    content_ru: Optional[str] = None
    excerpt_ru: Optional[str] = None
    cover_image: Optional[str] = None
    status: ArticleStatus
    published: bool
    is_breaking: bool
    is_featured: bool
    is_pinned: bool
    allow_comments: bool
    published_at: Optional[datetime] = None
    views: int
    category: Optional[CategoryOut] = None
    author: Optional[AuthorSummary] = None
    tags: List[TagOut] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaginationMeta(CustomModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ArticleListResponse(CustomModel):
    data: List[ArticleOut]
    meta: PaginationMeta


class DeleteManyRequest(CustomModel):
    ids: List[int] = Field(..., min_length=1)


class DeleteManyResponse(CustomModel):
    deleted: int
    deleted_ids: List[int] = Field(default_factory=list)
    not_found: List[int] = Field(default_factory=list)
    forbidden: List[int] = Field(default_factory=list)


# ---- AI advisory payloads (never persisted) ----

class ArticleText(CustomModel):
    """Article body as the editor currently has it in the form; may be unsaved."""
    title_kz: str = Field(..., min_length=1)
    content_kz: str = Field(..., min_length=1)
    excerpt_kz: Optional[str] = None
    title_ru: Optional[str] = None
    content_ru: Optional[str] = None
    excerpt_ru: Optional[str] = None


class CategorizeResponse(CustomModel):
    category_slug: Optional[str] = None
    category: Optional[CategoryOut] = None


class TagSuggestion(CustomModel):
    name_kz: str
    name_ru: str


class TagSuggestionResult(CustomModel):
    existing: List[TagOut] = Field(default_factory=list)
    suggested: List[TagSuggestion] = Field(default_factory=list)


class AnalyzeArticleRequest(ArticleText):
    language: Language = Field(Language.KAZAKH, description="Working language of the editor; the critique is written in it")


class ArticleImprovements(CustomModel):
    title: str = ""
    excerpt: str = ""


class ArticleAnalysis(CustomModel):
    score: int = Field(..., ge=0, le=10)
    summary: str = ""
    suggestions: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    improvements: ArticleImprovements = Field(default_factory=ArticleImprovements)


class CategorizeAllStats(CustomModel):
    total: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0


class CategorizeAllResponse(CustomModel):
    success: bool
    message: str
    stats: CategorizeAllStats = Field(default_factory=CategorizeAllStats)
