# backend/aimak/articles/router.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..auth.dependencies import EditorUser, require_admin, require_editor
from ..categories import service as category_service
from ..categories.schemas import CategoryOut
from ..database import SessionDep
from ..tags import service as tag_service
from ..translation.dependencies import TranslatorDep
from ..users.models import User
from .dependencies import AnalystDep, CategorizerDep, TagAdvisorDep
from .models import ArticleStatus
from .schemas import (
    AnalyzeArticleRequest,
    ArticleAnalysis,
    ArticleCreate,
    ArticleListResponse,
    ArticleOut,
    ArticleText,
    ArticleUpdate,
    CategorizeAllResponse,
    CategorizeResponse,
    DeleteManyRequest,
    DeleteManyResponse,
    TagSuggestionResult,
)
from . import service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/articles", tags=["articles"])


@router.post("/", response_model=ArticleOut, status_code=status.HTTP_201_CREATED)
async def create_article(
    body: ArticleCreate,
    db: SessionDep,
    translator: TranslatorDep,
    current_user: User = EditorUser,
):
    return await service.create_article(db, body, current_user, translator)


@router.get("/", response_model=ArticleListResponse)
async def list_articles(
    db: SessionDep,
    published: Optional[bool] = Query(None),
    status_filter: Optional[ArticleStatus] = Query(None, alias="status"),
    is_breaking: Optional[bool] = Query(None),
    is_featured: Optional[bool] = Query(None),
    is_pinned: Optional[bool] = Query(None),
    category_slug: Optional[str] = Query(None),
    tag_slug: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Search in titles and excerpts"),
    page: int = Query(1, ge=1),
    limit: int = Query(service.DEFAULT_PAGE_SIZE, ge=1, le=service.MAX_PAGE_SIZE),
):
    return await service.list_articles(
        db,
        published=published,
        status_filter=status_filter,
        is_breaking=is_breaking,
        is_featured=is_featured,
        is_pinned=is_pinned,
        category_slug=category_slug,
        tag_slug=tag_slug,
        q=q,
        page=page,
        limit=limit,
    )


@router.get("/slug/{slug}", response_model=ArticleOut)
async def get_article_by_slug(slug: str, db: SessionDep):
    return await service.view_article_by_slug(db, slug)


@router.get("/{article_id}", response_model=ArticleOut)
async def get_article(article_id: int, db: SessionDep):
    return await service.view_article(db, article_id)


@router.patch("/{article_id}", response_model=ArticleOut)
async def update_article(
    article_id: int,
    body: ArticleUpdate,
    db: SessionDep,
    current_user: User = EditorUser,
):
    article = await service.get_or_404(db, article_id)
    return await service.update_article(db, article, body, current_user)


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(article_id: int, db: SessionDep, current_user: User = EditorUser):
    article = await service.get_or_404(db, article_id)
    await service.delete_article(db, article, current_user)


@router.post("/delete-many", response_model=DeleteManyResponse)
async def delete_many(body: DeleteManyRequest, db: SessionDep, current_user: User = EditorUser):
    return await service.delete_many(db, body.ids, current_user)


# ---- AI assistance ----

@router.post("/analyze", response_model=ArticleAnalysis, dependencies=[Depends(require_editor)])
async def analyze_article(body: AnalyzeArticleRequest, analyst: AnalystDep):
    return await analyst.analyze(body, body.language)


@router.post("/categorize", response_model=CategorizeResponse, dependencies=[Depends(require_editor)])
async def categorize_article(body: ArticleText, db: SessionDep, categorizer: CategorizerDep):
    categories = await category_service.list_categories(db)
    slug = await categorizer.categorize(body, categories)
    category = next((c for c in categories if c.slug == slug), None) if slug else None
    return CategorizeResponse(
        category_slug=slug,
        category=CategoryOut.model_validate(category) if category else None,
    )


@router.post("/generate-tags", response_model=TagSuggestionResult, dependencies=[Depends(require_editor)])
async def generate_tags(body: ArticleText, db: SessionDep, tag_advisor: TagAdvisorDep):
    existing = await tag_service.list_tags(db)
    return await tag_advisor.suggest_tags(body, existing)


@router.post("/categorize-all", response_model=CategorizeAllResponse, dependencies=[Depends(require_admin)])
async def categorize_all(db: SessionDep, categorizer: CategorizerDep):
    return await service.categorize_all(db, categorizer)
