# backend/aimak/articles/service.py
"""
Article lifecycle: slugs, status transitions, automatic Kazakh -> Russian
translation on create, tag linking, listing and bulk AI categorization.
"""

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Sequence

from fastapi import HTTPException, status
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..ai.errors import AIServiceError
from ..categories import service as category_service
from ..categories.models import Category
from ..config import settings
from ..slugs import derive_slug, unique_slug
from ..tags import service as tag_service
from ..tags.models import Tag
from ..translation.schemas import Language
from ..translation.service import TranslationService
from ..users.models import User
from .models import Article, ArticleStatus, article_tags
from .schemas import (
    ArticleCreate,
    ArticleListResponse,
    ArticleOut,
    ArticleUpdate,
    CategorizeAllResponse,
    CategorizeAllStats,
    DeleteManyResponse,
    PaginationMeta,
)
from .services.categorization import CategorizationAdvisor

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


def _with_relations(stmt):
    return stmt.options(
        selectinload(Article.category),
        selectinload(Article.author),
        selectinload(Article.tags),
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---- status ----

def resolve_status(
    requested_status: Optional[ArticleStatus],
    requested_published: Optional[bool],
) -> Optional[ArticleStatus]:
    """
    Target status for a create/update payload, or None when the payload leaves it alone.

    ``status`` wins when both are present. ``published`` alone is the legacy
    toggle: true -> PUBLISHED, false -> DRAFT.
    """
    if requested_status is not None:
        return requested_status
    if requested_published is not None:
        return ArticleStatus.PUBLISHED if requested_published else ArticleStatus.DRAFT
    return None


def apply_status(article: Article, new_status: ArticleStatus, now: Optional[datetime] = None) -> None:
    article.status = new_status
    article.published = new_status == ArticleStatus.PUBLISHED
    # first publication date; leaving PUBLISHED keeps it
    if new_status == ArticleStatus.PUBLISHED and article.published_at is None:
        article.published_at = now or _utcnow()


# ---- slugs ----

def _slug_exists(db: AsyncSession, column, exclude_id: Optional[int] = None) -> Callable[[str], Awaitable[bool]]:
    async def exists(candidate: str) -> bool:
        stmt = select(Article.id).where(column == candidate)
        if exclude_id is not None:
            stmt = stmt.where(Article.id != exclude_id)
        result = await db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None
    return exists


async def make_slug(db: AsyncSession, title: str, language: Language, exclude_id: Optional[int] = None) -> str:
    column = Article.slug_kz if language == Language.KAZAKH else Article.slug_ru
    return await unique_slug(derive_slug(title), _slug_exists(db, column, exclude_id))


# ---- lookups ----

async def _reload(db: AsyncSession, article_id: int) -> Article:
    result = await db.execute(
        _with_relations(select(Article).where(Article.id == article_id))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def get_article(db: AsyncSession, article_id: int) -> Optional[Article]:
    result = await db.execute(_with_relations(select(Article).where(Article.id == article_id)))
    return result.scalar_one_or_none()


async def get_or_404(db: AsyncSession, article_id: int) -> Article:
    article = await get_article(db, article_id)
    if not article:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Article not found")
    return article


async def _increment_views(db: AsyncSession, article_id: int) -> Article:
    await db.execute(update(Article).where(Article.id == article_id).values(views=Article.views + 1))
    await db.commit()
    return await _reload(db, article_id)


async def view_article(db: AsyncSession, article_id: int) -> Article:
    """Public read: fetch and count a view."""
    article = await get_or_404(db, article_id)
    return await _increment_views(db, article.id)


async def view_article_by_slug(db: AsyncSession, slug: str) -> Article:
    result = await db.execute(
        select(Article.id).where(or_(Article.slug_kz == slug, Article.slug_ru == slug)).limit(1)
    )
    article_id = result.scalar_one_or_none()
    if article_id is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Article not found")
    return await _increment_views(db, article_id)


async def list_articles(
    db: AsyncSession,
    *,
    published: Optional[bool] = None,
    status_filter: Optional[ArticleStatus] = None,
    is_breaking: Optional[bool] = None,
    is_featured: Optional[bool] = None,
    is_pinned: Optional[bool] = None,
    category_slug: Optional[str] = None,
    tag_slug: Optional[str] = None,
    q: Optional[str] = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> ArticleListResponse:
    page = max(page, 1)
    limit = max(1, min(limit, MAX_PAGE_SIZE))

    conditions = []
    if published is not None:
        conditions.append(Article.published == published)
    if status_filter is not None:
        conditions.append(Article.status == status_filter)
    if is_breaking is not None:
        conditions.append(Article.is_breaking == is_breaking)
    if is_featured is not None:
        conditions.append(Article.is_featured == is_featured)
    if is_pinned is not None:
        conditions.append(Article.is_pinned == is_pinned)
    if category_slug:
        conditions.append(Article.category.has(Category.slug == category_slug))
    if tag_slug:
        conditions.append(Article.tags.any(Tag.slug == tag_slug))
    if q and q.strip():
        pattern = f"%{q.strip()}%"
        conditions.append(or_(
            Article.title_kz.ilike(pattern),
            Article.title_ru.ilike(pattern),
            Article.excerpt_kz.ilike(pattern),
            Article.excerpt_ru.ilike(pattern),
        ))

    total = (await db.execute(select(func.count(Article.id)).where(*conditions))).scalar_one()

    stmt = (
        _with_relations(select(Article).where(*conditions))
        .order_by(
            Article.is_pinned.desc(),
            Article.published_at.desc().nulls_last(),
            Article.created_at.desc(),
            Article.id.desc(),
        )
        .offset((page - 1) * limit)
        .limit(limit)
    )
    articles = (await db.execute(stmt)).scalars().all()

    return ArticleListResponse(
        data=[ArticleOut.model_validate(a) for a in articles],
        meta=PaginationMeta(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if total else 0,
        ),
    )


# ---- create / update / delete ----

async def _require_category(db: AsyncSession, category_id: int) -> Category:
    category = await category_service.get_by_id(db, category_id)
    if not category:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Category {category_id} does not exist")
    return category


def _ensure_can_modify(article: Article, actor: User) -> None:
    if article.author_id != actor.id and not actor.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only modify your own articles")


async def fill_missing_russian(data: ArticleCreate, translator: Optional[TranslationService]) -> dict:
    """
    Russian fields for a new article. Provided values are kept; missing
    title/content/excerpt are filled by one kz -> ru translation call.
    Translation failures are logged and leave the fields empty.
    """
    fields = {"title_ru": data.title_ru, "content_ru": data.content_ru, "excerpt_ru": data.excerpt_ru}
    if fields["title_ru"] and fields["content_ru"]:
        return fields
    if not data.auto_translate or translator is None:
        return fields

    try:
        translated = await translator.translate_article(
            title=data.title_kz,
            content=data.content_kz,
            excerpt=data.excerpt_kz,
            source=Language.KAZAKH,
            target=Language.RUSSIAN,
        )
    except AIServiceError as exc:
        logger.warning(f"Auto-translation failed, creating article without Russian content: {exc.message}")
        return fields

    fields["title_ru"] = fields["title_ru"] or translated.title
    fields["content_ru"] = fields["content_ru"] or translated.content
    if not fields["excerpt_ru"] and translated.excerpt:
        fields["excerpt_ru"] = translated.excerpt
    logger.info("Auto-translated missing Russian fields")
    return fields


async def create_article(
    db: AsyncSession,
    data: ArticleCreate,
    author: User,
    translator: Optional[TranslationService] = None,
) -> Article:
    await _require_category(db, data.category_id)
    tags = await tag_service.get_by_ids(db, data.tag_ids)

    russian = await fill_missing_russian(data, translator)

    article = Article(
        title_kz=data.title_kz,
        content_kz=data.content_kz,
        excerpt_kz=data.excerpt_kz,
        cover_image=data.cover_image,
        category_id=data.category_id,
        author_id=author.id,
        is_breaking=data.is_breaking,
        is_featured=data.is_featured,
        is_pinned=data.is_pinned,
        allow_comments=data.allow_comments,
        views=0,
        published_at=None,
        **russian,
    )
    article.slug_kz = await make_slug(db, data.title_kz, Language.KAZAKH)
    if article.title_ru:
        article.slug_ru = await make_slug(db, article.title_ru, Language.RUSSIAN)
    apply_status(article, resolve_status(data.status, data.published) or ArticleStatus.DRAFT)
    article.tags = tags

    db.add(article)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Article with this slug already exists")

    logger.info(f"Created article {article.id} ({article.status.value}) slug_kz={article.slug_kz!r}")
    return await _reload(db, article.id)


_CONTENT_FIELDS = (
    "title_kz", "content_kz", "excerpt_kz",
    "title_ru", "content_ru", "excerpt_ru",
    "cover_image", "category_id",
    "is_breaking", "is_featured", "is_pinned", "allow_comments",
)


async def update_article(db: AsyncSession, article: Article, data: ArticleUpdate, actor: User) -> Article:
    """Fields, status and tag set are written in one commit; any failure leaves the row untouched."""
    _ensure_can_modify(article, actor)
    update_data = data.model_dump(exclude_unset=True)

    if update_data.get("category_id") is not None and update_data["category_id"] != article.category_id:
        await _require_category(db, update_data["category_id"])

    new_tags = None
    if update_data.get("tag_ids") is not None:
        new_tags = await tag_service.get_by_ids(db, update_data["tag_ids"])

    for field in _CONTENT_FIELDS:
        if field not in update_data:
            continue
        value = update_data[field]
        # required columns cannot be cleared
        if value is None and field in ("title_kz", "content_kz", "category_id"):
            continue
        setattr(article, field, value)

    if update_data.get("title_kz"):
        article.slug_kz = await make_slug(db, article.title_kz, Language.KAZAKH, exclude_id=article.id)
    if update_data.get("title_ru"):
        article.slug_ru = await make_slug(db, article.title_ru, Language.RUSSIAN, exclude_id=article.id)
    elif "title_ru" in update_data:
        # no Russian title, no Russian URL
        article.slug_ru = None

    new_status = resolve_status(update_data.get("status"), update_data.get("published"))
    if new_status is not None:
        apply_status(article, new_status)

    if new_tags is not None:
        article.tags = new_tags

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Conflict while updating article")

    logger.info(f"Updated article {article.id} (status={article.status.value})")
    return await _reload(db, article.id)


async def delete_article(db: AsyncSession, article: Article, actor: User) -> None:
    _ensure_can_modify(article, actor)
    article_id = article.id
    await db.delete(article)
    await db.commit()
    logger.info(f"Deleted article {article_id} by user {actor.id}")


async def delete_many(db: AsyncSession, ids: Sequence[int], actor: User) -> DeleteManyResponse:
    """Delete what the actor may delete; report missing and foreign ids instead of failing."""
    unique_ids = list(dict.fromkeys(ids))
    result = await db.execute(select(Article.id, Article.author_id).where(Article.id.in_(unique_ids)))
    owners = dict(result.all())

    is_admin = actor.is_admin
    allowed = [i for i in unique_ids if i in owners and (is_admin or owners[i] == actor.id)]
    forbidden = [i for i in unique_ids if i in owners and i not in allowed]
    not_found = [i for i in unique_ids if i not in owners]

    if allowed:
        # join rows first; SQLite does not enforce ON DELETE CASCADE by default
        await db.execute(delete(article_tags).where(article_tags.c.article_id.in_(allowed)))
        await db.execute(delete(Article).where(Article.id.in_(allowed)))
        await db.commit()
    logger.info(f"Bulk delete by user {actor.id}: deleted={len(allowed)}, forbidden={len(forbidden)}, missing={len(not_found)}")

    return DeleteManyResponse(deleted=len(allowed), deleted_ids=allowed, not_found=not_found, forbidden=forbidden)


# ---- bulk categorization ----

async def categorize_all(
    db: AsyncSession,
    advisor: CategorizationAdvisor,
    *,
    delay: Optional[float] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> CategorizeAllResponse:
    """
    Re-categorize every article, newest first, one AI call at a time.

    An article whose suggested category equals its current one, or for which
    the model gave no usable slug, counts as skipped. Per-article failures are
    counted as errors and do not stop the run.
    """
    delay = settings.AI_CATEGORIZE_ALL_DELAY_SECONDS if delay is None else delay

    categories = await category_service.list_categories(db)
    if not categories:
        return CategorizeAllResponse(success=False, message="No categories found")
    # fail before the loop rather than once per article
    advisor.gateway.ensure_configured("AI categorization")

    by_slug = {c.slug: c for c in categories}
    result = await db.execute(select(Article).order_by(Article.created_at.desc(), Article.id.desc()))
    articles = result.scalars().all()

    stats = CategorizeAllStats(total=len(articles))
    if not articles:
        return CategorizeAllResponse(success=True, message="No articles to categorize", stats=stats)

    for index, article in enumerate(articles):
        try:
            slug = await advisor.categorize(article, categories)
        except AIServiceError as exc:
            logger.error(f"Error categorizing article {article.id}: {exc.message}")
            stats.errors += 1
            continue

        suggested = by_slug.get(slug) if slug else None
        if suggested is None or suggested.id == article.category_id:
            stats.skipped += 1
        else:
            article.category_id = suggested.id
            await db.commit()
            stats.updated += 1
            logger.info(f"Article {article.id} moved to category {suggested.slug!r}")

        if delay and index < len(articles) - 1:
            await sleep(delay)

    logger.info(f"Categorize-all finished: {stats.model_dump()}")
    return CategorizeAllResponse(success=True, message="Categorization completed", stats=stats)
