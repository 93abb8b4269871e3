# backend/aimak/tags/service.py
import logging
from typing import List, Optional, Sequence

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..slugs import derive_slug
from .models import Tag
from .schemas import TagCreate, TagUpdate, TagWithCount

logger = logging.getLogger(__name__)


async def get_by_id(db: AsyncSession, tag_id: int) -> Optional[Tag]:
    result = await db.execute(select(Tag).where(Tag.id == tag_id))
    return result.scalar_one_or_none()


async def get_by_slug(db: AsyncSession, slug: str) -> Optional[Tag]:
    result = await db.execute(select(Tag).where(Tag.slug == slug))
    return result.scalar_one_or_none()


async def get_or_404(db: AsyncSession, tag_id: int) -> Tag:
    tag = await get_by_id(db, tag_id)
    if not tag:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag not found")
    return tag


async def get_by_ids(db: AsyncSession, tag_ids: Sequence[int]) -> List[Tag]:
    """Load tags for linking to an article; unknown ids are a 400."""
    unique_ids = list(dict.fromkeys(tag_ids))
    if not unique_ids:
        return []
    result = await db.execute(select(Tag).where(Tag.id.in_(unique_ids)))
    tags = list(result.scalars().all())
    missing = set(unique_ids) - {t.id for t in tags}
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown tag ids: {sorted(missing)}",
        )
    return tags


async def list_tags(db: AsyncSession) -> List[Tag]:
    result = await db.execute(select(Tag).order_by(Tag.name_kz))
    return list(result.scalars().all())


async def list_tags_with_counts(db: AsyncSession) -> List[TagWithCount]:
    from ..articles.models import article_tags

    counts = (
        select(article_tags.c.tag_id, func.count(article_tags.c.article_id).label("articles_count"))
        .group_by(article_tags.c.tag_id)
        .subquery()
    )
    stmt = (
        select(Tag, func.coalesce(counts.c.articles_count, 0))
        .outerjoin(counts, counts.c.tag_id == Tag.id)
        .order_by(Tag.name_kz)
    )
    result = await db.execute(stmt)
    items = []
    for tag, articles_count in result.all():
        item = TagWithCount.model_validate(tag)
        item.articles_count = articles_count
        items.append(item)
    return items


async def create_tag(db: AsyncSession, data: TagCreate) -> Tag:
    slug = derive_slug(data.slug or data.name_kz, fallback="tag")
    if await get_by_slug(db, slug):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Tag with this slug already exists")

    tag = Tag(slug=slug, name_kz=data.name_kz.strip(), name_ru=(data.name_ru or data.name_kz).strip())
    db.add(tag)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Tag with this slug already exists")
    await db.refresh(tag)
    logger.info(f"Created tag {tag.slug!r}")
    return tag


async def update_tag(db: AsyncSession, tag: Tag, data: TagUpdate) -> Tag:
    update_data = data.model_dump(exclude_unset=True)
    requested_slug = update_data.pop("slug", None)

    new_slug = None
    if requested_slug:
        new_slug = derive_slug(requested_slug, fallback="tag")
    elif update_data.get("name_kz"):
        new_slug = derive_slug(update_data["name_kz"], fallback="tag")

    if new_slug and new_slug != tag.slug:
        existing = await get_by_slug(db, new_slug)
        if existing and existing.id != tag.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Tag with this slug already exists")
        tag.slug = new_slug

    for field, value in update_data.items():
        if value is not None:
            setattr(tag, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Conflict while updating tag")
    await db.refresh(tag)
    return tag


async def delete_tag(db: AsyncSession, tag: Tag) -> None:
    # the ORM removes its article_tags rows
    await db.delete(tag)
    await db.commit()
