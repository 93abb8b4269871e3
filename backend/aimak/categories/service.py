# backend/aimak/categories/service.py
import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..slugs import derive_slug
from .models import Category
from .schemas import CategoryCreate, CategorySeedResult, CategoryUpdate, CategoryWithCount

logger = logging.getLogger(__name__)

# Default newsroom sections, seeded by `manage.py seed-categories` or POST /categories/seed
DEFAULT_CATEGORIES = [
    {
        "slug": "zhanalyqtar",
        "name_kz": "ЖАҢАЛЫҚТАР",
        "name_ru": "НОВОСТИ",
        "description_kz": "Сатпаев қаласы мен облысының соңғы жаңалықтары",
        "description_ru": "Последние новости города Сатпаев и области",
        "sort_order": 1,
    },
    {
        "slug": "ozekti",
        "name_kz": "ӨЗЕКТІ",
        "name_ru": "АКТУАЛЬНО",
        "description_kz": "Өзекті мәселелер мен маңызды оқиғалар",
        "description_ru": "Актуальные вопросы и важные события",
        "sort_order": 2,
    },
    {
        "slug": "sayasat",
        "name_kz": "САЯСАТ",
        "name_ru": "ПОЛИТИКА",
        "description_kz": "Саяси жаңалықтар және талдаулар",
        "description_ru": "Политические новости и аналитика",
        "sort_order": 3,
    },
    {
        "slug": "madeniyet",
        "name_kz": "МӘДЕНИЕТ",
        "name_ru": "КУЛЬТУРА",
        "description_kz": "Мәдени оқиғалар, өнер және әдебиет",
        "description_ru": "Культурные события, искусство и литература",
        "sort_order": 4,
    },
    {
        "slug": "qogam",
        "name_kz": "ҚОҒАМ",
        "name_ru": "ОБЩЕСТВО",
        "description_kz": "Қоғамдық өмір және әлеуметтік мәселелер",
        "description_ru": "Общественная жизнь и социальные вопросы",
        "sort_order": 5,
    },
    {
        "slug": "kazakhmys",
        "name_kz": "KAZAKHMYS NEWS",
        "name_ru": "KAZAKHMYS NEWS",
        "description_kz": "Қазақмыс корпорациясы жаңалықтары",
        "description_ru": "Новости корпорации Казахмыс",
        "sort_order": 6,
    },
]


async def get_by_id(db: AsyncSession, category_id: int) -> Optional[Category]:
    result = await db.execute(select(Category).where(Category.id == category_id))
    return result.scalar_one_or_none()


async def get_by_slug(db: AsyncSession, slug: str) -> Optional[Category]:
    result = await db.execute(select(Category).where(Category.slug == slug))
    return result.scalar_one_or_none()


async def get_or_404(db: AsyncSession, category_id: int) -> Category:
    category = await get_by_id(db, category_id)
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category


async def list_categories(db: AsyncSession) -> List[Category]:
    result = await db.execute(select(Category).order_by(Category.sort_order, Category.id))
    return list(result.scalars().all())


async def list_categories_with_counts(db: AsyncSession) -> List[CategoryWithCount]:
    from ..articles.models import Article

    counts = (
        select(Article.category_id, func.count(Article.id).label("articles_count"))
        .group_by(Article.category_id)
        .subquery()
    )
    stmt = (
        select(Category, func.coalesce(counts.c.articles_count, 0))
        .outerjoin(counts, counts.c.category_id == Category.id)
        .order_by(Category.sort_order, Category.id)
    )
    result = await db.execute(stmt)
    items = []
    for category, articles_count in result.all():
        item = CategoryWithCount.model_validate(category)
        item.articles_count = articles_count
        items.append(item)
    return items


async def count_articles(db: AsyncSession, category_id: int) -> int:
    from ..articles.models import Article

    result = await db.execute(select(func.count(Article.id)).where(Article.category_id == category_id))
    return result.scalar_one()


async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
    slug = derive_slug(data.slug or data.name_kz, fallback="category")

    if await get_by_slug(db, slug):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category with this slug already exists")

    category = Category(
        slug=slug,
        name_kz=data.name_kz,
        name_ru=data.name_ru,
        description_kz=data.description_kz,
        description_ru=data.description_ru,
        sort_order=data.sort_order,
    )
    db.add(category)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category with this slug already exists")
    await db.refresh(category)
    logger.info(f"Created category {category.slug!r}")
    return category


async def update_category(db: AsyncSession, category: Category, data: CategoryUpdate) -> Category:
    update_data = data.model_dump(exclude_unset=True)

    new_slug = None
    if update_data.get("slug"):
        new_slug = derive_slug(update_data.pop("slug"), fallback="category")
    elif update_data.get("name_kz"):
        new_slug = derive_slug(update_data["name_kz"], fallback="category")
    update_data.pop("slug", None)

    if new_slug and new_slug != category.slug:
        existing = await get_by_slug(db, new_slug)
        if existing and existing.id != category.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category with this slug already exists")
        category.slug = new_slug

    for field, value in update_data.items():
        setattr(category, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Conflict while updating category")
    await db.refresh(category)
    return category


async def delete_category(db: AsyncSession, category: Category) -> None:
    if await count_articles(db, category.id) > 0:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Cannot delete category with existing articles")
    await db.delete(category)
    await db.commit()


async def seed_default_categories(db: AsyncSession) -> CategorySeedResult:
    created = 0
    skipped = 0
    for item in DEFAULT_CATEGORIES:
        if await get_by_slug(db, item["slug"]):
            skipped += 1
            continue
        db.add(Category(**item))
        created += 1
    await db.commit()
    logger.info(f"Seeded categories: created={created}, skipped={skipped}")
    return CategorySeedResult(created=created, skipped=skipped, total=created + skipped)
