from fastapi import APIRouter, Depends, HTTPException, status

from ..auth.dependencies import require_admin
from ..database import SessionDep
from . import service
from .schemas import CategoryCreate, CategoryOut, CategorySeedResult, CategoryUpdate, CategoryWithCount

router = APIRouter(prefix="/categories", tags=["categories"])


@router.post("/", response_model=CategoryOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_category(body: CategoryCreate, db: SessionDep):
    return await service.create_category(db, body)


@router.post("/seed", response_model=CategorySeedResult, dependencies=[Depends(require_admin)])
async def seed_categories(db: SessionDep):
    return await service.seed_default_categories(db)


@router.get("/", response_model=list[CategoryWithCount])
async def list_categories(db: SessionDep):
    return await service.list_categories_with_counts(db)


@router.get("/slug/{slug}", response_model=CategoryOut)
async def get_category_by_slug(slug: str, db: SessionDep):
    category = await service.get_by_slug(db, slug)
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category


@router.get("/{category_id}", response_model=CategoryOut)
async def get_category(category_id: int, db: SessionDep):
    return await service.get_or_404(db, category_id)


@router.patch("/{category_id}", response_model=CategoryOut, dependencies=[Depends(require_admin)])
async def update_category(category_id: int, body: CategoryUpdate, db: SessionDep):
    category = await service.get_or_404(db, category_id)
    return await service.update_category(db, category, body)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
async def delete_category(category_id: int, db: SessionDep):
    category = await service.get_or_404(db, category_id)
    await service.delete_category(db, category)
