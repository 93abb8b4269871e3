from fastapi import APIRouter, Depends, status

from ..auth.dependencies import require_editor
from ..database import SessionDep
from . import service
from .schemas import TagCreate, TagOut, TagUpdate, TagWithCount

router = APIRouter(prefix="/tags", tags=["tags"])


@router.post("/", response_model=TagOut, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_editor)])
async def create_tag(body: TagCreate, db: SessionDep):
    return await service.create_tag(db, body)


@router.get("/", response_model=list[TagWithCount])
async def list_tags(db: SessionDep):
    return await service.list_tags_with_counts(db)


@router.get("/{tag_id}", response_model=TagOut)
async def get_tag(tag_id: int, db: SessionDep):
    return await service.get_or_404(db, tag_id)


@router.patch("/{tag_id}", response_model=TagOut, dependencies=[Depends(require_editor)])
async def update_tag(tag_id: int, body: TagUpdate, db: SessionDep):
    tag = await service.get_or_404(db, tag_id)
    return await service.update_tag(db, tag, body)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_editor)])
async def delete_tag(tag_id: int, db: SessionDep):
    tag = await service.get_or_404(db, tag_id)
    await service.delete_tag(db, tag)
