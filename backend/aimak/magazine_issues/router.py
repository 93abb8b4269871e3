from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..auth.dependencies import EditorUser, require_editor
from ..users.models import User
from ..database import SessionDep
from . import service
from .schemas import MagazineIssueCreate, MagazineIssueOut, MagazineIssueUpdate

router = APIRouter(prefix="/magazine-issues", tags=["magazine-issues"])


@router.post("/", response_model=MagazineIssueOut, status_code=status.HTTP_201_CREATED)
async def create_issue(body: MagazineIssueCreate, db: SessionDep, current_user: User = EditorUser):
    return await service.create_issue(db, body, uploaded_by_id=current_user.id)


@router.get("/", response_model=list[MagazineIssueOut])
async def list_issues(db: SessionDep, published: Optional[bool] = Query(None)):
    return await service.list_issues(db, published=published)


@router.get("/{issue_id}", response_model=MagazineIssueOut)
async def get_issue(issue_id: int, db: SessionDep):
    return await service.get_or_404(db, issue_id)


@router.patch("/{issue_id}", response_model=MagazineIssueOut, dependencies=[Depends(require_editor)])
async def update_issue(issue_id: int, body: MagazineIssueUpdate, db: SessionDep):
    issue = await service.get_or_404(db, issue_id)
    return await service.update_issue(db, issue, body)


@router.delete("/{issue_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_editor)])
async def delete_issue(issue_id: int, db: SessionDep):
    issue = await service.get_or_404(db, issue_id)
    await service.delete_issue(db, issue)


@router.post("/{issue_id}/view", response_model=MagazineIssueOut)
async def register_view(issue_id: int, db: SessionDep):
    return await service.increment_views(db, issue_id)


@router.post("/{issue_id}/download", response_model=MagazineIssueOut)
async def register_download(issue_id: int, db: SessionDep):
    return await service.increment_downloads(db, issue_id)
