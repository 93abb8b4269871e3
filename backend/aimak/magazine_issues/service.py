# backend/aimak/magazine_issues/service.py
import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import MagazineIssue
from .schemas import MagazineIssueCreate, MagazineIssueUpdate

logger = logging.getLogger(__name__)

DUPLICATE_DETAIL = "Magazine issue with this number already exists for the given year and month"


async def _find_period_duplicate(
    db: AsyncSession, issue_number: int, year: int, month: int, exclude_id: Optional[int] = None
) -> Optional[MagazineIssue]:
    stmt = select(MagazineIssue).where(
        MagazineIssue.issue_number == issue_number,
        MagazineIssue.year == year,
        MagazineIssue.month == month,
    )
    if exclude_id is not None:
        stmt = stmt.where(MagazineIssue.id != exclude_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def _reload(db: AsyncSession, issue_id: int) -> MagazineIssue:
    result = await db.execute(
        select(MagazineIssue)
        .where(MagazineIssue.id == issue_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def get_or_404(db: AsyncSession, issue_id: int) -> MagazineIssue:
    result = await db.execute(select(MagazineIssue).where(MagazineIssue.id == issue_id))
    issue = result.scalar_one_or_none()
    if not issue:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Magazine issue {issue_id} not found")
    return issue


async def list_issues(db: AsyncSession, published: Optional[bool] = None) -> List[MagazineIssue]:
    """Pinned issues first, then newest period and issue number."""
    stmt = select(MagazineIssue)
    if published is not None:
        stmt = stmt.where(MagazineIssue.is_published == published)
    stmt = stmt.order_by(
        MagazineIssue.is_pinned.desc(),
        MagazineIssue.year.desc(),
        MagazineIssue.month.desc(),
        MagazineIssue.issue_number.desc(),
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_issue(db: AsyncSession, data: MagazineIssueCreate, uploaded_by_id: Optional[int]) -> MagazineIssue:
    if await _find_period_duplicate(db, data.issue_number, data.year, data.month):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_DETAIL)

    issue = MagazineIssue(**data.model_dump(), uploaded_by_id=uploaded_by_id)
    db.add(issue)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_DETAIL)

    logger.info(f"Created magazine issue #{issue.issue_number} ({issue.year}-{issue.month:02d})")
    return await _reload(db, issue.id)


async def update_issue(db: AsyncSession, issue: MagazineIssue, data: MagazineIssueUpdate) -> MagazineIssue:
    update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

    issue_number = update_data.get("issue_number", issue.issue_number)
    year = update_data.get("year", issue.year)
    month = update_data.get("month", issue.month)
    if await _find_period_duplicate(db, issue_number, year, month, exclude_id=issue.id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_DETAIL)

    for field, value in update_data.items():
        setattr(issue, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_DETAIL)
    return await _reload(db, issue.id)


async def delete_issue(db: AsyncSession, issue: MagazineIssue) -> None:
    issue_id = issue.id
    await db.delete(issue)
    await db.commit()
    logger.info(f"Deleted magazine issue {issue_id}")


async def _increment(db: AsyncSession, issue_id: int, column) -> MagazineIssue:
    await get_or_404(db, issue_id)
    await db.execute(
        update(MagazineIssue)
        .where(MagazineIssue.id == issue_id)
        .values({column: column + 1})
    )
    await db.commit()
    return await _reload(db, issue_id)


async def increment_views(db: AsyncSession, issue_id: int) -> MagazineIssue:
    return await _increment(db, issue_id, MagazineIssue.views_count)


async def increment_downloads(db: AsyncSession, issue_id: int) -> MagazineIssue:
    return await _increment(db, issue_id, MagazineIssue.downloads_count)
