from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from ..database import SessionDep
from ..users.models import User as UserModel

from .schema import UserCreate, UserUpdate, UserPublic, UserMe, AdminCreate, UserRoleUpdate
from . import service as user_service
from ..auth.dependencies import CurrentUser, require_admin

router = APIRouter(prefix="/users", tags=["users"])

@router.post("/", response_model=UserMe, status_code=status.HTTP_201_CREATED)
async def register_user(user_data: UserCreate, db: SessionDep):
    return await user_service.create_user(user_data, db)

@router.get("/", response_model=List[UserPublic], dependencies=[Depends(require_admin)])
async def list_users(db: SessionDep, skip: int = 0, limit: int = 100):
    return await user_service.get_users(db, skip=skip, limit=limit)

@router.get("/me", response_model=UserMe)
async def read_users_me(current_user: UserModel = CurrentUser):
    return current_user

@router.patch("/me", response_model=UserMe)
async def update_users_me(
    db: SessionDep,
    user_update_data: UserUpdate,
    current_user: UserModel = CurrentUser,
):
    return await user_service.update_user(db, db_user=current_user, user_in=user_update_data)

@router.patch("/{user_id}/role", response_model=UserPublic, dependencies=[Depends(require_admin)])
async def update_user_role(user_id: int, body: UserRoleUpdate, db: SessionDep):
    """(Admin only) Promote or demote a user, e.g. to EDITOR."""
    user = await user_service.get_user_by_id(user_id, db)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return await user_service.set_user_role(db, user, body.role)

@router.post("/admin/create", response_model=UserMe, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_user_as_admin(
    user_data: AdminCreate,
    db: SessionDep
):
    """(Admin only) Create a user with any role."""
    return await user_service.create_user(user_data, db, role=user_data.role)
