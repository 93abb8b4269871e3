from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List, Optional

from passlib.context import CryptContext

from .models import User as UserModel, UserRole
from .schema import UserCreate, UserUpdate

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

async def create_user(user_data: UserCreate, db: AsyncSession, role: UserRole | str = UserRole.USER) -> UserModel:
    existing_user = await get_user_by_email(user_data.email, db)
    if existing_user:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    role_value = role.value if isinstance(role, UserRole) else UserRole(role).value
    hashed_password = pwd_context.hash(user_data.password)
    db_user = UserModel(
        name=user_data.name,
        email=user_data.email,
        hashed_password=hashed_password,
        role=role_value,
    )
    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)
    return db_user

async def get_users(db: AsyncSession, skip: int = 0, limit: int = 100) -> List[UserModel]:
    """List users with offset pagination."""
    result = await db.execute(
        select(UserModel)
        .order_by(UserModel.id)
        .offset(skip)
        .limit(limit)
    )
    return result.scalars().all()

async def update_user(db: AsyncSession, db_user: UserModel, user_in: UserUpdate) -> UserModel:
    """Update only the fields that were explicitly sent."""
    update_data = user_in.model_dump(exclude_unset=True)

    if "email" in update_data:
        existing_user = await get_user_by_email(update_data["email"], db)
        if existing_user and existing_user.id != db_user.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered by another user")

    for field, value in update_data.items():
        setattr(db_user, field, value)

    await db.commit()
    await db.refresh(db_user)
    return db_user

async def set_user_role(db: AsyncSession, db_user: UserModel, role: UserRole) -> UserModel:
    db_user.role = role.value
    await db.commit()
    await db.refresh(db_user)
    return db_user

async def get_user_by_id(user_id: int, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    return result.scalar_one_or_none()

async def get_user_by_email(email: str, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.email == email))
    return result.scalar_one_or_none()

async def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)

async def update_last_login(user: UserModel, db: AsyncSession) -> None:
    # database clock, not the app clock
    user.last_login = func.now()
    await db.commit()
