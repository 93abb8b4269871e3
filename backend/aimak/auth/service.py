from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Dict

from ..users import service as user_service
from ..users.models import User

from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from ..config import settings


def _encode(claims: Dict, expires_in: timedelta) -> str:
    to_encode = dict(claims)
    to_encode["exp"] = datetime.now(timezone.utc) + expires_in
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


async def create_access_token(user: User) -> str:
    """Short-lived token carrying the user's role; used on every API call."""
    return _encode(
        {"sub": user.email, "role": user.role, "type": "access"},
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

async def create_refresh_token(user: User) -> str:
    return _encode(
        {"sub": user.email, "type": "refresh"},
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )

async def _decode_token(token: str) -> Optional[Dict]:
    """Verify signature and expiry; None when the token is unusable."""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None

async def get_user_from_access_token(token: str, db: AsyncSession) -> Optional[User]:
    payload = await _decode_token(token)

    # refresh tokens are not accepted here
    if payload is None or payload.get("type") != "access":
        return None

    email = payload.get("sub")
    if email is None:
        return None

    return await user_service.get_user_by_email(email, db)


async def get_user_from_refresh_token(token: str, db: AsyncSession) -> User:
    """
    Validate a refresh token for /auth/refresh.
    Access tokens are rejected so they cannot be used to mint new ones.
    """
    payload = await _decode_token(token)

    if payload is None or payload.get("type") != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type or invalid token",
        )

    email = payload.get("sub")
    if email is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not find user from token",
        )

    user = await user_service.get_user_by_email(email, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User associated with this token not found",
        )

    return user

async def authenticate_user(
    db: AsyncSession, email: str, password: str
) -> Optional[User]:
    user = await user_service.get_user_by_email(email, db)

    if not user or not await user_service.verify_password(password, user.hashed_password):
        return None
    return user
