from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from ..database import SessionDep
from ..users.service import update_last_login
from .schema import AccessToken, TokenPair, TokenRefreshRequest
from .service import authenticate_user, create_access_token, create_refresh_token, get_user_from_refresh_token

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenPair)
async def login(
    db: SessionDep,
    form_data: OAuth2PasswordRequestForm = Depends(),
):
    """OAuth2 password flow; ``username`` carries the e-mail address."""
    user = await authenticate_user(db, form_data.username.strip().lower(), form_data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    await update_last_login(user=user, db=db)
    return TokenPair(
        access_token=await create_access_token(user=user),
        refresh_token=await create_refresh_token(user=user),
    )


@router.post("/refresh", response_model=AccessToken)
async def refresh_access_token(request: TokenRefreshRequest, db: SessionDep):
    user = await get_user_from_refresh_token(request.refresh_token, db)
    # the new token carries the current role, so promotions apply without re-login
    return AccessToken(access_token=await create_access_token(user=user))
