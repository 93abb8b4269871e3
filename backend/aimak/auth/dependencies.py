from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from ..database import SessionDep

from ..users.models import User
from ..auth import service as auth_service

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

async def get_current_user_from_access_token(
    db: SessionDep,
    token: str = Depends(oauth2_scheme),
) -> User:
    user = await auth_service.get_user_from_access_token(token=token, db=db)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user

CurrentUser = Depends(get_current_user_from_access_token)

def require_admin(
    current_user: User = CurrentUser
) -> None:
    """Reject the request with 403 unless the caller is an ADMIN."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required"
        )

def require_editor(
    current_user: User = CurrentUser
) -> User:
    """Newsroom staff only: EDITOR or ADMIN. Returns the caller so routes can use it as the actor."""
    if not current_user.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Editor privileges required"
        )
    return current_user

EditorUser = Depends(require_editor)
