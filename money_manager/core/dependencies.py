"""
FastAPI dependencies - identity resolution, privilege check and the ledger day.
"""

from datetime import date
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from money_manager.core.days import today
from money_manager.core.security import resolve_user_id
from money_manager.db.models.user import User
from money_manager.db.repositories.user_repository import UserRepository
from money_manager.db.session import DbSession

security = HTTPBearer(auto_error=False)


async def get_current_user(
    session: DbSession,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> User:
    """Resolve the bearer token to an existing user. Raises 401 otherwise."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user_id = resolve_user_id(credentials.credentials)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


async def get_current_user_id(user: Annotated[User, Depends(get_current_user)]) -> int:
    return user.id


async def get_privileged_user(user: Annotated[User, Depends(get_current_user)]) -> User:
    """Admin-only routes (catalog listing, item deletion)."""
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return user


def get_today() -> date:
    """Ledger day for the request. Tests override this to freeze time."""
    return today()


CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentUserId = Annotated[int, Depends(get_current_user_id)]
PrivilegedUser = Annotated[User, Depends(get_privileged_user)]
Today = Annotated[date, Depends(get_today)]
