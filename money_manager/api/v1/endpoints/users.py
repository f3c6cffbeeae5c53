"""
User endpoints - registration, login and lookup.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from money_manager.core.dependencies import CurrentUser
from money_manager.db.repositories.user_repository import UserRepository
from money_manager.db.session import DbSession
from money_manager.schemas.user import LoginRequest, TokenResponse, UserCreate, UserResponse
from money_manager.services.user_service import UserService

router = APIRouter()


def get_user_service(session: DbSession) -> UserService:
    return UserService(UserRepository(session))


UserServiceDep = Annotated[UserService, Depends(get_user_service)]


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(svc: UserServiceDep, data: UserCreate):
    """Create new user. Returns user without password."""
    user = await svc.register(data)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(svc: UserServiceDep, data: LoginRequest):
    """Authenticate and return a bearer JWT."""
    return await svc.login(data.email, data.password)


@router.get("/me", response_model=UserResponse)
async def me(user: CurrentUser):
    return UserResponse.model_validate(user)


@router.get("", response_model=UserResponse)
async def get_by_email(svc: UserServiceDep, email: str = Query(..., min_length=3)):
    user = await svc.get_by_email(email)
    return UserResponse.model_validate(user)
