"""
User service - registration, login and lookup.
"""

import logging

from money_manager.core.exceptions import Conflict, NotFound, Unauthorized
from money_manager.core.security import create_access_token, hash_password, verify_password
from money_manager.db.models.user import User
from money_manager.db.repositories.user_repository import UserRepository
from money_manager.schemas.user import TokenResponse, UserCreate

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def register(self, data: UserCreate) -> User:
        if await self.user_repo.get_by_email(data.email):
            raise Conflict("Email already registered")
        user = User(
            email=data.email,
            hashed_password=hash_password(data.password),
            full_name=data.full_name,
        )
        user = await self.user_repo.add(user)
        logger.info("User registered user_id=%s", user.id)
        return user

    async def login(self, email: str, password: str) -> TokenResponse:
        user = await self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            raise Unauthorized("Invalid email or password")
        return TokenResponse(access_token=create_access_token(user.id), user_id=user.id)

    async def get_by_email(self, email: str) -> User:
        user = await self.user_repo.get_by_email(email)
        if user is None:
            raise NotFound(f"Cannot find user with email {email}")
        return user
