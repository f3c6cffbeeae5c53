"""
User repository - user lookups and the row lock that serializes valuation updates.
"""

from sqlalchemy import select

from money_manager.db.models.user import User
from money_manager.db.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, session):
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        """Find user by email - used for authentication and lookup."""
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_for_update(self, id: int) -> User | None:
        """Load the user with a row lock (SELECT ... FOR UPDATE).

        Every read-modify-write of a user's valuation entry goes through here so
        two concurrent operations on the same user cannot lose an update.
        SQLite ignores the lock; it serializes writers on its own.
        """
        result = await self.session.execute(
            select(User)
            .where(User.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
