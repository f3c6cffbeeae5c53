"""
Base repository - generic async CRUD shared by the aggregate repositories.
"""

from typing import Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from money_manager.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic async repository. Subclasses define model-specific methods."""

    def __init__(self, session: AsyncSession, model: type[ModelType]):
        self.session = session
        self.model = model

    async def get_by_id(self, id: int) -> ModelType | None:
        """Fetch single entity by primary key, refreshing any copy already in the session."""
        result = await self.session.execute(
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def add(self, entity: ModelType) -> ModelType:
        """Persist new entity. Caller commits session."""
        self.session.add(entity)
        await self.session.flush()  # Get ID without committing
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity: ModelType) -> None:
        """Remove entity from DB."""
        await self.session.delete(entity)
        await self.session.flush()
