"""
Item repository - catalog queries.
"""

from sqlalchemy import select

from money_manager.db.models.holding import Holding
from money_manager.db.models.item import Item
from money_manager.db.repositories.base_repository import BaseRepository


class ItemRepository(BaseRepository[Item]):
    """Item-specific queries. Price history is eager-loaded by the model (selectin)."""

    def __init__(self, session):
        super().__init__(session, Item)

    async def get_many_newest_first(self, skip: int = 0, limit: int = 20) -> list[Item]:
        """Whole catalog, newest first (privileged listing)."""
        result = await self.session.execute(
            select(Item)
            .order_by(Item.created_at.desc(), Item.id.asc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def autocomplete(self, user_id: int, search: str, limit: int) -> list[Item]:
        """Public items whose name contains ``search``, excluding those the user already holds.

        Quarantined (self-submitted, unpromoted) items are never suggested.
        """
        held = select(Holding.item_id).where(Holding.user_id == user_id)
        result = await self.session.execute(
            select(Item)
            .where(
                Item.id.not_in(held),
                Item.name.ilike(f"%{search}%"),
                Item.user_id.is_(None),
            )
            .order_by(Item.created_at.desc(), Item.id.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_for_update(self, id: int) -> Item | None:
        """Load the item with a row lock (SELECT ... FOR UPDATE).

        Held for the whole unit of work that reads ``last_price_cents`` or the
        item's holders, so a price change cannot interleave with it. Lock order
        is item first, then users by ascending id.
        """
        result = await self.session.execute(
            select(Item)
            .where(Item.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
