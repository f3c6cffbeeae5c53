"""
Holding repository - the ownership multiset behind holding_count / attach_n / detach_all.
"""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from money_manager.db.models.holding import Holding
from money_manager.db.models.item import Item
from money_manager.db.models.user import User


class HoldingRepository:
    """All access to ``item_user`` rows. Callers never see individual rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def count(self, user_id: int, item_id: int) -> int:
        """Number of units of ``item_id`` held by ``user_id`` (0 if none)."""
        result = await self.session.execute(
            select(func.count(Holding.id)).where(
                Holding.user_id == user_id, Holding.item_id == item_id
            )
        )
        return result.scalar_one()

    async def attach(self, user_id: int, item_id: int, count: int) -> None:
        """Add ``count`` association rows."""
        self.session.add_all(Holding(user_id=user_id, item_id=item_id) for _ in range(count))
        await self.session.flush()

    async def detach_all(self, user_id: int, item_id: int) -> int:
        """Remove every row for the pair. Returns how many were removed."""
        result = await self.session.execute(
            delete(Holding).where(Holding.user_id == user_id, Holding.item_id == item_id)
        )
        return result.rowcount

    async def portfolio_value(self, user_id: int) -> int:
        """Ground truth: sum of current price over every held unit, in cents."""
        result = await self.session.execute(
            select(func.coalesce(func.sum(Item.last_price_cents), 0))
            .select_from(Holding)
            .join(Item, Item.id == Holding.item_id)
            .where(Holding.user_id == user_id)
        )
        return int(result.scalar_one())

    async def total_units(self, user_id: int) -> int:
        result = await self.session.execute(
            select(func.count(Holding.id)).where(Holding.user_id == user_id)
        )
        return result.scalar_one()

    async def holder_counts(self, item_id: int) -> list[tuple[int, int]]:
        """``(user_id, count)`` for every user holding the item, by user id."""
        result = await self.session.execute(
            select(Holding.user_id, func.count(Holding.id))
            .where(Holding.item_id == item_id)
            .group_by(Holding.user_id)
            .order_by(Holding.user_id)
        )
        return [(user_id, count) for user_id, count in result.all()]

    async def holders(self, item_id: int) -> list[User]:
        """Distinct users holding the item."""
        held_by = select(Holding.user_id).where(Holding.item_id == item_id)
        result = await self.session.execute(
            select(User).where(User.id.in_(held_by)).order_by(User.id)
        )
        return list(result.scalars().all())

    async def items_with_count(self, user_id: int, item_id: int | None = None) -> list[tuple[Item, int]]:
        """Distinct held items with their unit count.

        Newest item first; ties broken by item id ascending.
        """
        stmt = (
            select(Item, func.count(Holding.id).label("count"))
            .join(Holding, Holding.item_id == Item.id)
            .where(Holding.user_id == user_id)
            .group_by(Item.id)
            .order_by(Item.created_at.desc(), Item.id.asc())
        )
        if item_id is not None:
            stmt = stmt.where(Item.id == item_id)
        result = await self.session.execute(stmt)
        return [(item, count) for item, count in result.all()]

    async def distinct_items_by_peak(self, user_id: int, limit: int) -> list[Item]:
        """Distinct held items, highest peak price first (id ascending on ties)."""
        held = select(Holding.item_id).where(Holding.user_id == user_id)
        result = await self.session.execute(
            select(Item)
            .where(Item.id.in_(held))
            .order_by(Item.highest_price_cents.desc(), Item.id.asc())
            .limit(limit)
        )
        return list(result.scalars().all())
