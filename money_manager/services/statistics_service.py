"""
Statistics service - read-only portfolio reporting over holdings and the valuation ledger.
"""

from datetime import date

from money_manager.config import get_settings
from money_manager.core.days import format_day_key
from money_manager.core.exceptions import NotFound
from money_manager.db.models.item import Item
from money_manager.db.models.user import User
from money_manager.db.repositories.holding_repository import HoldingRepository
from money_manager.db.repositories.user_repository import UserRepository
from money_manager.schemas.statistics import StatisticsResponse, ValuationPoint
from money_manager.services.item_service import item_to_response
from money_manager.services.ledger import LastValuation, last_known_valuation

settings = get_settings()


class StatisticsService:
    def __init__(self, user_repo: UserRepository, holding_repo: HoldingRepository):
        self.user_repo = user_repo
        self.holding_repo = holding_repo

    async def _get_user(self, user_id: int) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFound(f"User with id {user_id} not found")
        return user

    async def most_valuable_distinct_holdings(self, user_id: int, n: int) -> list[Item]:
        """Top ``n`` held items by peak price. An item held several times appears once."""
        await self._get_user(user_id)
        if n <= 0:
            return []
        return await self.holding_repo.distinct_items_by_peak(user_id, n)

    async def last_known_valuation(self, user_id: int, as_of: date) -> LastValuation:
        user = await self._get_user(user_id)
        return last_known_valuation(user.valuation_by_day, as_of)

    async def valuation_history(self, user_id: int) -> list[ValuationPoint]:
        """Every ledger entry, oldest day first."""
        user = await self._get_user(user_id)
        history = user.valuation_by_day
        return [
            ValuationPoint(day=format_day_key(day), amount_cents=history[day])
            for day in sorted(history)
        ]

    async def get_statistics(self, user_id: int, as_of: date) -> StatisticsResponse:
        """Units held, latest valuation and the most valuable distinct items."""
        last = await self.last_known_valuation(user_id, as_of)
        top_items = await self.most_valuable_distinct_holdings(user_id, settings.top_items_limit)
        return StatisticsResponse(
            item_count=await self.holding_repo.total_units(user_id),
            last_known_valuation=ValuationPoint(
                day=format_day_key(last.day), amount_cents=last.amount_cents
            ),
            top_items=[item_to_response(item) for item in top_items],
        )
