"""
Valuation ledger - keeps each user's per-day cumulative value consistent with holdings.

There is no append-only ledger. Today's entry is derived from current state:

* if the user already has an entry for the day, the operation's delta is added;
* otherwise the entry is seeded from the ground-truth portfolio value (sum of
  current price x units held) and the delta applied on top.

Seeding from ground truth on the first touch of each day means a missed or
skipped day never compounds into later entries. Past days are frozen history.
"""

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from money_manager.core.exceptions import NotFound
from money_manager.db.models.user import User
from money_manager.db.repositories.holding_repository import HoldingRepository
from money_manager.db.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LastValuation:
    day: date
    amount_cents: int


def next_amount(existing: int | None, ground_truth: int, delta: int) -> int:
    """Seed-or-increment: the day's new amount given its current entry (if any)."""
    if existing is None:
        return ground_truth + delta
    return existing + delta


def last_known_valuation(valuations: dict[date, int], as_of: date) -> LastValuation:
    """Most recent entry by calendar date, or ``(as_of, 0)`` when the ledger is empty."""
    if not valuations:
        return LastValuation(day=as_of, amount_cents=0)
    day = max(valuations)
    return LastValuation(day=day, amount_cents=valuations[day])


class ValuationLedger:
    """Applies valuation changes to a locked user row.

    The caller must hold the user's row lock (``UserRepository.get_for_update``)
    and must call ``apply`` BEFORE changing holdings, since the seed is the
    portfolio value as it stands when the entry is first touched.
    """

    def __init__(self, holding_repo: HoldingRepository):
        self.holding_repo = holding_repo

    async def apply(self, user: User, day: date, delta: int) -> int:
        """Add ``delta`` to the day's entry, seeding it from ground truth if absent."""
        existing = user.valuation_on(day)
        ground_truth = 0
        if existing is None:
            ground_truth = await self.holding_repo.portfolio_value(user.id)
            logger.debug(
                "Seeding valuation user_id=%s day=%s from ground truth %s", user.id, day, ground_truth
            )
        amount = next_amount(existing, ground_truth, delta)
        user.set_valuation(day, amount)
        await self.holding_repo.session.flush()
        logger.info("Valuation user_id=%s day=%s delta=%s amount=%s", user.id, day, delta, amount)
        return amount

    async def revalue(self, user: User, day: date, delta: int) -> int:
        """Price-change variant: prices are already updated, so a seed must not add ``delta`` again."""
        existing = user.valuation_on(day)
        if existing is None:
            amount = await self.holding_repo.portfolio_value(user.id)
            logger.debug("Seeding valuation user_id=%s day=%s at new prices %s", user.id, day, amount)
        else:
            amount = existing + delta
        user.set_valuation(day, amount)
        await self.holding_repo.session.flush()
        logger.info("Revalued user_id=%s day=%s delta=%s amount=%s", user.id, day, delta, amount)
        return amount


async def revalue_holder(
    session: AsyncSession,
    user_id: int,
    item_id: int,
    old_price_cents: int,
    new_price_cents: int,
    day: date,
) -> int:
    """One holder's share of a price change. Runs inside the caller's transaction."""
    user = await UserRepository(session).get_for_update(user_id)
    if user is None:
        raise NotFound(f"User with id {user_id} not found")
    holding_repo = HoldingRepository(session)
    count = await holding_repo.count(user_id, item_id)
    return await ValuationLedger(holding_repo).revalue(
        user, day, (new_price_cents - old_price_cents) * count
    )
