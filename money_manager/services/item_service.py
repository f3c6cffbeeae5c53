"""
Item service - the ledger engine.

Every operation that changes what a user holds, or what a held item is worth,
updates the affected users' valuation entry for ``as_of`` in the same unit of
work (see services/ledger.py for the seed-or-increment rule). Each mutation
commits its own unit of work and only then invalidates cached item detail.
Controllers stay
thin: they resolve the user and the day, call one method, and map the result.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from money_manager.cache.redis_client import cache_delete, cache_get, cache_set, item_cache_key
from money_manager.config import get_settings
from money_manager.core.days import format_day_map
from money_manager.core.exceptions import Forbidden, LedgerError, NotFound, ValidationError
from money_manager.db.models.item import STATUS_PENDING, Item
from money_manager.db.models.user import User
from money_manager.db.repositories.holding_repository import HoldingRepository
from money_manager.db.repositories.item_repository import ItemRepository
from money_manager.db.repositories.user_repository import UserRepository
from money_manager.queue import tasks
from money_manager.schemas.item import (
    CatalogItemResponse,
    HolderSummary,
    HoldingResponse,
    ItemAttach,
    ItemCountUpdate,
    ItemCreate,
    ItemDetach,
    ItemPriceUpdate,
    ItemResponse,
)
from money_manager.services.ledger import ValuationLedger, revalue_holder

logger = logging.getLogger(__name__)

settings = get_settings()


def item_to_response(item: Item) -> ItemResponse:
    return ItemResponse(**_item_fields(item))


def holding_to_response(item: Item, count: int) -> HoldingResponse:
    return HoldingResponse(**_item_fields(item), count=count)


def _item_fields(item: Item) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "image": item.image,
        "url": item.url,
        "last_price_cents": item.last_price_cents,
        "highest_price_cents": item.highest_price_cents,
        "status": item.status,
        "user_id": item.user_id,
        "created_at": item.created_at,
        "price_history": format_day_map(item.price_history),
    }


@dataclass
class PriceUpdateResult:
    """Outcome of a price update. Failed holders were queued for a per-holder retry."""

    item: Item
    revalued_user_ids: list[int] = field(default_factory=list)
    failed_user_ids: list[int] = field(default_factory=list)


class ItemService:
    """Ledger operations (submit/attach/detach/count/price/delete) plus holding queries."""

    def __init__(
        self,
        item_repo: ItemRepository,
        user_repo: UserRepository,
        holding_repo: HoldingRepository,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.item_repo = item_repo
        self.user_repo = user_repo
        self.holding_repo = holding_repo
        self.session_factory = session_factory
        self.session = item_repo.session
        self.ledger = ValuationLedger(holding_repo)

    async def _get_user(self, user_id: int, *, lock: bool = True) -> User:
        if lock:
            user = await self.user_repo.get_for_update(user_id)
        else:
            user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFound(f"User with id {user_id} not found")
        return user

    async def _lock_users(self, user_ids) -> dict[int, User]:
        """Lock several users in ascending id order."""
        return {user_id: await self._get_user(user_id) for user_id in sorted(set(user_ids))}

    async def _get_item(self, item_id: int, *, lock: bool = False) -> Item:
        if lock:
            item = await self.item_repo.get_for_update(item_id)
        else:
            item = await self.item_repo.get_by_id(item_id)
        if item is None:
            raise NotFound(f"Item with id {item_id} not found")
        return item

    @staticmethod
    def _ensure_visible(user: User, item: Item) -> None:
        """Quarantined items exist only for their submitter (and privileged users)."""
        if item.is_quarantined and item.user_id != user.id and not user.is_admin:
            raise NotFound(f"Item with id {item.id} not found")

    async def _commit(self, *item_ids: int) -> None:
        """End the unit of work, then drop cached detail of the touched items."""
        await self.session.commit()
        for item_id in item_ids:
            await cache_delete(item_cache_key(item_id))

    # Ledger operations. Lock order: item row first, then users by ascending id.

    async def submit_item(self, user_id: int, data: ItemCreate, as_of: date) -> Item:
        """Create an item and attach ``data.count`` units of it to the submitter."""
        user = await self._get_user(user_id)
        item = Item(
            name=data.name,
            image=data.image,
            url=data.url,
            last_price_cents=data.price_cents,
            highest_price_cents=data.price_cents,
        )
        item.record_price(as_of, data.price_cents)
        # Non-privileged submissions stay hidden from other users until promoted
        if not user.is_admin:
            item.user_id = user.id
            item.status = STATUS_PENDING
        item = await self.item_repo.add(item)

        await self.ledger.apply(user, as_of, data.price_cents * data.count)
        await self.holding_repo.attach(user.id, item.id, data.count)
        await self._commit()
        logger.info(
            "Item submitted item_id=%s user_id=%s count=%s price_cents=%s",
            item.id, user.id, data.count, data.price_cents,
        )
        return await self._get_item(item.id)

    async def attach_item(self, user_id: int, data: ItemAttach, as_of: date) -> Item:
        """Add ``data.count`` more units of an existing item."""
        item = await self._get_item(data.item_id, lock=True)
        user = await self._get_user(user_id)
        self._ensure_visible(user, item)

        await self.ledger.apply(user, as_of, item.last_price_cents * data.count)
        await self.holding_repo.attach(user.id, item.id, data.count)
        await self._commit(item.id)
        logger.info("Item attached item_id=%s user_id=%s count=%s", item.id, user.id, data.count)
        return item

    async def detach_item(self, user_id: int, data: ItemDetach, as_of: date) -> Item | User:
        """Drop the user's whole holding of an item.

        A self-submitted item has no life of its own once its submitter drops
        it: it is deleted and the user is returned. Otherwise the item is returned.
        """
        item = await self._get_item(data.item_id, lock=True)
        lock_ids = [user_id]
        if item.user_id == user_id:
            # Removing the item debits every other holder as well
            lock_ids += [holder_id for holder_id, _ in await self.holding_repo.holder_counts(item.id)]
        user = (await self._lock_users(lock_ids))[user_id]
        count = await self.holding_repo.count(user.id, item.id)
        if count == 0:
            raise NotFound(f"Item with id {item.id} is not in the collection")

        await self.ledger.apply(user, as_of, -count * item.last_price_cents)
        await self.holding_repo.detach_all(user.id, item.id)
        logger.info("Item detached item_id=%s user_id=%s count=%s", item.id, user.id, count)

        if not user.is_admin and item.user_id == user.id:
            item_id = item.id
            await self._remove_item(item, as_of)
            await self._commit(item_id)
            return user
        await self._commit(item.id)
        return item

    async def update_holding_count(self, user_id: int, data: ItemCountUpdate, as_of: date) -> Item:
        """Replace the user's holding of an item with exactly ``data.count`` units.

        Only adjusts an existing holding: a user holding zero units gets NotFound
        (use attach to start holding an item).
        """
        item = await self._get_item(data.item_id, lock=True)
        user = await self._get_user(user_id)
        current = await self.holding_repo.count(user.id, item.id)
        if current == 0:
            raise NotFound(f"Item with id {item.id} is not in the collection")
        if data.count < 0:
            raise ValidationError("count must be zero or more")

        await self.ledger.apply(user, as_of, item.last_price_cents * (data.count - current))
        await self.holding_repo.detach_all(user.id, item.id)
        await self.holding_repo.attach(user.id, item.id, data.count)
        await self._commit(item.id)
        logger.info(
            "Holding count updated item_id=%s user_id=%s from=%s to=%s",
            item.id, user.id, current, data.count,
        )
        return item

    async def update_item_price(self, user_id: int, data: ItemPriceUpdate, as_of: date) -> PriceUpdateResult:
        """Record a new price and revalue every holder, one transaction per holder.

        The price change itself is committed first, under the item's row lock, so
        concurrent price updates see each other's ``old_price``. A failing holder
        does not roll back the others: it is reported in ``failed_user_ids`` and
        queued for retry.
        """
        item = await self._get_item(data.item_id, lock=True)
        user = await self._get_user(user_id, lock=False)
        self._ensure_visible(user, item)
        old_price = item.last_price_cents
        new_price = data.price_cents

        item.record_price(as_of, new_price)
        await self.session.flush()
        holder_ids = [holder_id for holder_id, _ in await self.holding_repo.holder_counts(item.id)]
        await self._commit(item.id)
        logger.info(
            "Item price updated item_id=%s old=%s new=%s holders=%s",
            item.id, old_price, new_price, len(holder_ids),
        )

        result = PriceUpdateResult(item=item)
        for holder_id in holder_ids:
            try:
                async with self.session_factory() as session:
                    async with session.begin():
                        await revalue_holder(session, holder_id, item.id, old_price, new_price, as_of)
            except (SQLAlchemyError, LedgerError):
                logger.exception("Revaluation failed user_id=%s item_id=%s", holder_id, item.id)
                result.failed_user_ids.append(holder_id)
                tasks.enqueue_holder_revaluation(holder_id, item.id, old_price, new_price, as_of)
            else:
                result.revalued_user_ids.append(holder_id)

        result.item = await self._get_item(item.id)
        return result

    async def delete_item(self, user_id: int, item_id: int, as_of: date) -> User:
        """Privileged delete: debit every holder, drop all holdings, delete the item.

        Returns the last holder touched, or the caller when nobody held the item.
        """
        user = await self._get_user(user_id, lock=False)
        if not user.is_admin:
            raise Forbidden("Only privileged users can delete items")
        item = await self._get_item(item_id, lock=True)
        last_holder = await self._remove_item(item, as_of)
        await self._commit(item_id)
        return last_holder or user

    async def _remove_item(self, item: Item, as_of: date) -> User | None:
        """Debit and detach every holder, then delete the item. Caller holds the item lock."""
        holders = await self.holding_repo.holder_counts(item.id)
        locked = await self._lock_users(holder_id for holder_id, _ in holders)
        last_holder = None
        for holder_id, count in holders:
            holder = locked[holder_id]
            await self.ledger.apply(holder, as_of, -count * item.last_price_cents)
            await self.holding_repo.detach_all(holder.id, item.id)
            last_holder = holder
        item_id = item.id
        await self.item_repo.delete(item)
        logger.info("Item deleted item_id=%s", item_id)
        return last_holder

    # Queries

    async def holding_count(self, user_id: int, item_id: int) -> int:
        return await self.holding_repo.count(user_id, item_id)

    async def portfolio_value(self, user_id: int) -> int:
        return await self.holding_repo.portfolio_value(user_id)

    async def list_holdings_with_count(self, user_id: int) -> list[tuple[Item, int]]:
        """Distinct held items with counts, newest item first."""
        await self._get_user(user_id, lock=False)
        return await self.holding_repo.items_with_count(user_id)

    async def get_holding(self, user_id: int, item_id: int) -> tuple[Item, int]:
        await self._get_user(user_id, lock=False)
        rows = await self.holding_repo.items_with_count(user_id, item_id=item_id)
        if not rows:
            raise NotFound(f"Item with id {item_id} is not in the collection")
        return rows[0]

    async def autocomplete(self, user_id: int, search: str) -> list[Item]:
        """Suggest public items to add: name match, not already held, newest first."""
        await self._get_user(user_id, lock=False)
        search = search.strip()
        if not search:
            raise ValidationError("search must not be blank")
        return await self.item_repo.autocomplete(user_id, search, settings.autocomplete_limit)

    async def list_catalog(self, skip: int = 0, limit: int = 20) -> list[Item]:
        return await self.item_repo.get_many_newest_first(skip=skip, limit=limit)

    async def get_catalog_item(self, item_id: int, use_cache: bool = True) -> CatalogItemResponse:
        """Item with price history and holders. Uses Redis cache to reduce DB load."""
        key = item_cache_key(item_id)
        if use_cache:
            cached = await cache_get(key)
            if cached:
                return CatalogItemResponse.model_validate_json(cached)
        item = await self._get_item(item_id)
        holders = await self.holding_repo.holders(item.id)
        resp = CatalogItemResponse(
            **_item_fields(item),
            holders=[HolderSummary(id=h.id, email=h.email) for h in holders],
        )
        if use_cache:
            await cache_set(key, resp.model_dump(mode="json"), settings.item_cache_ttl)
        return resp
