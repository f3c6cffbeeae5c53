"""
BDD step definitions for the valuation ledger feature (pytest-bdd).
Steps are sync; each one drives the async services on a loop owned by the ``world`` fixture.
"""

import asyncio
from datetime import date

import pytest
from pytest_bdd import given, parsers, scenarios, then, when
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from money_manager.core.exceptions import NotFound
from money_manager.db.base import Base
from money_manager.db.models import User, Valuation
from money_manager.db.repositories import HoldingRepository, ItemRepository, UserRepository
from money_manager.schemas.item import ItemAttach, ItemCreate, ItemDetach, ItemPriceUpdate
from money_manager.services.item_service import ItemService
from money_manager.services.statistics_service import StatisticsService

scenarios("../features/valuation_ledger.feature")

TODAY = date(2026, 3, 14)


class World:
    """Collectors and items by name, plus one fresh session per step."""

    def __init__(self, loop: asyncio.AbstractEventLoop, session_factory: async_sessionmaker[AsyncSession]):
        self.loop = loop
        self.session_factory = session_factory
        self.users: dict[str, int] = {}
        self.items: dict[str, int] = {}

    def run(self, op):
        """Run ``op(session)`` in its own committed session."""

        async def _run():
            async with self.session_factory() as session:
                result = await op(session)
                await session.commit()
                return result

        return self.loop.run_until_complete(_run())

    def service(self, session: AsyncSession) -> ItemService:
        return ItemService(
            ItemRepository(session),
            UserRepository(session),
            HoldingRepository(session),
            self.session_factory,
        )


@pytest.fixture
def world(tmp_path):
    loop = asyncio.new_event_loop()
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bdd.db'}")

    async def create_schema():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    loop.run_until_complete(create_schema())
    yield World(loop, async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False))
    loop.run_until_complete(engine.dispose())
    loop.close()


def _create_user(world: World, name: str, is_admin: bool) -> None:
    async def op(session):
        user = User(email=f"{name}@example.com", hashed_password="x", full_name=name, is_admin=is_admin)
        session.add(user)
        await session.flush()
        return user.id

    world.users[name] = world.run(op)


@given(parsers.parse('a collector "{name}"'))
def collector(world, name):
    _create_user(world, name, is_admin=False)


@given(parsers.parse('a privileged collector "{name}"'))
def privileged_collector(world, name):
    _create_user(world, name, is_admin=True)


@when(parsers.parse('"{name}" submits "{item}" at {price:d} cents x {count:d}'))
def submit(world, name, item, price, count):
    data = ItemCreate(name=item, image="", url="", price_cents=price, count=count)
    submitted = world.run(lambda s: world.service(s).submit_item(world.users[name], data, TODAY))
    world.items[item] = submitted.id


@when(parsers.parse('"{name}" attaches {count:d} of "{item}"'))
def attach(world, name, count, item):
    data = ItemAttach(item_id=world.items[item], count=count)
    world.run(lambda s: world.service(s).attach_item(world.users[name], data, TODAY))


@when(parsers.parse('"{name}" sets the price of "{item}" to {price:d} cents'))
def set_price(world, name, item, price):
    data = ItemPriceUpdate(item_id=world.items[item], price_cents=price)
    result = world.run(lambda s: world.service(s).update_item_price(world.users[name], data, TODAY))
    assert result.failed_user_ids == []


@when(parsers.parse('"{name}" detaches "{item}"'))
def detach(world, name, item):
    data = ItemDetach(item_id=world.items[item])
    world.run(lambda s: world.service(s).detach_item(world.users[name], data, TODAY))


@then(parsers.parse('"{name}" holds {count:d} of "{item}"'))
def holds(world, name, count, item):
    held = world.run(lambda s: world.service(s).holding_count(world.users[name], world.items[item]))
    assert held == count


@then(parsers.parse("today's valuation of \"{name}\" is {amount:d} cents"))
def todays_valuation(world, name, amount):
    async def op(session):
        result = await session.execute(
            select(Valuation.amount_cents).where(
                Valuation.user_id == world.users[name], Valuation.day == TODAY
            )
        )
        return result.scalar_one()

    assert world.run(op) == amount


@then(parsers.parse('the current and peak price of "{item}" are {price:d} cents'))
def current_and_peak(world, item, price):
    detail = world.run(lambda s: world.service(s).get_catalog_item(world.items[item], use_cache=False))
    assert detail.last_price_cents == price
    assert detail.highest_price_cents == price


@then(parsers.parse('"{item}" no longer exists'))
def item_gone(world, item):
    with pytest.raises(NotFound):
        world.run(lambda s: world.service(s).get_catalog_item(world.items[item], use_cache=False))


@then(parsers.parse('the last known valuation of "{name}" is {amount:d} cents today'))
def last_known(world, name, amount):
    def op(session):
        svc = StatisticsService(UserRepository(session), HoldingRepository(session))
        return svc.last_known_valuation(world.users[name], TODAY)

    last = world.run(op)
    assert (last.day, last.amount_cents) == (TODAY, amount)
