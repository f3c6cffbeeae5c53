"""
Pytest fixtures - per-test SQLite database, services, API client and users.
"""

import os
from datetime import date

# Settings are read once at import time; keep tests off Redis
os.environ.setdefault("CACHE_ENABLED", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from money_manager.core.dependencies import get_today
from money_manager.core.security import create_access_token, hash_password
from money_manager.db.base import Base
from money_manager.db.models import User, Valuation
from money_manager.db.repositories import HoldingRepository, ItemRepository, UserRepository
from money_manager.db.session import get_db, get_session_factory
from money_manager.main import app
from money_manager.services.item_service import ItemService
from money_manager.services.statistics_service import StatisticsService

TODAY = date(2026, 3, 14)
TOMORROW = date(2026, 3, 15)

# Hashing is slow; every fixture user shares one password
PASSWORD = "password123"
_HASHED_PASSWORD = hash_password(PASSWORD)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def item_service(session, session_factory) -> ItemService:
    return ItemService(
        ItemRepository(session),
        UserRepository(session),
        HoldingRepository(session),
        session_factory,
    )


@pytest.fixture
def statistics_service(session) -> StatisticsService:
    return StatisticsService(UserRepository(session), HoldingRepository(session))


@pytest.fixture
def make_user(session):
    """Create and commit a user."""

    async def _make(email: str, *, is_admin: bool = False, full_name: str = "Collector") -> User:
        user = User(
            email=email,
            hashed_password=_HASHED_PASSWORD,
            full_name=full_name,
            is_admin=is_admin,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _make


@pytest_asyncio.fixture
async def test_user(make_user) -> User:
    return await make_user("test@example.com")


@pytest_asyncio.fixture
async def admin_user(make_user) -> User:
    return await make_user("admin@example.com", is_admin=True, full_name="Admin")


@pytest.fixture
def read_valuation(session_factory):
    """Committed valuation entry for (user, day), read through a fresh session."""

    async def _read(user_id: int, day: date = TODAY) -> int | None:
        async with session_factory() as s:
            result = await s.execute(
                select(Valuation.amount_cents).where(Valuation.user_id == user_id, Valuation.day == day)
            )
            return result.scalar_one_or_none()

    return _read


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        # One session per request, like the real get_db
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_today] = lambda: TODAY
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    return auth_headers_for(test_user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return auth_headers_for(admin_user)


@pytest.fixture
def headers_for():
    return auth_headers_for


@pytest.fixture
def run_request(session_factory):
    """Run ``op(item_service)`` in its own session and commit, the way one HTTP request would."""

    async def _run(op):
        async with session_factory() as s:
            svc = ItemService(ItemRepository(s), UserRepository(s), HoldingRepository(s), session_factory)
            result = await op(svc)
            await s.commit()
            return result

    return _run
