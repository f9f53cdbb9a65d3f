"""
Pytest fixtures for test database, client, accounts and tokens.

Each test gets a fresh SQLite database file (or TEST_DATABASE_URL when set)
and an HTTP client whose requests each run in their own session, committed
or rolled back exactly like production requests.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./.pytest-campus-events.db")
os.environ["REDIS_ENABLED"] = "false"
os.environ.setdefault("SECRET_KEY", "test-secret-key-long-enough-for-hs256-signing")

from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campus_events.core.security import create_access_token, hash_password
from campus_events.db.base import Base
from campus_events.db.session import build_engine, build_sessionmaker, get_db
from campus_events.main import app
from campus_events.models.account import Account
from campus_events.models.event import Event

TEST_PASSWORD = "testpassword123"


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create tables, yield a session factory, then drop everything."""
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    engine = build_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield build_sessionmaker(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that routes the DB dependency to the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create_account(session: AsyncSession, **fields) -> Account:
    account = Account(hashed_password=hash_password(TEST_PASSWORD), **fields)
    session.add(account)
    await session.commit()
    await session.refresh(account)
    return account


def bearer(account: Account) -> dict:
    return {"Authorization": f"Bearer {create_access_token(account.id, account.role)}"}


@pytest_asyncio.fixture
async def student(db_session: AsyncSession) -> Account:
    return await _create_account(
        db_session, role="student", email="student@campus.edu", name="Sam Student", course="CS", year=2
    )


@pytest_asyncio.fixture
async def other_student(db_session: AsyncSession) -> Account:
    return await _create_account(
        db_session, role="student", email="other@campus.edu", name="Olive Other", course="Math"
    )


@pytest_asyncio.fixture
async def club(db_session: AsyncSession) -> Account:
    return await _create_account(
        db_session, role="club", email="tech@campus.edu", name="Tech Club", description="We build things"
    )


@pytest_asyncio.fixture
async def other_club(db_session: AsyncSession) -> Account:
    return await _create_account(db_session, role="club", email="chess@campus.edu", name="Chess Club")


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> Account:
    return await _create_account(db_session, role="admin", email="admin@campus.edu", name="Admin")


@pytest.fixture
def student_headers(student: Account) -> dict:
    return bearer(student)


@pytest.fixture
def club_headers(club: Account) -> dict:
    return bearer(club)


@pytest.fixture
def other_club_headers(other_club: Account) -> dict:
    return bearer(other_club)


@pytest.fixture
def admin_headers(admin: Account) -> dict:
    return bearer(admin)


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession, club: Account) -> Event:
    event = Event(
        name="Tech Fest",
        date=datetime(2025, 5, 1, tzinfo=timezone.utc),
        venue="Hall A",
        price=100,
        owner_club_id=club.id,
        purchase_count=0,
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest.fixture
def headers_for():
    """Bearer headers for any account."""
    return bearer


@pytest_asyncio.fixture
async def make_students(db_session: AsyncSession):
    async def _make(count: int) -> list[Account]:
        return [
            await _create_account(
                db_session, role="student", email=f"buyer{i}@campus.edu", name=f"Buyer {i}", course="CS"
            )
            for i in range(count)
        ]

    return _make
