"""Shared fixtures for asynchronous database access."""

from __future__ import annotations

import itertools
from collections.abc import AsyncIterator, Iterator
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

import assethub.services.favourites_service as favourites_module
from assethub.db.connection import Database, create_engine
from assethub.utils.request_context import clear_request_id
from tests.assethub.support import T0


@pytest_asyncio.fixture
async def database() -> AsyncIterator[Database]:
    """Provide an in-memory SQLite :class:`Database` with the schema created."""
    pytest.importorskip("aiosqlite")
    db = Database(create_engine("sqlite+aiosqlite:///:memory:"))
    await db.create_schema()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def session(database: Database) -> AsyncIterator[AsyncSession]:
    async with database.session_factory() as db_session:
        yield db_session
        if db_session.in_transaction():
            await db_session.rollback()


@pytest.fixture
def ticking_clock(monkeypatch: pytest.MonkeyPatch) -> Iterator[list[datetime]]:
    """Stamp new favourites one second apart starting at ``T0``.

    Yields the list of timestamps handed out so far.
    """
    issued: list[datetime] = []
    ticks = itertools.count()

    def _now() -> datetime:
        stamp = T0 + timedelta(seconds=next(ticks))
        issued.append(stamp)
        return stamp

    monkeypatch.setattr(favourites_module, "utcnow", _now)
    yield issued


@pytest.fixture(autouse=True)
def _reset_request_id() -> Iterator[None]:
    yield
    clear_request_id()
