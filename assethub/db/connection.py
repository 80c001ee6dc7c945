from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from assethub.db.models import Base
from assethub.monitoring import setup_query_monitoring
from assethub.settings import AppSettings

logger = logging.getLogger(__name__)


def sanitize_database_url(url: str) -> str:
    """Hide the password portion of ``url`` so it can be logged."""
    if "://" not in url:
        return url

    scheme, rest = url.split("://", 1)

    if "@" in rest:
        auth, host_db = rest.split("@", 1)
        if ":" in auth:
            user, _ = auth.split(":", 1)
            return f"{scheme}://{user}:***@{host_db}"
        return f"{scheme}://{auth}@{host_db}"

    return url


def create_engine(url: str, *, slow_query_threshold: float | None = None) -> AsyncEngine:
    """Create the async SQLAlchemy engine.

    PostgreSQL gets a warm connection pool. SQLite uses SQLAlchemy's default
    pool because pool sizing arguments are rejected by its dialect.
    """

    if url.startswith("sqlite") and ":memory:" in url:
        # Every pooled connection would otherwise see its own empty database.
        engine = create_async_engine(
            url,
            future=True,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    elif url.startswith("sqlite"):
        engine = create_async_engine(url, future=True, echo=False)
    else:
        engine = create_async_engine(
            url,
            future=True,
            echo=False,
            pool_size=10,  # Maintain 10 warm connections
            max_overflow=20,  # Allow up to 30 total connections
            pool_pre_ping=True,  # Validate connections before use
            pool_recycle=1800,  # Recycle connections every 30 min
            pool_timeout=30,  # Timeout for getting connection from pool
        )

    if slow_query_threshold is not None:
        setup_query_monitoring(engine, slow_query_threshold=slow_query_threshold)

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@asynccontextmanager
async def begin_engine_transaction(engine: AsyncEngine) -> AsyncIterator[Any]:
    """Yield a connection from ``engine.begin()`` with mock-friendly support."""

    begin_result = engine.begin()
    if asyncio.iscoroutine(begin_result):
        begin_context = await begin_result
    else:
        begin_context = begin_result

    async with begin_context as connection:
        yield connection


class Database:
    """Owns the engine and session factory for the lifetime of the process.

    An instance is built once at startup, stored on ``app.state.database`` and
    disposed during shutdown.  Request handlers obtain sessions through
    :func:`get_db` rather than touching module-level globals.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = create_session_factory(engine)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> Database:
        engine = create_engine(
            settings.resolved_database_url,
            slow_query_threshold=settings.slow_query_threshold,
        )
        return cls(engine)

    async def create_schema(self) -> None:
        """Create any missing tables."""

        async with begin_engine_transaction(self.engine) as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session that commits on success and rolls back otherwise."""

        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except BaseException:
                # Cancellation (request deadline) must not leave partial writes.
                await session.rollback()
                raise

    async def dispose(self) -> None:
        logger.info("Disposing database engine")
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    """Return the :class:`Database` attached during application startup."""

    database: Database | None = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database has not been initialised; is the lifespan running?")
    return database


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Dependency to provide database session.

    Yields async session and ensures proper cleanup even on errors.
    """
    async with get_database(request).session() as session:
        yield session


__all__ = [
    "Database",
    "begin_engine_transaction",
    "create_engine",
    "create_session_factory",
    "get_database",
    "get_db",
    "sanitize_database_url",
]
