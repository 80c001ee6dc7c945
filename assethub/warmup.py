"""Startup warmup to avoid paying connection setup on the first request."""

from __future__ import annotations

import logging
import time
import uuid

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from assethub.db.connection import Database, begin_engine_transaction
from assethub.db.repositories import FavouriteRepository

logger = logging.getLogger(__name__)

_WARMUP_USER_ID = uuid.UUID(int=0)


async def warmup_database(engine: AsyncEngine) -> bool:
    """Open a pooled connection and issue ``SELECT 1``.

    Failures are logged and reported through the return value; they never abort
    startup because the first real request will surface the same problem with
    a proper error response.
    """
    try:
        start = time.time()
        async with begin_engine_transaction(engine) as conn:
            await conn.execute(text("SELECT 1"))

        elapsed = (time.time() - start) * 1000
        logger.info("Database connection warmed up (%.0fms)", elapsed)
        return True
    except Exception as e:
        logger.warning("Database warmup failed: %s", e)
        return False


async def warmup_repository_queries(database: Database) -> bool:
    """Compile the keyset listing query so mappers and loaders are configured."""
    try:
        start = time.time()
        async with database.session() as session:
            # An unknown user id keeps the query cheap while exercising the
            # joined eager load used by the favourites listing.
            await FavouriteRepository(session).list_keyset(
                _WARMUP_USER_ID, limit=1
            )

        elapsed = (time.time() - start) * 1000
        logger.info("Repository warmup executed (%.0fms)", elapsed)
        return True
    except Exception as e:
        logger.warning("Repository warmup failed: %s", e)
        return False


async def warmup_all(database: Database) -> None:
    """Run every warmup step in sequence and log the total time."""

    logger.info("=" * 60)
    logger.info("Warming up backend connections...")
    logger.info("=" * 60)

    start = time.time()

    await warmup_database(database.engine)
    await warmup_repository_queries(database)

    total_elapsed = (time.time() - start) * 1000
    logger.info("=" * 60)
    logger.info("Backend warmup complete (%.0fms)", total_elapsed)
    logger.info("=" * 60)


__all__ = ["warmup_all", "warmup_database", "warmup_repository_queries"]
