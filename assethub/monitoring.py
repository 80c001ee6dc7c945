"""Query performance monitoring for the AssetHub service.

Slow statements are reported through the standard logger so that keyset
listing regressions (for example a missing composite index) show up in the
application log without an external APM.
"""

import logging
import time
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

_STATEMENT_LOG_LIMIT = 500


def setup_query_monitoring(
    engine: AsyncEngine,
    slow_query_threshold: float = 0.1,
) -> None:
    """Log a warning for every statement slower than ``slow_query_threshold`` seconds.

    Args:
        engine: Async engine whose ``sync_engine`` receives the cursor event hooks.
        slow_query_threshold: Threshold in seconds (default 0.1s = 100ms).
    """
    if not hasattr(engine, "sync_engine"):
        logger.warning("Engine does not have sync_engine attribute, skipping query monitoring")
        return

    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def receive_before_cursor_execute(
        conn: Any,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        """Record query start time."""
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(engine.sync_engine, "after_cursor_execute")
    def receive_after_cursor_execute(
        conn: Any,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        """Log slow queries after execution."""
        total = time.perf_counter() - conn.info["query_start_time"].pop()

        if total > slow_query_threshold:
            truncated_statement = statement[:_STATEMENT_LOG_LIMIT]
            if len(statement) > _STATEMENT_LOG_LIMIT:
                truncated_statement += "..."

            logger.warning(
                "Slow query detected (%.3fs): %s",
                total,
                truncated_statement,
                extra={
                    "duration_seconds": total,
                    "threshold_seconds": slow_query_threshold,
                },
            )

    logger.info(
        "Query performance monitoring enabled (slow query threshold: %ss)",
        slow_query_threshold,
    )


__all__ = ["setup_query_monitoring"]
