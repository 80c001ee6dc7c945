"""Regression tests for startup warmup routines."""

from __future__ import annotations

import logging
from typing import Any
from unittest.mock import AsyncMock

import pytest

import assethub.warmup as warmup
from assethub.db.connection import Database


class _DummyTransaction:
    """Async context manager handing out a mocked connection."""

    def __init__(self) -> None:
        self.connection: AsyncMock = AsyncMock()

    async def __aenter__(self) -> AsyncMock:
        return self.connection

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: Any,
    ) -> bool:
        return False


@pytest.mark.asyncio
async def test_warmup_database_executes_ping(monkeypatch: pytest.MonkeyPatch) -> None:
    dummy_txn = _DummyTransaction()
    sentinel_engine = object()
    captured_engines: list[object] = []

    def _capture_engine(engine: object) -> _DummyTransaction:
        captured_engines.append(engine)
        return dummy_txn

    monkeypatch.setattr(warmup, "begin_engine_transaction", _capture_engine)

    assert await warmup.warmup_database(sentinel_engine) is True  # type: ignore[arg-type]

    assert captured_engines == [sentinel_engine]
    executed_statement = dummy_txn.connection.execute.await_args.args[0]
    assert str(executed_statement).strip().upper() == "SELECT 1"


@pytest.mark.asyncio
async def test_warmup_database_failure_is_logged_not_raised(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    caplog.set_level(logging.WARNING, logger="assethub.warmup")

    def _explode(engine: object) -> _DummyTransaction:
        raise ConnectionRefusedError("database unavailable")

    monkeypatch.setattr(warmup, "begin_engine_transaction", _explode)

    assert await warmup.warmup_database(object()) is False  # type: ignore[arg-type]
    assert any("Database warmup failed" in message for message in caplog.messages)


@pytest.mark.asyncio
async def test_warmup_all_against_sqlite(
    database: Database, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="assethub.warmup")

    assert await warmup.warmup_database(database.engine) is True
    assert await warmup.warmup_repository_queries(database) is True

    await warmup.warmup_all(database)
    assert any("Backend warmup complete" in message for message in caplog.messages)
