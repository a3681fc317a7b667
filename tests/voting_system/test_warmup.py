"""Tests for the startup warmup routines."""

from __future__ import annotations

import logging
from typing import Any
from unittest.mock import AsyncMock

import pytest

import voting_system.warmup as warmup


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
async def test_warmup_database_executes_ping(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    caplog.set_level(logging.INFO)
    dummy_txn = _DummyTransaction()
    sentinel_engine = object()
    captured_engines: list[object] = []

    def _capture_engine(engine: object) -> _DummyTransaction:
        captured_engines.append(engine)
        return dummy_txn

    monkeypatch.setattr(warmup, "begin_engine_transaction", _capture_engine)

    assert await warmup.warmup_database(resolve_engine=lambda: sentinel_engine) is True

    assert captured_engines == [sentinel_engine]
    executed_statement = dummy_txn.connection.execute.await_args.args[0]
    assert str(executed_statement).strip().upper() == "SELECT 1"
    assert "Database connection warmed up" in caplog.text


@pytest.mark.asyncio
async def test_warmup_database_failure_is_logged_not_raised(
    caplog: pytest.LogCaptureFixture,
) -> None:
    def _broken_engine() -> Any:
        raise RuntimeError("database offline")

    assert await warmup.warmup_database(resolve_engine=_broken_engine) is False
    assert "Database warmup failed" in caplog.text


@pytest.mark.asyncio
async def test_warmup_redis_reports_unavailable_cache(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    import voting_system.cache as cache

    caplog.set_level(logging.INFO)
    monkeypatch.setattr(cache, "get_redis", AsyncMock(return_value=None))

    assert await warmup.warmup_redis() is False
    assert "Redis warmup skipped" in caplog.text


@pytest.mark.asyncio
async def test_warmup_redis_success(monkeypatch: pytest.MonkeyPatch) -> None:
    import voting_system.cache as cache

    monkeypatch.setattr(cache, "get_redis", AsyncMock(return_value=object()))

    assert await warmup.warmup_redis() is True
