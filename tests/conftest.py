"""
Shared pytest fixtures for tracklist tests.

This module provides:
- An in-process Redis (fakeredis) shared by a pool, a tracker and a raw client
- A pool whose redis-py client is a MagicMock, for failure-path tests
- A fixed UTC instant for deterministic bucket keys

Usage:
    def test_something(tracker, raw_redis):
        tracker.record_at_time("active", 1, FIXED_NOW)
        assert raw_redis.exists("tracklist:active:2024-3")
"""

from __future__ import annotations

from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock

import fakeredis
import pytest

from tracklist.bitmap.pool import ConnectionPool
from tracklist.bitmap.tracker import Tracker
from tracklist.core.settings import clear_settings_cache

# Friday 2024-03-15 10:30 UTC, ISO week 11 of 2024
FIXED_NOW = datetime(2024, 3, 15, 10, 30, tzinfo=UTC)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def redis_server() -> fakeredis.FakeServer:
    """A fresh in-process Redis server per test."""
    return fakeredis.FakeServer()


@pytest.fixture
def pool(redis_server: fakeredis.FakeServer) -> Generator[ConnectionPool, None, None]:
    """Pool whose connections talk to ``redis_server``."""
    pool = ConnectionPool(connection_class=fakeredis.FakeRedisConnection, server=redis_server)
    yield pool
    pool.close()


@pytest.fixture
def tracker(pool: ConnectionPool) -> Tracker:
    return Tracker(pool, clock=lambda: FIXED_NOW)


@pytest.fixture
def raw_redis(redis_server: fakeredis.FakeServer) -> fakeredis.FakeRedis:
    """Direct client on the same server, for inspecting and corrupting keys."""
    return fakeredis.FakeRedis(server=redis_server)


# =============================================================================
# Mock Client Fixtures
# =============================================================================


@pytest.fixture
def mock_client() -> MagicMock:
    """A ``redis.Redis`` stand-in whose replies tests script."""
    client = MagicMock(name="Redis")
    client.ping.return_value = True
    return client


@pytest.fixture
def mock_pool(mock_client: MagicMock) -> ConnectionPool:
    """Pool that issues every command through ``mock_client``."""
    pool = ConnectionPool()
    pool.client = mock_client
    return pool


# =============================================================================
# Settings Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Keep ``.env`` files and TRACKLIST_* variables out of tests."""
    monkeypatch.chdir(tmp_path)
    for key in [
        "TRACKLIST_REDIS_URL",
        "TRACKLIST_NAMESPACE",
        "TRACKLIST_LOG_LEVEL",
        "TRACKLIST_LOG_FORMAT",
    ]:
        monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
