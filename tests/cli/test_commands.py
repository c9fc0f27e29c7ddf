"""
Tests for the tracklist CLI commands.
"""

from __future__ import annotations

import importlib
from datetime import UTC, datetime

import pytest
import redis
import typer
from typer.testing import CliRunner

from tracklist import __version__
from tracklist.bitmap.compose import and_
from tracklist.bitmap.tracker import Tracker
from tracklist.cli import utils as utils_module
from tracklist.cli.app import app

app_module = importlib.import_module("tracklist.cli.app")

runner = CliRunner()

FIXED_NOW = datetime(2024, 3, 15, 10, 30, tzinfo=UTC)


@pytest.fixture
def cli_tracker(tracker, monkeypatch):
    """Route every command to the fakeredis-backed tracker."""
    monkeypatch.setattr(app_module, "make_tracker", lambda redis_url=None: tracker)
    return tracker


class TestRootApp:
    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("serve", "track", "count", "purge"):
            assert command in result.output

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"tracklist {__version__}" in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code in (0, 2)


class TestTrackCommand:
    def test_track_now(self, cli_tracker, raw_redis):
        result = runner.invoke(app, ["track", "active", "123"])
        assert result.exit_code == 0
        assert "recorded 123 for active" in result.output
        assert raw_redis.getbit("tracklist:active:2024-3", 123) == 1

    def test_track_at(self, cli_tracker, raw_redis):
        result = runner.invoke(app, ["track", "active", "7", "--at", "2023-01-02T03:04:05+00:00"])
        assert result.exit_code == 0
        assert raw_redis.getbit("tracklist:active:2023-1-2-3", 7) == 1

    def test_closes_pool(self, cli_tracker):
        runner.invoke(app, ["track", "active", "1"])
        assert cli_tracker.pool.closed is True

    def test_closes_pool_on_failure(self, cli_tracker):
        result = runner.invoke(app, ["track", "active", "--", "-1"])
        assert result.exit_code == 1
        assert cli_tracker.pool.closed is True

    def test_invalid_id(self, cli_tracker):
        result = runner.invoke(app, ["track", "active", "--", "-1"])
        assert result.exit_code == 1
        assert "InvalidArgumentError" in result.output

    def test_invalid_timestamp(self, cli_tracker):
        result = runner.invoke(app, ["track", "active", "1", "--at", "soon"])
        assert result.exit_code == 1
        assert "Invalid timestamp" in result.output


class TestCountCommand:
    def test_count_month(self, cli_tracker):
        cli_tracker.record_now("active", 1)
        cli_tracker.record_now("active", 2)
        result = runner.invoke(app, ["count", "active", "--at", "2024-03-15T10:30:00+00:00"])
        assert result.exit_code == 0
        assert result.output.split() == ["tracklist:active:2024-3", "2"]

    def test_count_hour(self, cli_tracker):
        cli_tracker.record_now("active", 1)
        result = runner.invoke(
            app, ["count", "active", "--unit", "hour", "--at", "2024-03-15T10:00:00+00:00"]
        )
        assert result.exit_code == 0
        assert result.output.split() == ["tracklist:active:2024-3-15-10", "1"]

    def test_closes_pool(self, cli_tracker):
        runner.invoke(app, ["count", "active"])
        assert cli_tracker.pool.closed is True

    def test_bad_unit(self, cli_tracker):
        result = runner.invoke(app, ["count", "active", "--unit", "year"])
        assert result.exit_code == 2


class TestPurgeCommand:
    def test_purge_with_yes(self, cli_tracker, raw_redis):
        cli_tracker.record_now("active", 1)
        result = runner.invoke(app, ["purge", "--yes"])
        assert result.exit_code == 0
        assert "deleted 4 keys" in result.output
        assert raw_redis.keys("tracklist:*") == []

    def test_purge_composites(self, cli_tracker, raw_redis):
        cli_tracker.record_now("active", 1)
        and_(cli_tracker.month_at("active", FIXED_NOW), cli_tracker.day_at("active", FIXED_NOW))
        result = runner.invoke(app, ["purge", "--composites", "-y"])
        assert result.exit_code == 0
        assert "deleted 5 keys" in result.output
        assert raw_redis.keys("*") == []

    def test_purge_aborted(self, cli_tracker, raw_redis):
        cli_tracker.record_now("active", 1)
        result = runner.invoke(app, ["purge"], input="n\n")
        assert result.exit_code == 1
        assert len(raw_redis.keys("tracklist:*")) == 4
        assert cli_tracker.pool.closed is True

    def test_store_failure(self, mock_pool, mock_client, monkeypatch):
        mock_client.keys.side_effect = redis.ResponseError("ERR unknown command 'KEYS'")
        monkeypatch.setattr(app_module, "make_tracker", lambda redis_url=None: Tracker(mock_pool))
        result = runner.invoke(app, ["purge", "-y"])
        assert result.exit_code == 1
        assert "StoreCommandError" in result.output
        assert mock_pool.closed is True


class TestServeCommand:
    def test_runs_uvicorn_factory(self, monkeypatch):
        calls = {}

        def fake_run(target, **kwargs):
            calls["target"] = target
            calls.update(kwargs)

        monkeypatch.setattr("uvicorn.run", fake_run)
        monkeypatch.setattr(app_module, "configure_logging", lambda **kwargs: None)

        result = runner.invoke(app, ["serve", "--port", "9001"])

        assert result.exit_code == 0
        assert calls["target"] == "tracklist.api:create_app"
        assert calls["factory"] is True
        assert calls["port"] == 9001
        assert calls["host"] == "0.0.0.0"


class TestMakeTracker:
    def test_uses_settings(self, monkeypatch):
        monkeypatch.setenv("TRACKLIST_NAMESPACE", "metrics")
        tracker = utils_module.make_tracker()
        assert tracker.namespace == "metrics"
        assert tracker.pool.address.host == "localhost"

    def test_url_override(self):
        tracker = utils_module.make_tracker("redis://cache:6390/5")
        assert tracker.pool.address.db == 5

    def test_bad_url_exits(self):
        with pytest.raises(typer.Exit):
            utils_module.make_tracker("redis://cache/abc")
