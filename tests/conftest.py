"""
Shared pytest fixtures and configuration for uptimer tests.

This module provides:
- An in-memory SQLite connection with the uptimer schema applied
- Schedule and job repositories bound to that connection
- Settings cache and logging configuration isolation between tests
- A fixed reference time for deterministic cron/status assertions

Usage:
    Fixtures are auto-discovered by pytest.

    def test_something(schedules, jobs, t0):
        ...
"""

import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest

# Ensure uptimer package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Drop the cached settings so env changes in one test do not leak."""
    from uptimer.core.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any structlog configuration a test (or CLI invocation) applied."""
    import structlog

    yield
    structlog.reset_defaults()


@pytest.fixture
def conn():
    """In-memory SQLite connection with the schema applied."""
    from uptimer.core.schema_loader import apply_all_schemas
    from uptimer.core.sqlite_conn import SqliteConnection

    connection = SqliteConnection(":memory:")
    apply_all_schemas(connection)
    yield connection
    connection.close()


@pytest.fixture
def schedules(conn):
    """ScheduleRepository over the test connection."""
    from uptimer.core.scheduling.repository import ScheduleRepository

    return ScheduleRepository(conn)


@pytest.fixture
def jobs(conn):
    """JobRepository over the test connection."""
    from uptimer.core.scheduling.jobs import JobRepository

    return JobRepository(conn)


@pytest.fixture
def t0():
    """Fixed, second-aligned reference time."""
    return datetime(2024, 1, 1, 10, 15, 0, tzinfo=UTC)


@pytest.fixture
def make_schedule(schedules):
    """Factory for persisted schedules with sensible defaults."""
    from uptimer.core.models.monitoring import CheckMethod
    from uptimer.core.scheduling.repository import ScheduleCreate

    def _make(
        name="homepage",
        target="https://ok.example",
        cron="*/5 * * * *",
        method=CheckMethod.GET,
        enabled=True,
    ):
        return schedules.create(
            ScheduleCreate(name=name, target=target, cron=cron, method=method, enabled=enabled)
        )

    return _make
