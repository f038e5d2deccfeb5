"""Tests for scheduler health checks."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from uptimer.core.errors import RepositoryUnavailable
from uptimer.core.models.monitoring import JobType
from uptimer.core.scheduling.health import check_scheduler_health


class TestCheckSchedulerHealth:
    """Test check_scheduler_health()."""

    def test_stopped_backend_is_an_error_when_required(self, scheduler_service, t0):
        report = check_scheduler_health(scheduler_service, now=t0)

        assert report.healthy is False
        assert report.checks["backend_running"] is False
        assert "Backend is not running" in report.errors

    def test_stopped_backend_allowed(self, scheduler_service, t0):
        report = check_scheduler_health(scheduler_service, require_running=False, now=t0)

        assert report.healthy is True
        assert report.checks["store_reachable"] is True
        assert report.checks["tick_recent"] is False

    @pytest.mark.asyncio
    async def test_recent_tick(self, scheduler_service, t0):
        await scheduler_service.run_cycle(now=t0)

        report = check_scheduler_health(
            scheduler_service, require_running=False, now=t0 + timedelta(seconds=5)
        )

        assert report.checks["tick_recent"] is True
        assert report.timing["tick_count"] == 1
        assert report.timing["last_tick_age_seconds"] == 5.0

    @pytest.mark.asyncio
    async def test_stale_tick_warns(self, scheduler_service, t0):
        await scheduler_service.run_cycle(now=t0)

        report = check_scheduler_health(
            scheduler_service, require_running=False, now=t0 + timedelta(minutes=5)
        )

        assert report.checks["tick_recent"] is False
        assert any("Last tick" in w for w in report.warnings)
        assert report.healthy is True

    def test_overdue_jobs_warn(self, scheduler_service, jobs, make_schedule, t0):
        schedule = make_schedule()
        jobs.create(JobType.MONITORING, t0 - timedelta(minutes=10), linked_id=schedule.id)

        report = check_scheduler_health(scheduler_service, require_running=False, now=t0)

        assert report.jobs["pending"] == 1
        assert report.jobs["overdue"] == 1
        assert report.jobs["schedules_enabled"] == 1
        assert report.checks["queue_draining"] is False

    def test_high_failure_rate_warns(self, scheduler_service, t0):
        stats = scheduler_service.get_stats()
        stats.jobs_processed = 10
        stats.jobs_failed = 5

        report = check_scheduler_health(scheduler_service, require_running=False, now=t0)

        assert any("High failure rate" in w for w in report.warnings)

    def test_store_unreachable(self, scheduler_service, t0, monkeypatch):
        broken = MagicMock(side_effect=RepositoryUnavailable("disk I/O error"))
        monkeypatch.setattr(scheduler_service.schedules, "count_enabled", broken)

        report = check_scheduler_health(scheduler_service, require_running=False, now=t0)

        assert report.healthy is False
        assert report.checks["store_reachable"] is False
        assert report.errors == ["Store unreachable: disk I/O error"]

    def test_to_dict(self, scheduler_service, t0):
        data = check_scheduler_health(scheduler_service, require_running=False, now=t0).to_dict()
        assert set(data) == {"healthy", "checks", "backend", "jobs", "timing", "warnings", "errors"}
