"""Scheduler health checks.

┌──────────────────────────────────────────────────────────────────────────────┐
│  SCHEDULER HEALTH MONITORING                                                  │
│                                                                               │
│  Health Checks:                                                               │
│  1. Backend Health: Is the timing backend running?                           │
│  2. Tick Health: Are dispatch cycles happening at expected intervals?        │
│  3. Job Health: Are claimed jobs completing, or mostly failing?              │
│  4. Queue Health: Are pending jobs being picked up, or piling up overdue?    │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from uptimer.core.errors import UptimerError
from uptimer.core.logging import get_logger
from uptimer.core.timestamps import utc_now

if TYPE_CHECKING:
    from datetime import datetime

    from .service import SchedulerService

logger = get_logger(__name__)


@dataclass
class SchedulerHealthReport:
    """Complete scheduler health report."""

    healthy: bool
    checks: dict[str, bool] = field(default_factory=dict)
    backend: dict[str, Any] = field(default_factory=dict)
    jobs: dict[str, int] = field(default_factory=dict)
    timing: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "healthy": self.healthy,
            "checks": self.checks,
            "backend": self.backend,
            "jobs": self.jobs,
            "timing": self.timing,
            "warnings": self.warnings,
            "errors": self.errors,
        }


def check_scheduler_health(
    service: SchedulerService,
    tick_age_threshold_seconds: float = 60.0,
    require_running: bool = True,
    now: datetime | None = None,
) -> SchedulerHealthReport:
    """Comprehensive scheduler health check.

    Args:
        service: SchedulerService to check
        tick_age_threshold_seconds: Max age of last tick (and of the oldest
            pending job) before warning
        require_running: Treat a stopped backend as an error
        now: Reference time (defaults to current UTC time)

    Returns:
        SchedulerHealthReport with all checks
    """
    report = SchedulerHealthReport(healthy=True)
    now = now or utc_now()

    # === Backend Health ===
    backend_health = service.backend.health()
    report.backend = backend_health
    is_running = bool(backend_health.get("healthy", False))
    report.checks["backend_running"] = is_running
    if require_running and not is_running:
        report.errors.append("Backend is not running")

    # === Tick Health ===
    stats = service.get_stats()
    last_tick = stats.last_tick

    if last_tick:
        tick_age = (now - last_tick).total_seconds()
        report.timing["last_tick_age_seconds"] = tick_age
        report.timing["last_tick"] = last_tick.isoformat()

        tick_ok = tick_age < tick_age_threshold_seconds
        report.checks["tick_recent"] = tick_ok
        if not tick_ok:
            report.warnings.append(
                f"Last tick was {tick_age:.1f}s ago (threshold: {tick_age_threshold_seconds}s)"
            )
    else:
        report.checks["tick_recent"] = False
        if service.is_running:
            report.warnings.append("No ticks recorded yet")

    report.timing["tick_count"] = stats.tick_count
    report.timing["interval_seconds"] = service.interval

    # === Job Stats ===
    report.jobs["claimed"] = stats.jobs_claimed
    report.jobs["processed"] = stats.jobs_processed
    report.jobs["failed"] = stats.jobs_failed
    report.jobs["abandoned"] = stats.jobs_abandoned
    report.jobs["dropped"] = stats.jobs_dropped

    total = stats.jobs_processed + stats.jobs_failed
    if total > 10 and stats.jobs_failed / total > 0.1:
        report.warnings.append(
            f"High failure rate: {stats.jobs_failed}/{total} "
            f"({stats.jobs_failed / total * 100:.1f}%)"
        )

    # === Queue Health ===
    try:
        report.jobs["schedules_enabled"] = service.schedules.count_enabled()
        report.jobs["pending"] = service.jobs.count()
        overdue = service.jobs.due(now - timedelta(seconds=tick_age_threshold_seconds))
        report.jobs["overdue"] = len(overdue)
        report.checks["queue_draining"] = not overdue
        if overdue:
            report.warnings.append(
                f"{len(overdue)} job(s) overdue by more than {tick_age_threshold_seconds}s"
            )
        report.checks["store_reachable"] = True
    except UptimerError as e:
        logger.warning("health_store_check_failed", **e.to_dict())
        report.checks["store_reachable"] = False
        report.errors.append(f"Store unreachable: {e.message}")

    # === Final Assessment ===
    if report.errors:
        report.healthy = False

    return report


__all__ = ["SchedulerHealthReport", "check_scheduler_health"]
