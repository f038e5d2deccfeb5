"""Reconciliation - make sure every enabled schedule has a pending job.

Runs at process start, before the dispatch loop, and again every
``refresh_interval_seconds`` while the loop runs, so schedules added or
re-enabled by another process get a job without a restart.  For each enabled
schedule without a pending job it evaluates the cron expression against
"now" and inserts a MONITORING job.  A schedule whose cron expression is
broken is logged and skipped; storage failures propagate so startup fails
loudly.

Disabled schedules are not examined.  Jobs left over from schedules that
have since been disabled are dropped by the dispatch loop when claimed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from uptimer.core.errors import InvalidCronExpression, NoUpcomingOccurrence
from uptimer.core.logging import get_logger
from uptimer.core.models.monitoring import JobType
from uptimer.core.scheduling.cron import next_run
from uptimer.core.scheduling.jobs import JobRepository
from uptimer.core.scheduling.repository import ScheduleRepository
from uptimer.core.timestamps import utc_now

logger = get_logger(__name__)


@dataclass
class ReconcileReport:
    """Outcome of one reconciliation pass."""

    examined: int = 0
    created: int = 0
    already_pending: int = 0
    skipped: dict[int, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "examined": self.examined,
            "created": self.created,
            "already_pending": self.already_pending,
            "skipped": dict(self.skipped),
        }


def reconcile(
    schedules: ScheduleRepository,
    jobs: JobRepository,
    now: datetime | None = None,
) -> ReconcileReport:
    """Insert a pending job for every enabled schedule that lacks one.

    Raises:
        RepositoryUnavailable: The store could not be read or written.
    """
    now = now or utc_now()
    report = ReconcileReport()

    for schedule in schedules.list_enabled():
        report.examined += 1

        if jobs.get_by_linked_id(schedule.id) is not None:
            report.already_pending += 1
            continue

        try:
            run_at = next_run(schedule.cron, now)
        except (InvalidCronExpression, NoUpcomingOccurrence) as e:
            logger.warning(
                "reconcile_schedule_skipped",
                schedule_id=schedule.id,
                cron=schedule.cron,
                error=e.message,
            )
            report.skipped[schedule.id] = e.message
            continue

        job_id = jobs.create(JobType.MONITORING, run_at, linked_id=schedule.id)
        report.created += 1
        logger.debug(
            "reconcile_job_created",
            schedule_id=schedule.id,
            job_id=job_id,
            run_at=run_at.isoformat(),
        )

    logger.info("reconcile_complete", **report.to_dict())
    return report


__all__ = ["ReconcileReport", "reconcile"]
