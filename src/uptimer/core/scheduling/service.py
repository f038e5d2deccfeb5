"""Scheduler service - the dispatch loop.

Manifesto:
    The SchedulerService is the central coordinator that combines backend
    (timing), job repository (queue), schedule repository (targets), lock
    pool (per-schedule safety) and health checker (execution) into one
    monitoring loop.  The beat-as-poller pattern decouples timing from job
    evaluation for testability: tests call ``run_cycle()`` directly.

Tags:
    uptimer, scheduling, orchestrator, beat-as-poller, service

Doc-Types:
    api-reference, architecture-diagram


┌──────────────────────────────────────────────────────────────────────────────┐
│  SCHEDULER SERVICE ARCHITECTURE                                               │
│                                                                               │
│   Backend tick ──► refresh_if_due(now)  (reconcile, throttled)               │
│                ──► run_cycle(now)                                             │
│                      │                                                        │
│                      ├── jobs.due(now)          (failure aborts the cycle)   │
│                      ├── for each due job:                                    │
│                      │     jobs.delete(id)      (claim; False = taken)       │
│                      │     create_task(_process_job(job))                     │
│                      └── gather(tasks)                                        │
│                                                                               │
│   _process_job(job)                                                           │
│      MONITORING:                                                              │
│        1. schedules.get(linked_id)   missing  ──► abandon                     │
│        2. schedule.enabled           disabled ──► drop                        │
│        3. re-enqueue next_run(cron, now) unless a job already exists         │
│        4. check(client, target, method)                                       │
│        5. status_updater.apply(...)  (schedule lock, check-time now)         │
│        6. notifier.notify(...)       (WENT_DOWN / WENT_UP only)              │
│      anything else ──► log and drop                                           │
│                                                                               │
│   A failure in one job never affects its siblings or the next cycle.         │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

import httpx

from uptimer.core.errors import (
    InvalidCronExpression,
    NoUpcomingOccurrence,
    ScheduleMissingForJob,
    UptimerError,
)
from uptimer.core.logging import LogContext, get_logger
from uptimer.core.models.monitoring import Job, JobType, Schedule
from uptimer.core.monitoring.checker import build_client, check
from uptimer.core.monitoring.notify import NOTIFY_ON, Notification, Notifier, build_notifier
from uptimer.core.monitoring.status import StatusChange, StatusUpdater
from uptimer.core.settings import UptimerSettings
from uptimer.core.timestamps import utc_now

from .cron import next_run
from .jobs import JobRepository
from .lock_manager import ScheduleLockPool
from .protocol import BackendHealth, SchedulerBackend
from .reconciler import ReconcileReport, reconcile
from .repository import ScheduleRepository

logger = get_logger(__name__)

ClientFactory = Callable[[], httpx.AsyncClient]


@dataclass
class SchedulerStats:
    """Counters for the dispatch loop."""

    tick_count: int = 0
    jobs_claimed: int = 0
    jobs_processed: int = 0
    jobs_failed: int = 0
    jobs_abandoned: int = 0
    jobs_dropped: int = 0
    refreshes: int = 0
    notifications_failed: int = 0
    last_tick: datetime | None = None
    last_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["last_tick"] = self.last_tick.isoformat() if self.last_tick else None
        return data


@dataclass
class SchedulerHealth:
    """Health status for scheduler service."""

    healthy: bool
    backend: BackendHealth | dict
    schedules_enabled: int = 0
    pending_jobs: int = 0
    last_tick: datetime | None = None
    stats: SchedulerStats = field(default_factory=SchedulerStats)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "healthy": self.healthy,
            "backend": self.backend.to_dict()
            if isinstance(self.backend, BackendHealth)
            else self.backend,
            "schedules_enabled": self.schedules_enabled,
            "pending_jobs": self.pending_jobs,
            "last_tick": self.last_tick.isoformat() if self.last_tick else None,
            "stats": self.stats.to_dict(),
        }


class SchedulerService:
    """Dispatch loop - beat-as-poller over the durable job queue.

    Example:
        >>> service = SchedulerService(
        ...     backend=ThreadSchedulerBackend(),
        ...     schedules=ScheduleRepository(conn),
        ...     jobs=JobRepository(conn),
        ... )
        >>> service.start()
        >>> # Later...
        >>> service.stop()
    """

    def __init__(
        self,
        backend: SchedulerBackend,
        schedules: ScheduleRepository,
        jobs: JobRepository,
        lock_pool: ScheduleLockPool | None = None,
        settings: UptimerSettings | None = None,
        client_factory: ClientFactory | None = None,
        interval_seconds: float | None = None,
        clock: Callable[[], datetime] = utc_now,
        notifier: Notifier | None = None,
    ) -> None:
        """Initialize scheduler service.

        Args:
            backend: Timing backend
            schedules: Schedule repository
            jobs: Job repository
            lock_pool: Per-schedule lock pool (created if omitted)
            settings: Runtime settings (defaults used if omitted)
            client_factory: Builds the HTTP client; called lazily on the loop
            interval_seconds: Tick interval, overrides ``settings``
            clock: Source of "now" for backend cycles and check completion
            notifier: Receives up/down transitions (defaults to ``build_notifier``)
        """
        self.settings = settings or UptimerSettings()
        self.backend = backend
        self.schedules = schedules
        self.jobs = jobs
        self.lock_pool = lock_pool or ScheduleLockPool()
        self.status_updater = StatusUpdater(schedules, self.lock_pool)
        self.interval = interval_seconds or self.settings.tick_interval_seconds
        self._client_factory = client_factory or (lambda: build_client(self.settings))
        self._client: httpx.AsyncClient | None = None
        self._clock = clock
        self.notifier = notifier or build_notifier(self.settings)
        self.refresh_interval = self.settings.refresh_interval_seconds
        self._last_refresh: datetime | None = None

        self._stats = SchedulerStats()
        self._running = False

    # === Lifecycle ===

    def start(self) -> None:
        """Start the backend tick loop."""
        if self._running:
            logger.warning("scheduler_already_running")
            return

        logger.info("scheduler_starting", backend=self.backend.name, interval=self.interval)
        self.backend.start(self._tick, self.interval, shutdown_callback=self.aclose)
        self._running = True

    def stop(self) -> None:
        """Stop the loop; in-flight jobs are cancelled and the client closed."""
        if not self._running:
            return

        logger.info("scheduler_stopping")
        self.backend.stop()
        self._running = False
        logger.info("scheduler_stopped", **self._stats.to_dict())

    @property
    def is_running(self) -> bool:
        """Check if service is running."""
        return self._running

    async def aclose(self) -> None:
        """Close the HTTP client if one was created, and the notifier."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        await self.notifier.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    # === Cycle Processing ===

    async def _tick(self) -> None:
        """Backend entry point."""
        now = self._clock()
        self.refresh_if_due(now)
        await self.run_cycle(now)

    def refresh(self, now: datetime | None = None) -> ReconcileReport:
        """Reconcile now: give every enabled schedule without a job its next job.

        Raises:
            RepositoryUnavailable: The store could not be read or written.
        """
        now = now or self._clock()
        report = reconcile(self.schedules, self.jobs, now=now)
        self._last_refresh = now
        self._stats.refreshes += 1
        return report

    def refresh_if_due(self, now: datetime) -> ReconcileReport | None:
        """Refresh when ``refresh_interval`` has elapsed since the last one.

        A zero interval disables periodic refresh.  Store failures are
        logged and retried on a later tick.
        """
        if not self.refresh_interval:
            return None
        if (
            self._last_refresh is not None
            and (now - self._last_refresh).total_seconds() < self.refresh_interval
        ):
            return None
        try:
            return self.refresh(now)
        except UptimerError as e:
            self._stats.last_error = e.message
            logger.error("refresh_failed", **e.to_dict())
            return None

    async def run_cycle(self, now: datetime | None = None) -> int:
        """Run one dispatch cycle.

        Returns:
            Number of jobs this cycle claimed
        """
        now = now or self._clock()
        self._stats.tick_count += 1
        self._stats.last_tick = now

        try:
            due = self.jobs.due(now)
        except UptimerError as e:
            self._stats.last_error = e.message
            logger.error("cycle_due_query_failed", **e.to_dict())
            return 0

        if not due:
            logger.debug("cycle_no_jobs_due")
            return 0

        tasks = []
        for job in due:
            try:
                claimed = self.jobs.delete(job.id)
            except UptimerError as e:
                self._stats.last_error = e.message
                logger.error("job_claim_failed", job_id=job.id, **e.to_dict())
                continue
            if not claimed:
                logger.debug("job_already_claimed", job_id=job.id)
                continue

            self._stats.jobs_claimed += 1
            tasks.append(asyncio.create_task(self._process_job(job, now)))

        logger.info("cycle_dispatched", due=len(due), claimed=len(tasks))
        if tasks:
            await asyncio.gather(*tasks)
        return len(tasks)

    async def _process_job(self, job: Job, now: datetime) -> None:
        """Process one claimed job; never raises except on cancellation."""
        async with LogContext(job_id=job.id, schedule_id=job.linked_id):
            try:
                if job.job_type is JobType.MONITORING:
                    await self._process_monitoring(job, now)
                else:
                    logger.warning("job_type_unknown", job_type=str(job.job_type))
                    self._stats.jobs_dropped += 1
            except asyncio.CancelledError:
                logger.info("job_cancelled")
                raise
            except Exception as e:
                self._stats.jobs_failed += 1
                self._stats.last_error = str(e)
                logger.exception("job_failed")

    async def _process_monitoring(self, job: Job, now: datetime) -> None:
        schedule = self.schedules.get(job.linked_id)
        if schedule is None:
            error = ScheduleMissingForJob(
                "Claimed job references a schedule that does not exist"
            ).with_context(job_id=job.id, schedule_id=job.linked_id)
            logger.warning("job_abandoned", **error.to_dict())
            self._stats.jobs_abandoned += 1
            return

        if not schedule.enabled:
            logger.info("job_dropped_schedule_disabled")
            self._stats.jobs_dropped += 1
            return

        self._reenqueue(schedule, now)

        result = await check(self._get_client(), schedule.target, schedule.method)
        checked_at = self._clock()
        change = await self.status_updater.apply(
            schedule, result.is_up, result.reason, now=checked_at
        )

        if change is StatusChange.FAILED:
            self._stats.jobs_failed += 1
        else:
            self._stats.jobs_processed += 1
        logger.info(
            "job_completed",
            is_up=result.is_up,
            reason=result.reason,
            change=change.value,
        )

        if change in NOTIFY_ON:
            notification = Notification.from_change(schedule, change, result.reason, checked_at)
            await self._notify(notification)

    async def _notify(self, notification: Notification) -> None:
        try:
            delivered = await self.notifier.notify(notification)
        except Exception:
            self._stats.notifications_failed += 1
            logger.exception("notify_failed", event_type=notification.event)
            return
        if not delivered.ok:
            self._stats.notifications_failed += 1

    def _reenqueue(self, schedule: Schedule, now: datetime) -> None:
        """Insert the schedule's next job unless one is already pending."""
        try:
            if self.jobs.get_by_linked_id(schedule.id) is not None:
                logger.debug("reenqueue_job_exists")
                return
            run_at = next_run(schedule.cron, now)
            job_id = self.jobs.create(JobType.MONITORING, run_at, linked_id=schedule.id)
        except (InvalidCronExpression, NoUpcomingOccurrence) as e:
            logger.warning("reenqueue_skipped", cron=schedule.cron, error=e.message)
            return
        except UptimerError as e:
            self._stats.last_error = e.message
            logger.error("reenqueue_failed", **e.to_dict())
            return
        logger.debug("reenqueue_job_created", next_job_id=job_id, run_at=run_at.isoformat())

    # === Health & Stats ===

    def health(self) -> SchedulerHealth:
        """Get scheduler health status."""
        backend_health = self.backend.health()

        return SchedulerHealth(
            healthy=self._running and backend_health.get("healthy", False),
            backend=backend_health,
            schedules_enabled=self.schedules.count_enabled(),
            pending_jobs=self.jobs.count(),
            last_tick=self._stats.last_tick,
            stats=self._stats,
        )

    def get_stats(self) -> SchedulerStats:
        """Get scheduler statistics."""
        return self._stats

    def reset_stats(self) -> None:
        """Reset scheduler statistics."""
        self._stats = SchedulerStats()
