"""Scheduling package for uptimer.

Manifesto:
    Uptime checks on a cron cadence need more than ``time.sleep()`` in a
    loop.  They need a durable queue (so a restart does not forget what
    was due), claim-before-execute (so a job runs at most once), and
    per-target serialization (so overlapping cycles do not race on the
    status row).  The scheduling package provides all three behind one
    startup call.

┌──────────────────────────────────────────────────────────────────────────────┐
│  UPTIMER SCHEDULER                                                            │
│                                                                               │
│  Quick Start:                                                                 │
│  ┌──────────────────────────────────────────────────────────────────────┐   │
│  │   from uptimer.core.connection import create_connection              │   │
│  │   from uptimer.core.scheduling import initialize_scheduler           │   │
│  │                                                                      │   │
│  │   conn, _ = create_connection("sqlite:///uptimer.db",                │   │
│  │                               init_schema=True)                      │   │
│  │   service = initialize_scheduler(conn)   # reconcile + start         │   │
│  │   ...                                                                │   │
│  │   service.stop()                                                     │   │
│  └──────────────────────────────────────────────────────────────────────┘   │
│                                                                               │
│  Architecture:                                                                │
│                                                                               │
│   startup:  reconcile() ──► jobs table                                        │
│                                                                               │
│   ┌──────────────┐  tick  ┌────────────────────┐                            │
│   │ Thread       │ ─────► │ SchedulerService   │ ──► check() ──► httpx      │
│   │ Backend      │        │  claim / re-enqueue│                            │
│   └──────────────┘        │  StatusUpdater     │ ──► schedules table        │
│                           └────────────────────┘                            │
│                                                                               │
│  Tables (from 01_monitoring.sql):                                             │
│  - schedules: Monitored targets and status                                   │
│  - jobs: Pending due-jobs                                                    │
└──────────────────────────────────────────────────────────────────────────────┘

Guardrails:
    ❌ Executing a job before deleting its row
    ✅ ``JobRepository.delete()`` returns True before the job is processed
    ❌ Writing status from a snapshot taken before the check
    ✅ ``StatusUpdater.apply()`` re-reads the row under the schedule lock
    ❌ Constructing scheduler components individually
    ✅ ``create_scheduler(conn)`` / ``initialize_scheduler(conn)``

Tags:
    uptimer, scheduling, cron, job-queue, beat-as-poller

Doc-Types:
    package-overview, architecture-map, module-index
"""

from __future__ import annotations

from uptimer.core.logging import get_logger
from uptimer.core.protocols import Connection
from uptimer.core.settings import UptimerSettings, get_settings

from .cron import next_run, validate_cron
from .health import SchedulerHealthReport, check_scheduler_health
from .jobs import JobRepository
from .lock_manager import ScheduleLockPool
from .protocol import BackendHealth, SchedulerBackend
from .reconciler import ReconcileReport, reconcile
from .repository import ScheduleCreate, ScheduleRepository
from .service import ClientFactory, SchedulerHealth, SchedulerService, SchedulerStats
from .thread_backend import ThreadSchedulerBackend

logger = get_logger(__name__)

__all__ = [
    # Cron
    "next_run",
    "validate_cron",
    # Protocol
    "SchedulerBackend",
    "BackendHealth",
    # Backends
    "ThreadSchedulerBackend",
    # Repositories
    "ScheduleRepository",
    "ScheduleCreate",
    "JobRepository",
    # Locks
    "ScheduleLockPool",
    # Reconciler
    "reconcile",
    "ReconcileReport",
    # Service
    "SchedulerService",
    "SchedulerStats",
    "SchedulerHealth",
    # Health
    "check_scheduler_health",
    "SchedulerHealthReport",
    # Factories
    "create_scheduler",
    "initialize_scheduler",
]


def create_scheduler(
    conn: Connection,
    settings: UptimerSettings | None = None,
    backend: SchedulerBackend | None = None,
    client_factory: ClientFactory | None = None,
) -> SchedulerService:
    """Factory function to create a complete, not yet started, scheduler.

    Args:
        conn: Database connection
        settings: Runtime settings (defaults to ``get_settings()``)
        backend: Timing backend (defaults to ThreadSchedulerBackend)
        client_factory: HTTP client builder (defaults to ``build_client``)
    """
    settings = settings or get_settings()
    return SchedulerService(
        backend=backend or ThreadSchedulerBackend(),
        schedules=ScheduleRepository(conn),
        jobs=JobRepository(conn),
        lock_pool=ScheduleLockPool(),
        settings=settings,
        client_factory=client_factory,
        interval_seconds=settings.tick_interval_seconds,
    )


def initialize_scheduler(
    conn: Connection,
    settings: UptimerSettings | None = None,
    backend: SchedulerBackend | None = None,
    client_factory: ClientFactory | None = None,
) -> SchedulerService:
    """Reconcile pending jobs, then start the dispatch loop in the background.

    Raises:
        RepositoryUnavailable: The store could not be reached during
            reconciliation; the loop is not started.
    """
    service = create_scheduler(conn, settings, backend, client_factory)
    report = service.refresh()
    service.start()
    logger.info("scheduler_initialized", created=report.created, skipped=len(report.skipped))
    return service
