"""Monitoring table models (01_monitoring.sql).

Manifesto:
    The repositories, the dispatch loop and the CLI all pass schedules and
    jobs around.  Typed dataclasses with real ``datetime`` fields keep the
    ISO-string storage format a repository concern.

Tags:
    uptimer, models, scheduling, dataclasses, schema-mapping

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class CheckMethod(str, Enum):
    """HTTP method used for a health check."""

    HEAD = "HEAD"
    GET = "GET"
    POST = "POST"


class JobType(str, Enum):
    """Kind of work a pending job carries."""

    MONITORING = "monitoring"


# ---------------------------------------------------------------------------
# schedules
# ---------------------------------------------------------------------------


@dataclass
class Schedule:
    """Monitored target row (``schedules``)."""

    id: int
    name: str
    cron: str
    target: str
    enabled: bool = True
    method: CheckMethod = CheckMethod.GET
    is_up: bool = True
    last_down: datetime | None = None
    down_reason: str | None = None
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# jobs
# ---------------------------------------------------------------------------


@dataclass
class Job:
    """Pending due-job row (``jobs``)."""

    id: int
    job_type: JobType | str  # raw string for kinds this build does not know
    run_at: datetime
    linked_id: int | None = None
