"""Dataclass models for the uptimer schema tables.

Field names match SQL column names except where a Python name reads
better (``Job.job_type`` maps to the ``type`` column).

Modules
-------
monitoring
    Tables from ``01_monitoring.sql`` -- schedules, jobs.

Tags:
    uptimer, models, dataclasses, schema-mapping
"""

from uptimer.core.models.monitoring import (
    CheckMethod,
    Job,
    JobType,
    Schedule,
)

__all__ = [
    "CheckMethod",
    "Job",
    "JobType",
    "Schedule",
]
