"""
Structured error types for the uptime scheduler.

Instead of generic exceptions that lose context, every error raised by the
scheduling engine is an ``UptimerError`` carrying:

- **Category:** What kind of error (database, network, orchestration, config)
- **Retryable:** Whether the operation can be expected to succeed later
- **Context:** Structured metadata (schedule id, job id, url, http status)
- **Cause:** Chained underlying exception for root cause analysis

Manifesto:
    The dispatch loop must keep running no matter what a single job does,
    but the operator still needs to know *why* a schedule was skipped or a
    store write failed.  Typed errors with rich context let the loop log
    precisely and move on, while startup code can decide which failures
    are fatal.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                        UptimerError                              │
        │  (category, retryable, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ScheduleError          RepositoryUnavailable   CheckError       │
        │  (ORCHESTRATION)        (DATABASE, retryable)   (NETWORK)        │
        │       │                                              │           │
        │  InvalidCronExpression                      TargetUnreachable    │
        │  NoUpcomingOccurrence                       TargetRejected       │
        │  ScheduleMissingForJob                                           │
        │                                                                  │
        │  ConfigError (CONFIG)                                            │
        └─────────────────────────────────────────────────────────────────┘

Propagation:
    - Startup: ``RepositoryUnavailable`` aborts ``initialize_scheduler``.
    - Steady state: every error is isolated to its job or cycle and logged.
    - Health checks: ``CheckError`` subclasses never escape the checker,
      they are folded into ``CheckResult.reason``.

Tags:
    exception, error-hierarchy, error-context, uptimer-core, observability

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    NETWORK = "NETWORK"  # Target unreachable, timeout, DNS
    DATABASE = "DATABASE"  # Store unreachable, query failure
    ORCHESTRATION = "ORCHESTRATION"  # Cron, scheduling, dispatch
    CONFIG = "CONFIG"  # Missing or invalid settings
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


@dataclass
class ErrorContext:
    """Structured metadata attached to an error.

    Typed fields cover the identifiers the scheduler deals in; anything else
    goes into ``metadata``.  ``to_dict()`` emits only the fields that are set.
    """

    schedule_id: int | None = None
    job_id: int | None = None
    cron: str | None = None
    url: str | None = None
    http_status: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["schedule_id", "job_id", "cron", "url", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class UptimerError(Exception):
    """
    Base exception for all uptimer errors.

    Subclasses set ``default_category`` and ``default_retryable`` so call
    sites only pass a message and, where useful, a cause and context.

    Examples:
        >>> error = UptimerError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> err = InvalidCronExpression("bad cron").with_context(schedule_id=7)
        >>> err.context.schedule_id
        7
        >>> err.to_dict()["category"]
        'ORCHESTRATION'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> UptimerError:
        """
        Add context to this error (fluent API).

        Usage:
            raise RepositoryUnavailable("insert failed").with_context(
                schedule_id=schedule.id,
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# SCHEDULING ERRORS
# =============================================================================


class ScheduleError(UptimerError):
    """Schedule configuration or execution error."""

    default_category = ErrorCategory.ORCHESTRATION
    default_retryable = False


class InvalidCronExpression(ScheduleError):
    """The cron expression does not parse."""

    pass


class NoUpcomingOccurrence(ScheduleError):
    """The cron expression parses but can never fire again."""

    pass


class ScheduleMissingForJob(ScheduleError):
    """A claimed job references a schedule that no longer exists."""

    pass


class BackendStartTimeout(ScheduleError):
    """The scheduler loop did not come up within the start timeout."""

    default_retryable = True


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class RepositoryUnavailable(UptimerError):
    """Any read or write failure against the durable store."""

    default_category = ErrorCategory.DATABASE
    default_retryable = True


# =============================================================================
# HEALTH CHECK OUTCOMES
# =============================================================================


class CheckError(UptimerError):
    """A health check did not observe a successful response."""

    default_category = ErrorCategory.NETWORK
    default_retryable = False


class TargetUnreachable(CheckError):
    """Transport failure or malformed request: no response was received."""

    default_retryable = True


class TargetRejected(CheckError):
    """The target answered with a non-success status code."""

    pass


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(UptimerError):
    """Missing or invalid configuration."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, UptimerError):
        return error.retryable
    return isinstance(error, (ConnectionError, OSError))


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "UptimerError",
    "ScheduleError",
    "InvalidCronExpression",
    "NoUpcomingOccurrence",
    "ScheduleMissingForJob",
    "BackendStartTimeout",
    "RepositoryUnavailable",
    "CheckError",
    "TargetUnreachable",
    "TargetRejected",
    "ConfigError",
    "is_retryable",
]
