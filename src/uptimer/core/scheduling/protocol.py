"""Scheduler backend protocol.

┌──────────────────────────────────────────────────────────────────────────────┐
│  SCHEDULER BACKEND PROTOCOL                                                   │
│                                                                               │
│  Backends control WHEN dispatch cycles happen, SchedulerService controls     │
│  WHAT happens in each cycle.                                                 │
│                                                                               │
│   ┌─────────────────┐   tick_callback()   ┌─────────────────────────┐        │
│   │  Thread Backend │ ──────────────────► │  SchedulerService       │        │
│   │  (default)      │   (not awaited by   │   - list due jobs       │        │
│   └─────────────────┘    the timer)       │   - claim (delete)      │        │
│                                           │   - re-enqueue          │        │
│                                           │   - check + status      │        │
│                                           └─────────────────────────┘        │
│                                                                               │
│  Responsibility Split:                                                        │
│  - Backend: event loop ownership, timing, shutdown of in-flight cycles       │
│  - Service: job claiming, health checks, status updates                      │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

TickCallback = Callable[[], Awaitable[None]]
ShutdownCallback = Callable[[], Awaitable[None]]


@runtime_checkable
class SchedulerBackend(Protocol):
    """Protocol for pluggable scheduler timing backends.

    A backend calls the tick callback every ``interval_seconds`` without
    waiting for earlier ticks to finish, so cycles may overlap.

    Implementations:
        - ThreadSchedulerBackend: asyncio loop in a daemon thread (default)
    """

    name: str

    def start(
        self,
        tick_callback: TickCallback,
        interval_seconds: float = 10.0,
        shutdown_callback: ShutdownCallback | None = None,
    ) -> None:
        """Start the scheduler loop.

        Args:
            tick_callback: Async function run as a new task on each tick.
            interval_seconds: How often to tick (default: 10s).
            shutdown_callback: Async function run on the loop after in-flight
                ticks are cancelled, e.g. to close the HTTP client.
        """
        ...

    def stop(self) -> None:
        """Stop the loop, cancel in-flight ticks and run the shutdown callback."""
        ...

    def health(self) -> dict[str, Any]:
        """Return backend health status.

        Returns:
            dict with at least:
                - healthy: bool - whether backend is running
                - backend: str - backend name
                - tick_count: int - number of ticks executed
                - last_tick: str | None - ISO timestamp of last tick
        """
        ...


@dataclass
class BackendHealth:
    """Structured backend health response."""

    healthy: bool
    backend: str
    tick_count: int = 0
    last_tick: datetime | None = None
    in_flight: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "healthy": self.healthy,
            "backend": self.backend,
            "tick_count": self.tick_count,
            "last_tick": self.last_tick.isoformat() if self.last_tick else None,
            "in_flight": self.in_flight,
            **self.extra,
        }
