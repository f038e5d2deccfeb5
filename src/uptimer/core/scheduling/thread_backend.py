"""Threaded asyncio scheduler backend.

This is the DEFAULT backend for uptimer. It owns one asyncio event loop
running in a daemon thread; every tick starts the tick callback as a new
task and goes straight back to sleep.

┌──────────────────────────────────────────────────────────────────────────────┐
│  THREAD BACKEND ARCHITECTURE                                                  │
│                                                                               │
│   start()                                                                     │
│      │                                                                        │
│      ▼                                                                        │
│   ┌──────────────────────────────────────────────────────────────────┐       │
│   │  Daemon Thread: asyncio.run(_main())                             │       │
│   │                                                                  │       │
│   │   while not stop_event.is_set():                                 │       │
│   │       wait interval (or stop)                                    │       │
│   │       tick_count += 1                                            │       │
│   │       create_task(tick_callback())   ◄── not awaited             │       │
│   │                                                                  │       │
│   │   on stop:                                                       │       │
│   │       cancel + drain in-flight tick tasks                        │       │
│   │       await shutdown_callback()                                  │       │
│   └──────────────────────────────────────────────────────────────────┘       │
│                                                                               │
│   stop()                                                                      │
│      loop.call_soon_threadsafe(stop_event.set)                                │
│      thread.join(timeout)                                                     │
│                                                                               │
│  Ticks never wait for each other: a slow health check in one cycle does     │
│  not delay the next cycle.                                                   │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import asyncio
import threading
from datetime import UTC, datetime
from typing import Any

from uptimer.core.errors import BackendStartTimeout
from uptimer.core.logging import get_logger

from .protocol import BackendHealth, ShutdownCallback, TickCallback

logger = get_logger(__name__)


class ThreadSchedulerBackend:
    """Asyncio-loop-in-a-thread scheduler backend.

    Example:
        >>> backend = ThreadSchedulerBackend()
        >>>
        >>> async def my_tick():
        ...     print("Tick!")
        ...
        >>> backend.start(my_tick, interval_seconds=5.0)
        >>> # ... later ...
        >>> backend.stop()
    """

    name = "thread"

    def __init__(self, join_timeout: float = 5.0) -> None:
        self._join_timeout = join_timeout
        self._thread: threading.Thread | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stop_event: asyncio.Event | None = None
        self._ready = threading.Event()
        self._tasks: set[asyncio.Task] = set()
        self._tick_count = 0
        self._last_tick: datetime | None = None
        self._interval: float = 10.0
        self._started = False
        self._start_abandoned = False
        self._lock = threading.Lock()

    def start(
        self,
        tick_callback: TickCallback,
        interval_seconds: float = 10.0,
        shutdown_callback: ShutdownCallback | None = None,
    ) -> None:
        """Start the event loop in a daemon thread.

        Returns once the loop is running, so ``stop()`` may be called
        immediately afterwards.

        Raises:
            BackendStartTimeout: The loop did not come up within
                ``join_timeout``; a loop that comes up later exits at once.
        """
        if self._started:
            logger.warning("backend_already_started", backend=self.name)
            return

        self._interval = interval_seconds
        self._ready.clear()
        self._start_abandoned = False

        self._thread = threading.Thread(
            target=asyncio.run,
            args=(self._main(tick_callback, interval_seconds, shutdown_callback),),
            daemon=True,
            name="uptimer-scheduler",
        )
        self._thread.start()
        if not self._ready.wait(timeout=self._join_timeout):
            with self._lock:
                self._start_abandoned = not self._ready.is_set()
            if self._start_abandoned:
                logger.error("backend_start_timeout", backend=self.name, timeout=self._join_timeout)
                raise BackendStartTimeout(
                    f"Scheduler loop did not start within {self._join_timeout}s"
                ).with_context(backend=self.name)
        self._started = True

    async def _main(
        self,
        tick_callback: TickCallback,
        interval_seconds: float,
        shutdown_callback: ShutdownCallback | None,
    ) -> None:
        with self._lock:
            if self._start_abandoned:
                logger.warning("backend_start_abandoned", backend=self.name)
                return
            self._loop = asyncio.get_running_loop()
            self._stop_event = asyncio.Event()
            self._ready.set()
        logger.info("backend_started", backend=self.name, interval=interval_seconds)

        try:
            while not self._stop_event.is_set():
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=interval_seconds)
                except TimeoutError:
                    pass
                else:
                    break

                with self._lock:
                    self._tick_count += 1
                    self._last_tick = datetime.now(UTC)

                task = asyncio.create_task(self._run_tick(tick_callback))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
        finally:
            await self._drain()
            if shutdown_callback is not None:
                try:
                    await shutdown_callback()
                except Exception:
                    logger.exception("backend_shutdown_callback_failed", backend=self.name)
            logger.info("backend_stopped", backend=self.name)

    async def _run_tick(self, tick_callback: TickCallback) -> None:
        try:
            await tick_callback()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("tick_failed", backend=self.name)

    async def _drain(self) -> None:
        """Cancel in-flight ticks and wait for them to unwind."""
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.info("backend_cancelled_ticks", backend=self.name, count=len(pending))

    def stop(self) -> None:
        """Stop the loop gracefully.

        Waits up to ``join_timeout`` seconds for the loop thread to exit.
        """
        if not self._started:
            return

        if self._loop is not None and self._stop_event is not None:
            try:
                self._loop.call_soon_threadsafe(self._stop_event.set)
            except RuntimeError:
                # Loop already closed
                pass

        if self._thread:
            self._thread.join(timeout=self._join_timeout)
            if self._thread.is_alive():
                logger.warning("backend_thread_still_alive", backend=self.name)

        self._started = False
        self._loop = None
        self._stop_event = None
        logger.info("backend_shutdown_complete", backend=self.name)

    def health(self) -> dict[str, Any]:
        """Return backend health status.

        Returns:
            dict with healthy, backend, tick_count, last_tick, in_flight
        """
        return self.get_health().to_dict()

    def get_health(self) -> BackendHealth:
        """Return structured health status."""
        return BackendHealth(
            healthy=self.is_running,
            backend=self.name,
            tick_count=self._tick_count,
            last_tick=self._last_tick,
            in_flight=len(self._tasks),
            extra={"interval_seconds": self._interval},
        )

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        """The running event loop, or None when stopped."""
        return self._loop

    @property
    def is_running(self) -> bool:
        """Check if backend is currently running."""
        return self._started and self._thread is not None and self._thread.is_alive()

    @property
    def tick_count(self) -> int:
        """Get number of ticks executed."""
        return self._tick_count

    @property
    def last_tick(self) -> datetime | None:
        """Get timestamp of last tick."""
        return self._last_tick


__all__ = ["ThreadSchedulerBackend"]
