"""Pytest fixtures for scheduling tests."""

from datetime import timedelta

import httpx
import pytest

from uptimer.core.monitoring.notify import DeliveryResult


class FakeTargets:
    """MockTransport handler with a per-URL status code.

    Unknown hosts answer 200.  A status of ``None`` raises ``ConnectError``.
    Every request is recorded in ``requests``.
    """

    def __init__(self):
        self.status: dict[str, int | None] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        code = self.status.get(str(request.url), 200)
        if code is None:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(code)


class FakeClock:
    """Settable replacement for ``utc_now``."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingNotifier:
    """Notifier that keeps every notification it is given."""

    def __init__(self):
        self.sent = []
        self.closed = False

    async def notify(self, notification):
        self.sent.append(notification)
        return DeliveryResult(ok=True)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def targets():
    """Controllable fake HTTP targets."""
    return FakeTargets()


@pytest.fixture
def clock(t0):
    """Clock pinned at ``t0`` until a test advances it."""
    return FakeClock(t0)


@pytest.fixture
def notifier():
    """Notifier that records transitions."""
    return RecordingNotifier()


@pytest.fixture
def client_factory(targets):
    """Client factory that routes every check through ``targets``."""

    def _factory():
        return httpx.AsyncClient(transport=httpx.MockTransport(targets))

    return _factory


@pytest.fixture
def backend():
    """Create a thread backend for testing."""
    from uptimer.core.scheduling.thread_backend import ThreadSchedulerBackend

    backend = ThreadSchedulerBackend(join_timeout=2.0)
    yield backend
    if backend.is_running:
        backend.stop()


@pytest.fixture
def lock_pool():
    """Create a schedule lock pool."""
    from uptimer.core.scheduling.lock_manager import ScheduleLockPool

    return ScheduleLockPool()


@pytest.fixture
def scheduler_service(backend, schedules, jobs, lock_pool, client_factory, clock, notifier):
    """Create a scheduler service for testing (backend not started)."""
    from uptimer.core.scheduling.service import SchedulerService
    from uptimer.core.settings import UptimerSettings

    service = SchedulerService(
        backend=backend,
        schedules=schedules,
        jobs=jobs,
        lock_pool=lock_pool,
        settings=UptimerSettings(),
        client_factory=client_factory,
        interval_seconds=0.1,
        clock=clock,
        notifier=notifier,
    )
    yield service
    if service.is_running:
        service.stop()
