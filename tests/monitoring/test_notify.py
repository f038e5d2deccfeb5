"""Tests for status-change notifiers."""

import json
from datetime import UTC, datetime

import httpx
import pytest

from uptimer.core.models.monitoring import Schedule
from uptimer.core.monitoring.notify import (
    LogNotifier,
    Notification,
    WebhookNotifier,
    build_notifier,
)
from uptimer.core.monitoring.status import StatusChange
from uptimer.core.settings import UptimerSettings

AT = datetime(2024, 1, 1, 10, 15, 25, tzinfo=UTC)


@pytest.fixture
def schedule():
    return Schedule(id=4, name="api", cron="*/5 * * * *", target="https://api.example/")


class TestNotification:
    def test_down_carries_reason(self, schedule):
        n = Notification.from_change(schedule, StatusChange.WENT_DOWN, "503 Service Unavailable", AT)

        assert n.event == "down"
        assert n.to_dict() == {
            "event": "down",
            "schedule_id": 4,
            "name": "api",
            "target": "https://api.example/",
            "is_up": False,
            "reason": "503 Service Unavailable",
            "at": "2024-01-01T10:15:25+00:00",
        }

    def test_down_without_reason_is_unknown(self, schedule):
        n = Notification.from_change(schedule, StatusChange.WENT_DOWN, None, AT)
        assert n.reason == "Unknown"

    def test_up_drops_reason(self, schedule):
        n = Notification.from_change(schedule, StatusChange.WENT_UP, "ignored", AT)
        assert n.is_up is True
        assert n.reason is None


class TestWebhookNotifier:
    """WebhookNotifier posts JSON and never raises for delivery problems."""

    @pytest.mark.asyncio
    async def test_posts_json(self, schedule):
        received = []

        def handler(request):
            received.append(request)
            return httpx.Response(204)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        notifier = WebhookNotifier("https://hooks.example/uptime", client=client)

        result = await notifier.notify(
            Notification.from_change(schedule, StatusChange.WENT_DOWN, "timeout", AT)
        )
        await notifier.aclose()

        assert result.ok is True
        [request] = received
        assert request.method == "POST"
        assert str(request.url) == "https://hooks.example/uptime"
        assert json.loads(request.content)["reason"] == "timeout"

    @pytest.mark.asyncio
    async def test_error_status_is_reported_not_raised(self, schedule):
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(500))
        )
        notifier = WebhookNotifier("https://hooks.example/uptime", client=client)

        result = await notifier.notify(
            Notification.from_change(schedule, StatusChange.WENT_UP, None, AT)
        )
        await notifier.aclose()

        assert result.ok is False
        assert "500" in result.error

    @pytest.mark.asyncio
    async def test_connection_error_is_reported_not_raised(self, schedule):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        notifier = WebhookNotifier("https://hooks.example/uptime", client=client)

        result = await notifier.notify(
            Notification.from_change(schedule, StatusChange.WENT_UP, None, AT)
        )
        await notifier.aclose()

        assert result.ok is False
        assert result.error == "connection refused"

    @pytest.mark.asyncio
    async def test_default_client_matches_check_client(self):
        settings = UptimerSettings(http_timeout_seconds=12, user_agent="Uptimer/test")
        notifier = WebhookNotifier("https://hooks.example/uptime", settings)

        client = notifier._get_client()
        try:
            assert client.headers["User-Agent"] == "Uptimer/test"
            assert client.timeout.read == 12
        finally:
            await notifier.aclose()


class TestBuildNotifier:
    def test_log_notifier_by_default(self):
        assert isinstance(build_notifier(UptimerSettings()), LogNotifier)

    def test_webhook_when_url_set(self):
        notifier = build_notifier(UptimerSettings(notify_webhook_url="https://hooks.example/x"))
        assert isinstance(notifier, WebhookNotifier)
        assert notifier.url == "https://hooks.example/x"

    @pytest.mark.asyncio
    async def test_log_notifier_always_delivers(self, schedule):
        result = await LogNotifier().notify(
            Notification.from_change(schedule, StatusChange.WENT_DOWN, "x", AT)
        )
        assert result.ok is True
