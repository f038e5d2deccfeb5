"""Status-change notifications.

Only transitions notify: a target going down, and a down target coming
back up.  Reason changes during an outage and unchanged checks stay quiet.

Notifiers never raise into the dispatch loop.  A delivery failure is
logged and returned as ``DeliveryResult(ok=False)``; the status row has
already been written by then.

Examples:
    >>> notifier = WebhookNotifier("https://hooks.example/uptime", settings)
    >>> await notifier.notify(Notification.from_change(schedule, change, reason, now))

Tags:
    notifications, webhook, httpx, uptimer-core
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

import httpx

from uptimer.core.logging import get_logger
from uptimer.core.models.monitoring import Schedule
from uptimer.core.monitoring.checker import build_client
from uptimer.core.monitoring.status import UNKNOWN_REASON, StatusChange
from uptimer.core.settings import UptimerSettings
from uptimer.core.timestamps import to_iso8601

logger = get_logger(__name__)

NOTIFY_ON = frozenset({StatusChange.WENT_DOWN, StatusChange.WENT_UP})


@dataclass(frozen=True)
class Notification:
    """One up/down transition of a monitored target."""

    schedule_id: int
    name: str
    target: str
    is_up: bool
    reason: str | None
    at: datetime

    @classmethod
    def from_change(
        cls,
        schedule: Schedule,
        change: StatusChange,
        reason: str | None,
        at: datetime,
    ) -> Notification:
        is_up = change is StatusChange.WENT_UP
        return cls(
            schedule_id=schedule.id,
            name=schedule.name,
            target=schedule.target,
            is_up=is_up,
            reason=None if is_up else (reason or UNKNOWN_REASON),
            at=at,
        )

    @property
    def event(self) -> str:
        return "up" if self.is_up else "down"

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event,
            "schedule_id": self.schedule_id,
            "name": self.name,
            "target": self.target,
            "is_up": self.is_up,
            "reason": self.reason,
            "at": to_iso8601(self.at),
        }


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of a delivery attempt."""

    ok: bool
    error: str | None = None


@runtime_checkable
class Notifier(Protocol):
    """Receives up/down transitions."""

    async def notify(self, notification: Notification) -> DeliveryResult: ...

    async def aclose(self) -> None: ...


class LogNotifier:
    """Writes transitions to the structured log. The default notifier."""

    async def notify(self, notification: Notification) -> DeliveryResult:
        data = notification.to_dict()
        logger.warning(f"notify_target_{data.pop('event')}", **data)
        return DeliveryResult(ok=True)

    async def aclose(self) -> None:
        return None


class WebhookNotifier:
    """POSTs each transition as JSON to a fixed URL.

    The client is built like the check client (same timeout and
    User-Agent) and created on first use, on the loop that sends.
    """

    def __init__(
        self,
        url: str,
        settings: UptimerSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self._settings = settings or UptimerSettings()
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = build_client(self._settings)
        return self._client

    async def notify(self, notification: Notification) -> DeliveryResult:
        try:
            response = await self._get_client().post(self.url, json=notification.to_dict())
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                "notify_delivery_failed",
                url=self.url,
                schedule_id=notification.schedule_id,
                error=str(e) or type(e).__name__,
            )
            return DeliveryResult(ok=False, error=str(e) or type(e).__name__)
        logger.debug("notify_delivered", url=self.url, schedule_id=notification.schedule_id)
        return DeliveryResult(ok=True)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def build_notifier(settings: UptimerSettings) -> Notifier:
    """Webhook notifier when ``notify_webhook_url`` is set, else the log notifier."""
    if settings.notify_webhook_url:
        return WebhookNotifier(settings.notify_webhook_url, settings)
    return LogNotifier()


__all__ = [
    "DeliveryResult",
    "LogNotifier",
    "NOTIFY_ON",
    "Notification",
    "Notifier",
    "WebhookNotifier",
    "build_notifier",
]
