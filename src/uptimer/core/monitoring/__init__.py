"""Health checks, status tracking and transition notices for monitored targets."""

from uptimer.core.monitoring.checker import CheckResult, build_client, check
from uptimer.core.monitoring.notify import (
    LogNotifier,
    Notification,
    Notifier,
    WebhookNotifier,
    build_notifier,
)
from uptimer.core.monitoring.status import StatusChange, StatusUpdater, decide

__all__ = [
    "CheckResult",
    "LogNotifier",
    "Notification",
    "Notifier",
    "StatusChange",
    "StatusUpdater",
    "WebhookNotifier",
    "build_client",
    "build_notifier",
    "check",
    "decide",
]
