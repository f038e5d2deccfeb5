"""
HTTP health checker.

One request per check, no retries.  Anything other than a 2xx response is a
"down" observation with a human-readable reason; the checker itself never
raises.

Manifesto:
    A monitor that crashes on a bad target is worse than no monitor.  Every
    failure mode (bad URL, refused connection, timeout, 5xx) becomes data:
    ``CheckResult(is_up=False, reason=...)`` that the status updater can
    persist and the operator can read.

Architecture:
    ::

        check(client, url, method)
            │
            ├─ _build_request()  ── InvalidURL / bad scheme ─► TargetUnreachable
            │                                                 "Invalid request: ..."
            ├─ client.send()     ── TimeoutException ───────► TargetUnreachable
            │                                                 "Request timed out: ..."
            │                    ── TransportError ─────────► TargetUnreachable
            │                                                 "Connection failed: ..."
            ├─ status not 2xx    ─────────────────────────────► TargetRejected
            │                                                 "503 Service Unavailable"
            ▼
        CheckResult(is_up, reason)

Examples:
    >>> async with build_client(settings) as client:
    ...     result = await check(client, "https://example.com", CheckMethod.HEAD)
    >>> result.is_up
    True

Tags:
    health-checks, httpx, async, uptimer-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from uptimer.core.errors import CheckError, TargetRejected, TargetUnreachable
from uptimer.core.logging import get_logger
from uptimer.core.models.monitoring import CheckMethod
from uptimer.core.settings import UptimerSettings

logger = get_logger(__name__)

_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one health check. ``reason`` is None iff ``is_up``."""

    is_up: bool
    reason: str | None = None


def build_client(settings: UptimerSettings) -> httpx.AsyncClient:
    """Create the shared client used for every check.

    Redirects are followed, so a target that redirects to a healthy page
    counts as up.
    """
    return httpx.AsyncClient(
        timeout=settings.http_timeout_seconds,
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
    )


def _describe(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


def _build_request(client: httpx.AsyncClient, url: str, method: CheckMethod) -> httpx.Request:
    try:
        parsed = httpx.URL(url)
        if parsed.scheme not in _SCHEMES:
            raise httpx.UnsupportedProtocol(
                f"Unsupported URL scheme {parsed.scheme or '(none)'!r}"
            )
        if not parsed.host:
            raise httpx.InvalidURL("URL has no host")
        return client.build_request(CheckMethod(method).value, parsed)
    except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError) as e:
        raise TargetUnreachable(f"Invalid request: {_describe(e)}", cause=e).with_context(
            url=url
        ) from e


async def _perform(client: httpx.AsyncClient, url: str, method: CheckMethod) -> None:
    """Run the request; return on 2xx, raise a ``CheckError`` otherwise."""
    request = _build_request(client, url, method)
    try:
        response = await client.send(request)
    except httpx.TimeoutException as e:
        raise TargetUnreachable(f"Request timed out: {_describe(e)}", cause=e).with_context(
            url=url
        ) from e
    except httpx.TransportError as e:
        raise TargetUnreachable(f"Connection failed: {_describe(e)}", cause=e).with_context(
            url=url
        ) from e
    except httpx.HTTPError as e:
        raise TargetUnreachable(f"Request failed: {_describe(e)}", cause=e).with_context(
            url=url
        ) from e

    await response.aclose()
    if not response.is_success:
        reason = f"{response.status_code} {response.reason_phrase}".strip()
        raise TargetRejected(reason).with_context(
            url=url, http_status=response.status_code
        )


async def check(client: httpx.AsyncClient, url: str, method: CheckMethod) -> CheckResult:
    """Check ``url`` with ``method`` and report whether it is up.

    Never raises for target-side problems; they are folded into
    ``CheckResult.reason``.
    """
    try:
        await _perform(client, url, method)
    except CheckError as e:
        logger.debug(
            "check_failed",
            url=url,
            method=CheckMethod(method).value,
            **e.to_dict(),
        )
        return CheckResult(is_up=False, reason=e.message)
    return CheckResult(is_up=True)


__all__ = ["CheckResult", "build_client", "check"]
