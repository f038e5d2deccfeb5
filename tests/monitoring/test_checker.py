"""Tests for the HTTP health checker."""

import httpx
import pytest

from uptimer.core.models.monitoring import CheckMethod
from uptimer.core.monitoring.checker import CheckResult, build_client, check
from uptimer.core.settings import UptimerSettings


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestCheck:
    """check() folds every outcome into a CheckResult."""

    @pytest.mark.asyncio
    async def test_2xx_is_up(self):
        async with _client(lambda request: httpx.Response(204)) as client:
            result = await check(client, "https://ok.example", CheckMethod.GET)

        assert result == CheckResult(is_up=True)
        assert result.reason is None

    @pytest.mark.asyncio
    async def test_non_2xx_is_down_with_status_line(self):
        async with _client(lambda request: httpx.Response(503)) as client:
            result = await check(client, "https://down.example", CheckMethod.GET)

        assert result.is_up is False
        assert result.reason == "503 Service Unavailable"

    @pytest.mark.asyncio
    async def test_client_error_status_is_down(self):
        async with _client(lambda request: httpx.Response(404)) as client:
            result = await check(client, "https://missing.example/x", CheckMethod.GET)

        assert result.reason == "404 Not Found"

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            result = await check(client, "https://gone.example", CheckMethod.GET)

        assert result.is_up is False
        assert result.reason == "Connection failed: connection refused"

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        async with _client(handler) as client:
            result = await check(client, "https://slow.example", CheckMethod.GET)

        assert result.is_up is False
        assert result.reason.startswith("Request timed out")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["ftp://files.example/", "not a url", "https://"])
    async def test_invalid_request(self, url):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200)

        async with _client(handler) as client:
            result = await check(client, url, CheckMethod.GET)

        assert result.is_up is False
        assert result.reason.startswith("Invalid request")
        assert calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", list(CheckMethod))
    async def test_method_is_used(self, method):
        seen = []

        def handler(request):
            seen.append(request.method)
            return httpx.Response(200)

        async with _client(handler) as client:
            await check(client, "https://ok.example", method)

        assert seen == [method.value]


class TestBuildClient:
    @pytest.mark.asyncio
    async def test_client_sends_user_agent_and_follows_redirects(self):
        settings = UptimerSettings(user_agent="Uptimer/test", http_timeout_seconds=3.0)
        client = build_client(settings)
        try:
            assert client.headers["User-Agent"] == "Uptimer/test"
            assert client.follow_redirects is True
            assert client.timeout.read == 3.0
        finally:
            await client.aclose()
