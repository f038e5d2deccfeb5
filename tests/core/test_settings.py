"""Tests for core.settings module.

Covers:
- UptimerSettings instantiation with defaults
- Environment variable override
- Field validation
- get_settings caching
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from uptimer import USER_AGENT
from uptimer.core.settings import UptimerSettings, get_settings


class TestUptimerSettingsDefaults:
    def test_default_database_url_is_in_home(self):
        s = UptimerSettings()
        assert s.database_url == f"sqlite:///{Path.home() / '.uptimer' / 'uptimer.db'}"

    def test_default_tick_interval(self):
        assert UptimerSettings().tick_interval_seconds == 10.0

    def test_default_http_timeout(self):
        assert UptimerSettings().http_timeout_seconds == 30.0

    def test_default_user_agent(self):
        assert UptimerSettings().user_agent == USER_AGENT
        assert USER_AGENT.startswith("Uptimer/")

    def test_default_refresh_and_notify(self):
        s = UptimerSettings()
        assert s.refresh_interval_seconds == 60.0
        assert s.notify_webhook_url is None

    def test_default_log_level(self):
        s = UptimerSettings()
        assert s.log_level == "INFO"
        assert s.log_json is None


class TestUptimerSettingsEnvOverride:
    def test_database_url_from_env(self, monkeypatch):
        monkeypatch.setenv("UPTIMER_DATABASE_URL", "sqlite:///tmp/x.db")
        assert UptimerSettings().database_url == "sqlite:///tmp/x.db"

    def test_interval_from_env(self, monkeypatch):
        monkeypatch.setenv("UPTIMER_TICK_INTERVAL_SECONDS", "2.5")
        assert UptimerSettings().tick_interval_seconds == 2.5

    def test_webhook_url_from_env(self, monkeypatch):
        monkeypatch.setenv("UPTIMER_NOTIFY_WEBHOOK_URL", "https://hooks.example/u")
        assert UptimerSettings().notify_webhook_url == "https://hooks.example/u"

    def test_log_level_is_upper_cased(self, monkeypatch):
        monkeypatch.setenv("UPTIMER_LOG_LEVEL", "debug")
        assert UptimerSettings().log_level == "DEBUG"

    def test_unprefixed_env_is_ignored(self, monkeypatch):
        monkeypatch.setenv("TICK_INTERVAL_SECONDS", "99")
        assert UptimerSettings().tick_interval_seconds == 10.0


class TestUptimerSettingsValidation:
    def test_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            UptimerSettings(tick_interval_seconds=0)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            UptimerSettings(http_timeout_seconds=-1)

    def test_refresh_interval_may_be_zero(self):
        assert UptimerSettings(refresh_interval_seconds=0).refresh_interval_seconds == 0
        with pytest.raises(ValidationError):
            UptimerSettings(refresh_interval_seconds=-1)

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError):
            UptimerSettings(log_level="LOUD")


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_cache_clear_picks_up_env(self, monkeypatch):
        get_settings()
        monkeypatch.setenv("UPTIMER_HTTP_TIMEOUT_SECONDS", "5")
        get_settings.cache_clear()
        assert get_settings().http_timeout_seconds == 5.0
