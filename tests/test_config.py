"""Tests for settings."""

import pytest
from pydantic import ValidationError

from tubedesk.config import Settings


class TestDefaults:
    def test_port_defaults_to_3001(self, settings_factory):
        assert settings_factory().port == 3001

    def test_addon_defaults_to_none(self, settings_factory):
        settings = settings_factory()

        assert not settings.rate_limit_enabled
        assert not settings.panel_enabled

    def test_rate_limit_defaults(self, settings_factory):
        settings = settings_factory()

        assert settings.rate_limit_max == 5
        assert settings.rate_limit_window_seconds == 60


class TestBindHost:
    def test_loopback_outside_production(self, settings_factory):
        assert settings_factory(APP_ENV="development").bind_host == "127.0.0.1"

    def test_all_interfaces_in_production(self, settings_factory):
        assert settings_factory(APP_ENV="production").bind_host == "0.0.0.0"

    def test_explicit_host_wins(self, settings_factory):
        assert settings_factory(APP_ENV="production", HOST="10.0.0.5").bind_host == "10.0.0.5"


class TestRequiredValues:
    def test_missing_database_url(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        with pytest.raises(ValidationError):
            Settings(_env_file=None, DATABASE_SERVICE_KEY="k")

    def test_missing_service_key(self, monkeypatch):
        monkeypatch.delenv("DATABASE_SERVICE_KEY", raising=False)
        with pytest.raises(ValidationError):
            Settings(_env_file=None, DATABASE_URL="sqlite://")

    def test_service_key_hidden_in_repr(self, settings_factory):
        assert "test-service-key" not in repr(settings_factory())


class TestEnvironment:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("DATABASE_URL", "sqlite://")
        monkeypatch.setenv("DATABASE_SERVICE_KEY", "k")
        monkeypatch.setenv("SERVER_ADDON", "panel")

        settings = Settings(_env_file=None)

        assert settings.port == 8080
        assert settings.addon == "panel"

    def test_rejects_unknown_addon(self, settings_factory):
        with pytest.raises(ValidationError):
            settings_factory(SERVER_ADDON="both")

    def test_rejects_invalid_port(self, settings_factory):
        with pytest.raises(ValidationError):
            settings_factory(PORT=0)
