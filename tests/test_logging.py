"""Tests for logging configuration."""

import logging

import pytest
import structlog

from browserless_tools.core.config import Settings, get_settings
from browserless_tools.core.logging import (
    CENSORED,
    LogContext,
    censor_sensitive_data,
    get_logger,
    redact_value,
    resolve_log_level,
    setup_logging,
)


@pytest.fixture
def mock_env(monkeypatch):
    """Set up minimal environment variables for tests."""
    monkeypatch.setenv("BROWSERLESS_TOKEN", "test_token")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    # Clear the lru_cache to force reload of settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_setup_logging(mock_env) -> None:
    """Test that logging setup runs without errors."""
    setup_logging()

    assert structlog.is_configured()


def test_get_logger(mock_env) -> None:
    """Test getting a logger instance."""
    setup_logging()

    logger = get_logger(__name__)
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "error")


def test_log_context_binds_and_unbinds(mock_env) -> None:
    """Test LogContext context manager."""
    setup_logging()

    with LogContext(tool="click", selector="#submit"):
        bound = structlog.contextvars.get_contextvars()
        assert bound["tool"] == "click"
        assert bound["selector"] == "#submit"

    bound = structlog.contextvars.get_contextvars()
    assert "tool" not in bound
    assert "selector" not in bound


class TestCensoring:
    """Test that the Browserless token never reaches log output."""

    def test_sensitive_keys_censored(self) -> None:
        event = {"event": "connect", "token": "secret-value", "api_key": "k"}

        result = censor_sensitive_data(None, "info", event)

        assert result["token"] == CENSORED
        assert result["api_key"] == CENSORED
        assert result["event"] == "connect"

    def test_nested_dicts_censored(self) -> None:
        event = {"event": "x", "config": {"token": "abc", "locale": "en-US"}}

        result = censor_sensitive_data(None, "info", event)

        assert result["config"]["token"] == CENSORED
        assert result["config"]["locale"] == "en-US"

    def test_token_in_url_redacted(self) -> None:
        event = {
            "event": "browserless_connection_failed",
            "error": "connect wss://host/chromium?token=abc123&stealth=true failed",
        }

        result = censor_sensitive_data(None, "error", event)

        assert "abc123" not in result["error"]
        assert f"token={CENSORED}&stealth=true" in result["error"]

    def test_token_in_list_redacted(self) -> None:
        event = {"event": "x", "urls": ["https://a?token=zzz", {"password": "p"}]}

        result = censor_sensitive_data(None, "info", event)

        assert "zzz" not in result["urls"][0]
        assert result["urls"][1]["password"] == CENSORED

    def test_redact_value_ignores_non_strings(self) -> None:
        assert redact_value(42) == 42
        assert redact_value("plain message") == "plain message"


class TestLogLevel:
    """Test how the stdlib log level is chosen."""

    def test_log_level_setting(self, monkeypatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.delenv("DEBUG", raising=False)

        assert resolve_log_level(Settings(_env_file=None)) == logging.WARNING

    def test_debug_flag_forces_debug(self, monkeypatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        monkeypatch.setenv("DEBUG", "true")

        assert resolve_log_level(Settings(_env_file=None)) == logging.DEBUG

    def test_explicit_level_wins(self, monkeypatch) -> None:
        monkeypatch.setenv("DEBUG", "true")

        assert resolve_log_level(Settings(_env_file=None), "ERROR") == logging.ERROR

    def test_unknown_level_falls_back_to_info(self, monkeypatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        monkeypatch.delenv("DEBUG", raising=False)

        assert resolve_log_level(Settings(_env_file=None)) == logging.INFO
