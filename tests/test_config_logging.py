"""
Tests for settings loading and Sentry-aware logging setup.
"""

import pydantic
import pytest
import sentry_sdk

from common import logging_conf
from common.config import Settings, get_settings


@pytest.fixture
def sentry_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(sentry_sdk, "init", lambda **kwargs: calls.append(kwargs))
    return calls


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("STATIC_TOKEN", "secret")
    monkeypatch.setenv("EXECUTION_HISTORY_LIMIT", "10")
    monkeypatch.delenv("DATABASE_URL", raising=False)

    settings = get_settings()

    assert settings.static_token == "secret"
    assert settings.execution_history_limit == 10
    assert settings.database_url.startswith("sqlite")


def test_static_token_is_required(monkeypatch):
    monkeypatch.delenv("STATIC_TOKEN", raising=False)

    with pytest.raises(pydantic.ValidationError):
        get_settings()


def test_history_limit_must_be_positive():
    with pytest.raises(pydantic.ValidationError):
        Settings(static_token="t", execution_history_limit=0)


def test_unknown_log_level_rejected():
    with pytest.raises(pydantic.ValidationError):
        Settings(static_token="t", log_level="chatty")


def test_debug_forces_debug_log_level():
    assert Settings(static_token="t", debug=True).effective_log_level == "DEBUG"
    assert Settings(static_token="t", log_level="warning").effective_log_level == "WARNING"


def test_sentry_skipped_without_dsn(sentry_calls):
    assert logging_conf.init_sentry(None) is False
    assert sentry_calls == []


def test_sentry_initialized_from_settings(sentry_calls):
    settings = Settings(
        static_token="t",
        sentry_dsn="https://key@example.invalid/1",
        sentry_environment="test"
    )

    logging_conf.setup_fastapi_logging(settings)

    assert len(sentry_calls) == 1
    assert sentry_calls[0]["environment"] == "test"
    assert sentry_calls[0]["send_default_pii"] is False
    assert sentry_calls[0]["before_send"] is logging_conf.scrub_request_body


def test_request_body_is_scrubbed():
    event = {"request": {"url": "/api/v1/playground/run", "data": {"code": "password=x"}}}

    scrubbed = logging_conf.scrub_request_body(event, {})

    assert scrubbed["request"]["data"] == logging_conf.FILTERED
    assert scrubbed["request"]["url"] == "/api/v1/playground/run"
