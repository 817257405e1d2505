"""
Logging and Sentry setup for the DevOps Lab API.

Learners paste configuration into the playground and that text can hold
credentials, so request bodies are stripped from every Sentry event
before it leaves the process.
"""

import logging
from typing import Any, Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from .config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Per-statement SQL logging is controlled by the engine's echo flag
NOISY_LOGGERS = ("sqlalchemy.engine", "multipart", "httpx")

FILTERED = "[Filtered]"


def scrub_request_body(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any]:
    """Sentry before_send hook removing submitted request payloads."""
    request = event.get("request")
    if request and "data" in request:
        request["data"] = FILTERED
    return event


def setup_logging(log_level: str = "INFO", service_name: str = "devlab-api") -> None:
    """
    Configure root logging.

    Args:
        log_level: Level name for the root logger
        service_name: Name reported in the startup message
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT
    )
    if log_level.upper() != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured for {service_name} at {log_level.upper()}"
    )


def init_sentry(
    sentry_dsn: Optional[str],
    sentry_environment: str = "development",
    sentry_traces_sample_rate: float = 0.1,
    sentry_profiles_sample_rate: float = 1.0
) -> bool:
    """
    Start Sentry error reporting for the FastAPI service.

    Args:
        sentry_dsn: Sentry DSN URL (reporting stays off if None)
        sentry_environment: Environment name
        sentry_traces_sample_rate: Trace sampling rate
        sentry_profiles_sample_rate: Profile sampling rate

    Returns:
        bool: True when Sentry was initialized
    """
    logger = logging.getLogger(__name__)
    if not sentry_dsn:
        logger.info("Sentry disabled (no DSN provided)")
        return False

    sentry_sdk.init(
        dsn=sentry_dsn,
        environment=sentry_environment,
        traces_sample_rate=sentry_traces_sample_rate,
        profiles_sample_rate=sentry_profiles_sample_rate,
        integrations=[
            StarletteIntegration(transaction_style="endpoint"),
            FastApiIntegration(transaction_style="endpoint"),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR
            ),
        ],
        before_send=scrub_request_body,
        attach_stacktrace=True,
        send_default_pii=False,
    )
    logger.info(f"Sentry initialized in {sentry_environment} environment")
    return True


def setup_fastapi_logging(settings: Settings) -> None:
    """Configure logging, then Sentry, from the API settings."""
    setup_logging(log_level=settings.effective_log_level)
    init_sentry(
        settings.sentry_dsn,
        sentry_environment=settings.sentry_environment,
        sentry_traces_sample_rate=settings.sentry_traces_sample_rate,
        sentry_profiles_sample_rate=settings.sentry_profiles_sample_rate
    )
