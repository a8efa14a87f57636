"""Logfire setup and the structured logging helpers used by the planner services.

Services log through logging.getLogger(__name__) with extra fields; once
configure_logfire() has run, Logfire collects those records together with the
spans opened around store access, e.g. in objective_service:

    with span("objective_service.toggle_task"):
        ...

Reconciliation summaries go through log_with_context() so their counters land
as separate fields:

    log_with_context(logger, "info", "Week reconciliation complete", checked=12, corrected_count=1)
"""

import logging

import logfire
from fastapi import FastAPI

from planner.core.config import settings


def configure_logfire() -> None:
    """Configure Logfire; without LOGFIRE_TOKEN records stay local."""
    logfire.configure(
        token=settings.logfire_token,
        service_name="weekplanner",
        service_version="0.1.0",
        environment=settings.environment,
        send_to_logfire="if-token-present",
    )

    logger = logging.getLogger(__name__)
    logger.info("Logfire configured successfully")


def instrument_fastapi(app: FastAPI) -> None:
    """Add Logfire instrumentation to FastAPI application."""
    logfire.instrument_fastapi(app)
    logger = logging.getLogger(__name__)
    logger.info("FastAPI instrumentation configured")


def span(name: str) -> logfire.LogfireSpan:
    """Open a Logfire span named "<service module>.<function>"."""
    return logfire.span(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: object,
) -> None:
    """Log a message with structured context fields.

    Args:
        logger: Logger instance to use
        level: Log level ("debug", "info", "warning", "error", "critical")
        message: Log message
        **context: Extra fields such as week_id or skipped_count; names must not clash
            with LogRecord attributes ("created", "name", ...)
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra=context)
