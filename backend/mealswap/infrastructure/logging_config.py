"""Logging setup: stdlib logging plus structlog key/value events."""

import logging
from typing import Optional

import structlog

from backend.mealswap.infrastructure.config import get_log_level


def configure_logging(level: Optional[str] = None, json_logs: bool = False) -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        level: Log level name (defaults to LOG_LEVEL env var)
        json_logs: Render events as JSON instead of console text
    """
    level_name = (level or get_log_level()).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )
