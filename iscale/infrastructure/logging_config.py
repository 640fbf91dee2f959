"""structlog configuration."""

import logging
from typing import Optional

import structlog

from iscale.infrastructure.config import get_log_level, load_environment


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure structlog with ISO timestamps and console output.

    Args:
        level: Log level name, defaults to ISCALE_LOG_LEVEL
    """
    load_environment()
    level_name = (level or get_log_level()).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
    )
