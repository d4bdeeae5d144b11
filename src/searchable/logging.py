"""Structured logging configuration using structlog."""

import logging
import sys

import structlog
from structlog.typing import EventDict, WrappedLogger

SERVICE_NAME = "searchable"

# Transport libraries logging each engine round trip at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def add_service(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Stamp every event with the service name."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_logging(debug: bool = False) -> None:
    """Configure structlog for JSON output.

    Request-scoped context (the document type being searched or
    administered) is merged from contextvars into every event. In debug
    mode each engine request is logged as well.

    Args:
        debug: Enable debug-level logging.
    """
    level = logging.DEBUG if debug else logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_service,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # The engine client logs its own requests
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
