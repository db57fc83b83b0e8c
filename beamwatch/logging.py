"""Structured logging configuration using structlog.

Every event carries ``service`` and ``worker_id`` so API, CLI and queue
consumers can be told apart once their output is merged. Recipient
addresses logged by the notifier are masked before rendering.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from structlog.types import EventDict, Processor, WrappedLogger

SERVICE_NAME = "beamwatch"

# Event keys that may hold an owner's e-mail address
RECIPIENT_KEYS = ("to", "email", "owner_email")

# Chatty third-party loggers kept at WARNING unless DEBUG is requested
QUIET_LOGGERS = ("httpx", "httpcore", "huey", "anthropic")


def mask_email(address: str) -> str:
    """``owner@beanthere.example`` -> ``o***@beanthere.example``."""
    local, sep, domain = address.partition("@")
    if not sep or not local:
        return address
    return f"{local[0]}***@{domain}"


def mask_recipients(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
    for key in RECIPIENT_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str):
            event_dict[key] = mask_email(value)
    return event_dict


def add_service_fields(worker_id: str = "") -> Processor:
    """Build a processor that stamps the service name and worker id on each event."""

    def _add(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", SERVICE_NAME)
        if worker_id:
            event_dict.setdefault("worker_id", worker_id)
        return event_dict

    return _add


def configure_logging(
    log_level: str = "INFO", log_format: str = "console", worker_id: str = ""
) -> None:
    """Configure structlog and stdlib logging.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
        log_format: Output format, "console" for human-readable or "json" for log shippers.
        worker_id: Identifier of this process, attached to every event when set.
    """
    level = log_level.upper()
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service_fields(worker_id),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        mask_recipients,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level, logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Route stdlib logging (httpx, huey, uvicorn) through the same renderer.
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *shared_processors,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if level == "DEBUG" else logging.WARNING)
