"""Structured logging for gradecore.

Events are emitted through structlog and rendered by the standard library
handlers, so third-party loggers (SQLAlchemy, for one) share the same output:
JSON when writing to a pipe or file, colored key/value lines on a terminal.

Student-identifying fields are masked before rendering.

Example usage:
    from gradecore.core.logging import bind_context, configure_logging, get_logger

    configure_logging()
    logger = get_logger(__name__)

    with bind_context(course_id="bio-101"):
        logger.info("curve_committed", updated_count=24)
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from gradecore import __version__

# Event fields that identify a student or carry instructor free text
STUDENT_FIELDS = frozenset({"student_name", "student_email", "feedback"})

REDACTED = "[REDACTED]"


@contextmanager
def bind_context(**fields: Any) -> Iterator[None]:
    """Attach fields to every event logged inside the block.

    Example:
        with bind_context(course_id="bio-101", assignment_id="lab-3"):
            logger.info("curve_applied")  # carries course_id and assignment_id
    """
    with structlog.contextvars.bound_contextvars(**fields):
        yield


def get_bound_context() -> dict[str, Any]:
    """Return a copy of the currently bound log context."""
    return structlog.contextvars.get_contextvars()


# =============================================================================
# Processors
# =============================================================================


def add_version(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Stamp events with the gradecore version."""
    event_dict.setdefault("gradecore_version", __version__)
    return event_dict


def redact_student_data(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask student-identifying fields, including inside nested dicts."""
    return _redact(event_dict)


def _redact(data: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in data.items():
        if key in STUDENT_FIELDS and value is not None:
            result[key] = REDACTED
        elif isinstance(value, dict):
            result[key] = _redact(value)
        else:
            result[key] = value
    return result


def flatten_event_name(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Keep each event on one line so a bad value cannot forge log entries."""
    event = event_dict.get("event")
    if isinstance(event, str) and ("\n" in event or "\r" in event):
        event_dict["event"] = " ".join(event.splitlines())
    return event_dict


def _processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        add_version,
        redact_student_data,
        flatten_event_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]


# =============================================================================
# Configuration
# =============================================================================


def configure_logging(
    level: str | int = logging.INFO,
    json_output: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level name or number.
        json_output: Render JSON. None picks JSON unless stdout is a terminal.
        log_file: Also append events to this file.
    """
    if json_output is None:
        json_output = not sys.stdout.isatty()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    processors = _processors()
    structlog.configure(
        processors=[
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=processors,
    )

    # stderr keeps stdout free for JSON and CSV output
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, typically ``get_logger(__name__)``."""
    return structlog.get_logger(name)


def reset_logging() -> None:
    """Drop handlers, bound context and structlog configuration.

    Used between tests so one test's configuration does not leak into the next.
    """
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.WARNING)
