"""
mpsched/core/logging.py

Structured logging configuration.

Modules log through `get_logger(__name__)` with event names and key/value
context. Events are handed to stdlib logging under the "mpsched" logger,
which carries a NullHandler, so the library is silent until the host
application configures logging (or calls `configure_logging`).
"""

import logging
import sys
from typing import Any, List

import structlog
from structlog.stdlib import ProcessorFormatter

logging.getLogger("mpsched").addHandler(logging.NullHandler())


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger bound to the stdlib logger `name`.

    Level filtering and output are decided by stdlib logging, independently
    of any global structlog configuration of the host application.
    """
    return structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)


def _remove_internal_fields(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Drop ProcessorFormatter bookkeeping fields from output."""
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def configure_logging(*, json_output: bool = False, level: str = "WARNING") -> None:
    """
    Configure structlog and stdlib logging.

    Args:
        json_output: Emit JSON lines instead of console output
        level: Log level name (DEBUG shows every scheduling and dispatch step)
    """
    log_level = getattr(logging, level.upper())

    shared_processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        final_processors: List[Any] = [
            _remove_internal_fields,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final_processors = [
            _remove_internal_fields,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=[*shared_processors, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ProcessorFormatter(processors=final_processors, foreign_pre_chain=shared_processors)
    )

    pkg = logging.getLogger("mpsched")
    pkg.handlers = [handler]
    pkg.setLevel(log_level)
    pkg.propagate = False
