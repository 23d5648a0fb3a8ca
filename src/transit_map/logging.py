"""Structured logging for the map service.

Log lines from structlog and from stdlib loggers (uvicorn, httpx) share one
processor chain and one handler. Requests bind ``request_id``/``path`` and a
feed load binds ``agency``/``load_id``, so every line emitted while fetching,
normalizing and indexing a feed can be traced back to its load.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, Optional

import structlog

if TYPE_CHECKING:
    from structlog.types import Processor

from transit_map.config import get_settings

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("uvicorn.access", "httpx")


def _shared_processors(json_logs: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_logs:
        processors.append(structlog.processors.format_exc_info)
    return processors


def setup_logging(json_logs: Optional[bool] = None) -> None:
    """Route structlog and stdlib logging through a single stdout handler.

    Args:
        json_logs: Render JSON lines. Defaults to JSON everywhere except the
            development environment, which gets the colored console renderer.
    """
    settings = get_settings()
    if json_logs is None:
        json_logs = settings.environment != "development"

    shared = _shared_processors(json_logs)
    renderer: Processor = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(colors=True)
    )

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level.upper())

    quiet_level = logging.DEBUG if settings.debug else logging.WARNING
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.stdlib.get_logger(name)


def bind_request_context(**kwargs: Any) -> None:
    """Bind context variables for the current HTTP request."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_request_context() -> None:
    """Clear context variables after request completion."""
    structlog.contextvars.clear_contextvars()


@contextmanager
def feed_load_context(agency: str, load_id: str) -> Iterator[None]:
    """Tag log lines with the agency and load id for the duration of a load.

    Only these two keys are unbound on exit; a request context bound by the
    caller is left in place.
    """
    with structlog.contextvars.bound_contextvars(agency=agency, load_id=load_id):
        yield
