"""Structured logging configuration using structlog.

Log events from every dbretry module go through the "dbretry" stdlib logger.
configure_logging() attaches a handler to that logger only, so applications
embedding the client keep control of the root logger.

Production renders JSON lines; any other environment renders the console
format.
"""

import logging
import sys
from typing import IO, TYPE_CHECKING, ContextManager, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from dbretry.config import settings

if TYPE_CHECKING:
    from dbretry.models.request import Request

LIBRARY_LOGGER = "dbretry"


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every event with the client name and version."""
    event_dict["app"] = settings.APP_NAME
    event_dict["app_version"] = settings.APP_VERSION
    return event_dict


def _renderer(is_production: bool) -> Processor:
    if is_production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(
    log_level: Optional[str] = None,
    environment: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Configure structlog and the "dbretry" logger.

    Args:
        log_level: Level name; defaults to settings.LOG_LEVEL. Unknown names
            fall back to INFO.
        environment: "production" selects JSON output; defaults to
            settings.ENVIRONMENT.
        stream: Destination of rendered lines (stdout when omitted)

    Returns:
        The configured "dbretry" stdlib logger
    """
    log_level = log_level or settings.LOG_LEVEL
    environment = environment or settings.ENVIRONMENT
    level = getattr(logging, log_level.upper(), logging.INFO)
    is_production = environment.lower() == "production"

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
    ]
    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(is_production),
            foreign_pre_chain=shared_processors,
        )
    )

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    library_logger.handlers.clear()
    library_logger.addHandler(handler)
    library_logger.setLevel(level)
    library_logger.propagate = False

    structlog.get_logger(__name__).debug(
        "Logging configured",
        log_level=logging.getLevelName(level),
        renderer="json" if is_production else "console",
    )
    return library_logger


def request_log_context(request: "Request") -> ContextManager[None]:
    """Bind the request identity to every log event emitted inside the block.

    Uses contextvars, so concurrent asyncio tasks keep separate bindings.
    """
    return structlog.contextvars.bound_contextvars(
        service=request.service.value,
        operation=request.operation,
        idempotent=request.idempotent,
    )
