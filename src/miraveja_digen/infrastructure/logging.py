"""
Structured logging setup.

Configures structlog on top of the standard library logging module so that
every module-level ``structlog.get_logger(__name__)`` logger renders either
human-readable console lines or one JSON object per event.

Usage:
    from miraveja_digen.infrastructure.logging import configure_logging

    configure_logging(GeneratorSettings(log_level="DEBUG", json_logs=True))
"""

import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional, TextIO

import structlog
from structlog.types import EventDict, WrappedLogger

from miraveja_digen.domain import GeneratorSettings


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add an ISO8601 UTC timestamp."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def configure_logging(settings: Optional[GeneratorSettings] = None, stream: Optional[TextIO] = None) -> None:
    """Configure structlog and the root standard library logger.

    Args:
        settings: Supplies ``log_level`` and ``json_logs``. Uses defaults if not provided.
        stream: Destination of the rendered lines. Defaults to stderr, which
            keeps stdout free for command output.
    """
    settings = settings or GeneratorSettings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    processors: List[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if settings.json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
