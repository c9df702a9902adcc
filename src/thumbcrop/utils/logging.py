"""Structured logging configuration using structlog.

Provides correlation IDs for tracing images through a parallel batch and
configurable output formats (JSON for production, colored console for dev).

The batch runner sets ``batch_id`` once per run and ``image_id`` (the input
file name) in each worker thread before processing an image. Context
variables are per thread, so every event logged while that image is being
processed carries both IDs, and concurrent images never see each other's.
The worker clears its context when the image is done, because pool threads
are reused. The crop geometry modules never log; only the thumbnail
pipeline, the runners and the CLI do.
"""

import logging
import sys
from collections.abc import MutableMapping
from contextvars import ContextVar
from typing import Any, cast

import structlog
from structlog.types import Processor

from thumbcrop.config import settings

# Context variables for correlation IDs
_batch_id: ContextVar[str | None] = ContextVar("batch_id", default=None)
_image_id: ContextVar[str | None] = ContextVar("image_id", default=None)


def set_correlation_context(
    batch_id: str | None = None,
    image_id: str | None = None,
) -> None:
    """Set correlation IDs for the current context.

    Values left as None keep whatever is already set, so a worker can add
    ``image_id`` under a ``batch_id`` set earlier in the same thread.

    Args:
        batch_id: Unique identifier for the batch run
        image_id: Identifier of the image being processed (e.g., file name)
    """
    if batch_id is not None:
        _batch_id.set(batch_id)
    if image_id is not None:
        _image_id.set(image_id)


def clear_correlation_context() -> None:
    """Clear all correlation context variables.

    Called when a batch worker finishes an image, so the next image handled
    by the same pool thread does not inherit its ``image_id``.
    """
    _batch_id.set(None)
    _image_id.set(None)


def _add_correlation_ids(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Structlog processor to add batch_id and image_id to log events.

    IDs that are not set are omitted rather than logged as null.
    """
    _ = logger, method_name  # Required by structlog processor signature
    batch_id = _batch_id.get()
    image_id = _image_id.get()

    if batch_id is not None:
        event_dict["batch_id"] = batch_id
    if image_id is not None:
        event_dict["image_id"] = image_id

    return event_dict


def configure_logging(
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """Configure structlog with the specified settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to settings.LOG_LEVEL.
        log_format: Output format ("console" or "json").
                    Defaults to settings.LOG_FORMAT.
    """
    level = level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_correlation_ids,
    ]

    if log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure stdlib logging to match
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
        force=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name. If None, uses the calling module's name.

    Returns:
        A bound structlog logger instance.
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
