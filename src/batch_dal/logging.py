"""Structured logging for batch runs.

Job and step names are bound through structlog's contextvars for as long as
the job or step runs, so every event emitted underneath, down to the reader
and the providers, carries them without being handed the step object.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from batch_dal.config import ObservabilityConfig


def setup_logging(config: ObservabilityConfig) -> None:
    """Configure structlog from the observability settings."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if config.log_format == "json":
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors += [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, config.log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def bound_run(**names: str) -> Iterator[None]:
    """Tag every event logged inside the block with the given job/step names."""
    with structlog.contextvars.bound_contextvars(**names):
        yield


def get_logger(name: str, **initial_context: Any) -> Any:
    """Get a logger that records its module name next to any initial context."""
    return structlog.get_logger().bind(logger=name, **initial_context)
