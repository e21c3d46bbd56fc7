"""
Structured logging configuration for the Grant Discovery pipeline.

Console output in development, JSON in production. The run id is bound
through structlog's contextvars, so every operator event emitted during a
discovery run carries it.

These are operator logs. The user-facing progress log of a run is the
LogStream (see log_stream.py), which mirrors its entries here.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Generator

import structlog
from structlog.types import Processor

from .config import config


def get_run_id() -> str | None:
    """Run id bound by the innermost logging_context, if any."""
    return structlog.contextvars.get_contextvars().get('run_id')


def configure_logging(
    json_output: bool = False,
    log_level: str | None = None,
) -> None:
    """
    Configure structlog for the application.

    Args:
        json_output: JSON lines when True, colored console output otherwise
        log_level: Override log level (defaults to config.LOG_LEVEL)
    """
    level_num = getattr(logging, (log_level or config.LOG_LEVEL).upper(), logging.INFO)
    logging.basicConfig(format='%(message)s', stream=sys.stdout, level=level_num)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso'),
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def logging_context(run_id: str | None = None) -> Generator[None, None, None]:
    """Bind run_id for the duration of the block. None keeps the current binding."""
    if run_id is None:
        yield
        return
    with structlog.contextvars.bound_contextvars(run_id=run_id):
        yield


class PipelineTimer:
    """Wall-clock durations of named pipeline stages, in milliseconds."""

    def __init__(self):
        self.stages: dict[str, float] = {}
        self.start_time = time.perf_counter()

    @contextmanager
    def stage(self, name: str) -> Generator[None, None, None]:
        started = time.perf_counter()
        try:
            yield
        finally:
            self.stages[name] = (time.perf_counter() - started) * 1000

    @property
    def total_ms(self) -> float:
        return (time.perf_counter() - self.start_time) * 1000

    def summary(self) -> dict[str, Any]:
        return {
            'total_ms': round(self.total_ms, 2),
            'stages': {k: round(v, 2) for k, v in self.stages.items()},
        }


# Development output until a host calls configure_logging(json_output=True)
configure_logging(json_output=False)
