"""Structured logging configuration with structlog."""

import logging
import sys
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from earnings_tracker.config import Settings

# Third-party loggers that are chatty below WARNING (httpx logs every request line)
NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "asyncio", "asyncpg")


def _renderer(is_dev: bool) -> structlog.types.Processor:
    if is_dev:
        return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    return structlog.processors.JSONRenderer()


def setup_logging(settings: "Settings") -> None:
    """Configure structlog and route stdlib logging through the same renderer.

    Development gets a console renderer; every other environment gets one
    JSON object per line on stderr, so stdout stays free for CLI output.
    """
    is_dev = settings.env == "development"
    level = getattr(logging, settings.log_level)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if not is_dev:
        shared_processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[*shared_processors, _renderer(is_dev)],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # Playwright and asyncpg log through stdlib; render them like our own events
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(is_dev),
            ],
        )
    )
    logging.basicConfig(level=level, handlers=[handler], force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_ticker(ticker: str) -> AbstractContextManager[object]:
    """Attach ``ticker`` to every event logged inside the ``with`` block."""
    return structlog.contextvars.bound_contextvars(ticker=ticker)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
