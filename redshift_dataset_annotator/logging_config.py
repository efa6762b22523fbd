"""Structured logging configuration.

Logs always go to stderr: stdout is reserved for `annotate --verbose`
JSON output and `configure --show`.

Usage:
    from redshift_dataset_annotator.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("rename_column_introduced", column="amt", new_name="amount")
"""

import logging
import sys

import structlog

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def resolve_level(level: str) -> int:
    """Map a level name to a logging constant. Unknown names raise ValueError."""
    try:
        return _LEVELS[level.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown log level '{level}'. Expected one of: {', '.join(sorted(_LEVELS))}"
        ) from None


def setup_logging(level: str = "info", fmt: str = "json") -> None:
    """Configure structlog for stderr output. Call once at startup."""
    renderer = (
        structlog.dev.ConsoleRenderer()
        if fmt == "console"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(resolve_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,  # Allow reconfiguration from the CLI
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named logger instance.

    Args:
        name: Logger name, typically __name__ of the calling module.

    Returns:
        A structlog bound logger.
    """
    return structlog.get_logger(name)
