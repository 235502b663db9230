"""Logging setup: structlog events on stderr, decision lines on stdout."""

import logging
import os
import sys

import structlog


def configure_logging(level: str | None = None, json_logs: bool = False) -> None:
    """Route structlog through stdlib logging on stderr.

    Args:
        level: DEBUG, INFO, WARNING or ERROR. Falls back to $LOG_LEVEL, then INFO.
        json_logs: Render events as JSON lines instead of the console format.
    """
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, log_level, logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level, force=True)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_run(command: str, dry_run: bool = False) -> None:
    """Tag every event of this process with the running subcommand."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(command=command, dry_run=dry_run)
