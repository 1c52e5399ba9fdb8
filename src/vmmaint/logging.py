"""
Structured logging for vmmaint using structlog.

The scheduled jobs run from cron with stderr appended to
``/var/log/vm-*.log``, so stderr output is plain text unless a terminal
is attached. ``--log-file`` adds a JSON-lines copy of every event.
"""

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

import structlog

from vmmaint.errors import ConfigError


def _shared_processors() -> List:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _formatter(renderer) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=_shared_processors(),
    )


def _file_handler(log_file: Path) -> logging.Handler:
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file)
    except OSError as e:
        raise ConfigError(f"Cannot open log file {log_file}: {e}")
    handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    return handler


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[Path] = None,
) -> None:
    """
    Route structlog events through stdlib logging to stderr.

    Args:
        level: Log level name, case-insensitive
        json_output: Render stderr lines as JSON instead of key=value text
        log_file: Also append JSON lines to this file

    Raises:
        ConfigError: if *log_file* cannot be opened.
    """
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(_formatter(renderer))
    handlers = [stderr_handler]
    if log_file is not None:
        handlers.append(_file_handler(Path(log_file)))

    structlog.configure(
        processors=_shared_processors() + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        handlers=handlers,
        force=True,
    )


def bind_run(command: str, **values) -> None:
    """Tag every event of this invocation with the subcommand that runs."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(command=command, **values)


@contextmanager
def log_operation(logger, operation: str, **kwargs):
    """
    Log ``<operation>.started`` and then ``.completed`` or ``.failed``.

    Usage:
        with log_operation(log, "setup.files", count=5):
            ...
    """
    log = logger.bind(operation=operation, **kwargs)
    started = time.monotonic()
    log.info(f"{operation}.started")

    def elapsed_ms() -> float:
        return round((time.monotonic() - started) * 1000, 2)

    try:
        yield log
    except Exception as e:
        log.error(
            f"{operation}.failed",
            error=str(e),
            error_type=type(e).__name__,
            duration_ms=elapsed_ms(),
        )
        raise
    log.info(f"{operation}.completed", duration_ms=elapsed_ms())
