"""
Logging utilities for MedImaging.

Everything logs through loguru. Uvicorn, FastAPI and httpx log through the
standard library, so their records are intercepted and re-emitted by loguru
with the caller's location kept intact.
"""

import inspect
import logging
import sys
from pathlib import Path

from loguru import logger as _logger

from ..settings import Settings, settings

INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "httpx")

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Re-emit standard library log records through loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip the logging module's own frames
        frame, depth = inspect.currentframe(), 0
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        _logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(
    level: str = "INFO",
    format: str | None = None,
    log_file: str | Path | None = None,
    rotation: str = "20 MB",
    retention: str = "1 week",
    serialize: bool = False,
    diagnose: bool = False,
) -> None:
    """
    Configure the loguru sinks and route standard library logging into them.

    Args:
        level: Minimum log level to capture
        format: Log message format string
        log_file: Rotating file sink, in addition to stderr
        rotation: When to rotate the log file (size or time)
        retention: How long to keep rotated files
        serialize: Emit one JSON document per record on every sink
        diagnose: Show variable values in tracebacks; may leak secrets
    """
    format = format or DEFAULT_FORMAT

    _logger.remove()
    _logger.add(
        sys.stderr,
        level=level,
        format=format,
        colorize=not serialize,
        serialize=serialize,
        backtrace=True,
        diagnose=diagnose,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        _logger.add(
            str(log_path),
            level=level,
            format=format,
            rotation=rotation,
            retention=retention,
            compression="zip",
            serialize=serialize,
            backtrace=True,
            diagnose=diagnose,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for log_name in INTERCEPTED_LOGGERS:
        logging.getLogger(log_name).handlers = [InterceptHandler()]


def setup_logging_from_settings(config: Settings) -> None:
    """Apply the ``log_*`` keys of the application settings."""
    setup_logging(
        level=config.log_level,
        format=config.log_format,
        log_file=config.get_log_dir() / "medimaging.log" if config.log_to_file else None,
        rotation=config.log_rotation,
        retention=config.log_retention,
        serialize=config.log_serialize,
        diagnose=config.is_development,
    )


setup_logging_from_settings(settings)

logger = _logger
