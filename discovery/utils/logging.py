"""
Logging configuration for the discovery engine.

Uses loguru. Lines mirrored from the dashboard activity stream carry
``activity=True`` in their extra dict; they are tagged ``activity`` on the
console instead of the emitting module, and can be written to a file of
their own (ACTIVITY_LOG_FILE) for a plain record of what the agent did.
"""

import os
import sys
from pathlib import Path

from loguru import logger

from discovery.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
ACTIVITY_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>activity</magenta> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
ACTIVITY_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"


def is_activity(record: dict) -> bool:
    """True for lines mirrored from the activity stream."""
    return bool(record["extra"].get("activity"))


def _console_format(record: dict) -> str:
    fmt = ACTIVITY_CONSOLE_FORMAT if is_activity(record) else CONSOLE_FORMAT
    return fmt + "\n{exception}"


def setup_logging(
    level: str | None = None,
    log_file: Path | None = None,
    activity_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "1 week",
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file for the full application log
        activity_file: Optional file receiving only activity-stream lines
        rotation: Log rotation setting (e.g., "10 MB", "1 day")
        retention: Log retention setting (e.g., "1 week", "10 files")
    """
    level = level or settings.log_level
    log_file = log_file or settings.log_file
    activity_file = activity_file or settings.activity_log_file

    logger.remove()
    logger.add(sys.stderr, level=level, format=_console_format, colorize=True)

    for path, fmt, record_filter in (
        (log_file, FILE_FORMAT, None),
        (activity_file, ACTIVITY_FILE_FORMAT, is_activity),
    ):
        if not path:
            continue
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            path,
            level=level,
            format=fmt,
            filter=record_filter,
            rotation=rotation,
            retention=retention,
            compression="gz",
        )

    logger.info(f"Logging configured: level={level}")


# Only configure logging if not explicitly disabled
if os.environ.get("DISABLE_LOGGING") != "1":
    setup_logging()
