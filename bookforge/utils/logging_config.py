"""Logging configuration for Book Forge."""

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Default log file location
DEFAULT_LOG_FILE = Path(__file__).parent.parent.parent / "logs" / "book_forge.log"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Rotate at 5MB, keep 3 backups
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def setup_logging(level: str = "INFO", log_file: str | None = "default") -> None:
    """Configure root logging for the book-forge command.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: File path for logs. "default" uses logs/book_forge.log,
                  None or "" disables file logging.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    # Log records go to stderr; stdout carries the command's own output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file == "default":
        log_path: Path | None = DEFAULT_LOG_FILE
    elif log_file:
        log_path = Path(log_file)
    else:
        log_path = None

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        root_logger.debug("Logging to file: %s", log_path)


@contextmanager
def log_performance(logger: logging.Logger, operation: str) -> Iterator[None]:
    """Log how long *operation* took, or that it failed.

    Example:
        with log_performance(logger, "seed load library.yaml"):
            data = yaml.safe_load(f)
    """
    start_time = time.perf_counter()
    logger.debug("%s: starting", operation)
    try:
        yield
    except Exception as e:
        logger.error(
            "%s: failed after %.3fs - %s", operation, time.perf_counter() - start_time, e
        )
        raise
    logger.info("%s: completed in %.3fs", operation, time.perf_counter() - start_time)
