"""Logging setup for host convergence runs.

Every run logs to a rotating file under /var/log/host_converge/ and echoes
bare messages to stdout. If the log directory cannot be created, a stderr
handler is used instead of the file handler.
"""

from __future__ import annotations

from logging import (
    Logger, Formatter, StreamHandler, getLogger, DEBUG, INFO
)
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional
import sys
from lib.types import BYTES_PER_MB

# Default log configuration
DEFAULT_LOG_MAX_BYTES = 5 * BYTES_PER_MB  # 5 MB
DEFAULT_LOG_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = INFO
DEFAULT_LOG_DIR = "/var/log/host_converge"
LOGGER_NAME = "host_converge"

# Format: timestamp - severity - logger - message
STANDARD_LOG_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)s - %(message)s"
STANDARD_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _ensure_fallback_handler(logger: Logger, level: int = INFO) -> None:
    """Add a stderr handler as fallback if no handlers are configured.

    Args:
        logger: Logger instance to add fallback handler to
        level: Log level for the handler
    """
    if logger.handlers:
        return

    handler = StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(get_standard_formatter())
    logger.addHandler(handler)


def get_standard_formatter() -> Formatter:
    """Get the standard formatter for file logs.

    Returns:
        Configured Formatter instance
    """
    return Formatter(STANDARD_LOG_FORMAT, STANDARD_DATE_FORMAT)


def get_rotating_logger(
    name: str,
    log_file: str,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT,
    level: int = DEFAULT_LOG_LEVEL,
    stderr_fallback: bool = True
) -> Logger:
    """Return a logger configured with a rotating file handler.

    Args:
        name: Logger name
        log_file: Path to log file
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stderr_fallback: Add a stderr handler when the log file cannot be used

    Returns:
        Configured Logger instance with rotating file handler
    """
    logger = getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    log_path = Path(log_file)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
    except (OSError, IOError) as e:
        print(f"Error creating log directory {log_path.parent}: {e}", file=sys.stderr)
        if stderr_fallback:
            _ensure_fallback_handler(logger, level)
        return logger

    log_file_path = str(log_path.resolve())
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == log_file_path:
            return logger

    try:
        handler = RotatingFileHandler(log_file_path, maxBytes=max_bytes, backupCount=backup_count)
        handler.setLevel(level)
        handler.setFormatter(get_standard_formatter())
        logger.addHandler(handler)
    except (OSError, IOError) as e:
        print(f"Error opening log file {log_file_path}: {e}", file=sys.stderr)
        if stderr_fallback:
            _ensure_fallback_handler(logger, level)
        return logger

    return logger


def setup_run_logger(
    log_file: Optional[str] = None,
    verbose: bool = False,
    console_output: bool = True
) -> Logger:
    """Configure the host_converge logger for a CLI run.

    Args:
        log_file: Log file path (defaults to DEFAULT_LOG_DIR/host_converge.log)
        verbose: Log external tool output at DEBUG level
        console_output: Whether to also print bare messages to stdout

    Returns:
        Configured Logger instance
    """
    level = DEBUG if verbose else DEFAULT_LOG_LEVEL
    if log_file is None:
        log_file = str(Path(DEFAULT_LOG_DIR) / f"{LOGGER_NAME}.log")

    # The stdout console handler already shows every message
    logger = get_rotating_logger(LOGGER_NAME, log_file, level=level, stderr_fallback=not console_output)

    if console_output:
        has_console = any(
            isinstance(h, StreamHandler) and getattr(h, "stream", None) is sys.stdout
            for h in logger.handlers
        )
        if not has_console:
            console_handler = StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(Formatter('%(message)s'))
            logger.addHandler(console_handler)

    return logger
