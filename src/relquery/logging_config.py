"""
Logging Configuration for relquery.

Provides centralized logger setup for the query engine debug trace.
Everything is driven by environment variables read at import time:

- RELQUERY_DEBUG_LOG: file name for the trace log (unset or "" disables it)
- RELQUERY_LOG_DIR: directory for the trace log (default: CWD/.relquery)
- RELQUERY_LOG_STDERR: "1"/"true"/"yes" mirrors the trace to stderr
- RELQUERY_LOG_LEVEL: level name for the trace logger (default: WARNING)
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

TRACE_LOGGER_NAME = "relquery.debug_trace"

_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _get_log_directory() -> Path:
    """Get the log directory path."""
    log_dir = os.getenv("RELQUERY_LOG_DIR")
    if not log_dir:
        log_dir = str(Path.cwd() / ".relquery")
    return Path(log_dir)


def _ensure_log_directory() -> Path:
    """Ensure log directory exists and return its path."""
    log_dir = _get_log_directory()
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def _get_log_level() -> int:
    """Resolve RELQUERY_LOG_LEVEL to a logging level, WARNING if unknown."""
    name = os.getenv("RELQUERY_LOG_LEVEL", "WARNING").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


DEBUG_LOG_FILE = os.getenv("RELQUERY_DEBUG_LOG", "")
STDERR_LOG_ENABLED = _env_flag("RELQUERY_LOG_STDERR")


def _create_file_handler(log_filename: str) -> Optional[logging.FileHandler]:
    """
    Create a file handler for the specified log file.

    Args:
        log_filename: Name of the log file (e.g., 'debug_trace.log')

    Returns:
        Configured FileHandler, or None if the file cannot be opened
    """
    try:
        log_dir = _ensure_log_directory()
        handler = logging.FileHandler(log_dir / log_filename, mode='a', encoding='utf-8')
    except OSError:
        return None
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FORMAT))
    return handler


class FlushingStreamHandler(logging.StreamHandler):
    """StreamHandler that flushes after every emit.

    ::: This is-in-layer Infrastructure-Layer.
    ::: This is a handler.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    def emit(self, record):
        super().emit(record)
        self.flush()


def _create_stderr_handler() -> logging.StreamHandler:
    """Create a stderr handler for console output with auto-flush."""
    handler = FlushingStreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FORMAT))
    return handler


def get_debug_trace_logger() -> logging.Logger:
    """
    Get the debug trace logger for query registration and execution.

    Output goes to $RELQUERY_LOG_DIR/$RELQUERY_DEBUG_LOG and, when
    RELQUERY_LOG_STDERR is set, to stderr.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(TRACE_LOGGER_NAME)

    # Only configure once
    if not logger.handlers:
        logger.setLevel(_get_log_level())
        logger.propagate = False

        if DEBUG_LOG_FILE:
            file_handler = _create_file_handler(DEBUG_LOG_FILE)
            if file_handler:
                logger.addHandler(file_handler)

        if STDERR_LOG_ENABLED:
            logger.addHandler(_create_stderr_handler())

        # Keeps the library silent when nothing is configured
        if not logger.handlers:
            logger.addHandler(logging.NullHandler())

    return logger


debug_trace_logger = get_debug_trace_logger()


def configure_logger_for_debug_trace(logger_name: str) -> logging.Logger:
    """
    Configure a logger to also write to the debug trace handlers.

    Args:
        logger_name: Name of the logger to configure (e.g., __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(debug_trace_logger.level)
    for handler in debug_trace_logger.handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    return logger


def _stderr_handlers(logger: logging.Logger):
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            yield handler


def suppress_stderr_logging():
    """
    Suppress stderr logging for the trace logger.

    File logging continues to work normally.
    """
    for handler in _stderr_handlers(debug_trace_logger):
        handler.setLevel(logging.CRITICAL + 1)  # Effectively disable


def restore_stderr_logging():
    """Restore stderr logging for the trace logger."""
    for handler in _stderr_handlers(debug_trace_logger):
        handler.setLevel(logging.DEBUG)
