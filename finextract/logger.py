"""
Logging setup for FinExtract.

Usage:
    from finextract.logger import setup_logger, get_logger

    # Once, at an entry point
    setup_logger("INFO")

    # In modules
    logger = get_logger(__name__)
    logger.info("[BATCH] 3 files queued")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

ROOT_LOGGER_NAME = "finextract"


class ColoredFormatter(logging.Formatter):
    """Formatter with ANSI colors for console output."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')
        module = record.name.split('.')[-1][:20]
        message = f"{timestamp} | {color}{record.levelname:<8}{reset} | {module:<20} | {record.getMessage()}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


class PlainFormatter(logging.Formatter):
    """Formatter without colors for files and non-TTY streams."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')
        module = record.name.split('.')[-1][:20]
        message = f"{timestamp} | {record.levelname:<8} | {module:<20} | {record.getMessage()}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def setup_logger(level: str | int = "INFO", log_file: str | Path | None = None) -> logging.Logger:
    """
    Configure and return the package logger.

    Args:
        level: Log level for all handlers (name or number)
        log_file: Optional file that receives the same records

    Returns:
        The configured "finextract" logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Avoid duplicate handlers when called twice (CLI + uvicorn reload)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    if sys.stderr.isatty():
        console_handler.setFormatter(ColoredFormatter())
    else:
        console_handler.setFormatter(PlainFormatter())
    logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(PlainFormatter())
        logger.addHandler(file_handler)
        logger.info(f"[LOG] Writing log file to {log_path}")

    logger.propagate = False
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get a child of the package logger for a module."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
