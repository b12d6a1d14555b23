"""
Logging utilities for the music diary.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Falls back to the LOG_LEVEL environment variable, then INFO.
        log_file: Optional path to log file
        format_string: Custom format string for log messages
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    level = level or os.getenv("LOG_LEVEL", "INFO")
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=numeric_level,
        format=format_string,
        handlers=handlers
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


class TaskLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that prefixes messages with the music task id."""

    def __init__(self, logger: logging.Logger, task_id: str):
        super().__init__(logger, {"task_id": task_id})

    def process(self, msg, kwargs):
        return f"[Task {self.extra['task_id']}] {msg}", kwargs


def get_task_logger(name: str, task_id: str) -> TaskLoggerAdapter:
    """
    Get a logger instance with music task context.

    Args:
        name: Logger name
        task_id: Vendor task id to include in log messages

    Returns:
        TaskLoggerAdapter with task context
    """
    return TaskLoggerAdapter(logging.getLogger(name), task_id)
