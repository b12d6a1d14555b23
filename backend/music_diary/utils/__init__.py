"""
Utility modules for the music diary.
"""

from .logger import get_task_logger, setup_logging

__all__ = [
    "get_task_logger",
    "setup_logging",
]
