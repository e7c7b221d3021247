"""
Client UI Components

Provides operator input readers and console output for the messenger.
"""

from .display_manager import DisplayManager
from .input_handler import (
    BlockingLineReader,
    BufferedLineReader,
    KeystrokeLineReader,
    create_line_reader,
)

__all__ = [
    "DisplayManager",
    "BlockingLineReader",
    "BufferedLineReader",
    "KeystrokeLineReader",
    "create_line_reader",
]
