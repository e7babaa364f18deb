"""
Utility modules for the ctags language server.

This package contains shared utilities used across services:
- error_handler: Decorator-based error handling for protocol entry points
- text: LSP position and line helpers
"""

from .error_handler import handle_notification_errors, handle_request_errors
from .text import (
    DEFAULT_POSITION_ENCODING,
    column_length,
    column_to_index,
    index_to_column,
    is_identifier_char,
    position_to_offset,
    split_lines,
    strip_line_ending,
)

__all__ = [
    "handle_request_errors",
    "handle_notification_errors",
    "DEFAULT_POSITION_ENCODING",
    "column_length",
    "column_to_index",
    "index_to_column",
    "is_identifier_char",
    "position_to_offset",
    "split_lines",
    "strip_line_ending",
]
