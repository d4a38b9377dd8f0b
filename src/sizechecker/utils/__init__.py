"""Shared utility modules for common operations.

This package provides:
- Size and duration parsing/formatting (pure functions)
- Secret sanitization for log output
- Logging configuration with correlation IDs
- The aiohttp-backed HTTP client

All utilities remain provider agnostic.
"""

from sizechecker.utils.formatting import (
    DurationParseError,
    SizeParseError,
    clean_size_string,
    format_duration,
    format_size,
    parse_duration,
    parse_size,
)

__all__ = [
    "DurationParseError",
    "SizeParseError",
    "clean_size_string",
    "format_duration",
    "format_size",
    "parse_duration",
    "parse_size",
]
