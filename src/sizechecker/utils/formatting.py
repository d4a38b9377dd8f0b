"""Pure parsing and formatting utilities for sizes and durations.

This module converts between raw numbers and the human-readable strings used
on the command line and in check messages. All functions are pure with no
side effects.

Sizes use binary units (1024-based) throughout, so ``"5MB"`` parses to
5,242,880 bytes and 10,000,000 bytes formats as ``"9.54MB"``.
"""

import re
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Final

# Binary unit multipliers keyed by canonical unit symbol
_UNIT_FACTORS: Final[dict[str, int]] = {
    "B": 1,
    "KB": 1024,
    "MB": 1024**2,
    "GB": 1024**3,
    "TB": 1024**4,
    "PB": 1024**5,
    "EB": 1024**6,
}

# Display order from largest to smallest
_DISPLAY_UNITS: Final[tuple[str, ...]] = ("EB", "PB", "TB", "GB", "MB", "KB")

# Accepted spellings, lowercased, mapped to canonical unit symbols
_UNIT_ALIASES: Final[dict[str, str]] = {
    "": "B",
    "b": "B",
    "byte": "B",
    "bytes": "B",
    "k": "KB",
    "kb": "KB",
    "kib": "KB",
    "kilobyte": "KB",
    "kilobytes": "KB",
    "m": "MB",
    "mb": "MB",
    "mib": "MB",
    "megabyte": "MB",
    "megabytes": "MB",
    "g": "GB",
    "gb": "GB",
    "gib": "GB",
    "gigabyte": "GB",
    "gigabytes": "GB",
    "t": "TB",
    "tb": "TB",
    "tib": "TB",
    "terabyte": "TB",
    "terabytes": "TB",
    "p": "PB",
    "pb": "PB",
    "pib": "PB",
    "petabyte": "PB",
    "petabytes": "PB",
    "e": "EB",
    "eb": "EB",
    "eib": "EB",
    "exabyte": "EB",
    "exabytes": "EB",
}

_SIZE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(?P<number>\d+(?:\.\d*)?|\.\d+)(?P<unit>[a-z]*)$")

# Go-style duration units expressed in microseconds
_DURATION_UNITS: Final[dict[str, Decimal]] = {
    "ns": Decimal("0.001"),
    "us": Decimal(1),
    "µs": Decimal(1),
    "μs": Decimal(1),
    "ms": Decimal(1_000),
    "s": Decimal(1_000_000),
    "m": Decimal(60_000_000),
    "h": Decimal(3_600_000_000),
}

_DURATION_COMPONENT: Final[re.Pattern[str]] = re.compile(
    r"(?P<number>\d+(?:\.\d*)?|\.\d+)(?P<unit>ns|us|µs|μs|ms|s|m|h)"
)

# Time unit constants
_MINUTE = 60
_HOUR = _MINUTE * 60
_DAY = _HOUR * 24


class SizeParseError(ValueError):
    """Raised when a size string cannot be converted to a byte count."""


class DurationParseError(ValueError):
    """Raised when a duration string cannot be converted to a timedelta."""


def clean_size_string(value: str) -> str:
    """Remove every whitespace character from a size string.

    Examples:
        >>> clean_size_string(" 50 GB ")
        '50GB'
    """
    return "".join(value.split())


def parse_size(value: str) -> int:
    """Parse a human-readable size string into a byte count.

    Accepts a non-negative decimal number followed by an optional unit.
    Units are case-insensitive and binary: ``B``, ``KB``, ``MB``, ``GB``,
    ``TB``, ``PB`` and ``EB``, plus ``KiB``-style and long spellings such as
    ``kilobytes``. Whitespace anywhere in the string is ignored and a bare
    number is taken as bytes. Fractional results are truncated to whole bytes.

    Args:
        value: Size string such as ``"50GB"`` or ``"1.5 TB"``

    Returns:
        Size in bytes

    Raises:
        SizeParseError: If the string is empty, negative or malformed

    Examples:
        >>> parse_size("5MB")
        5242880
        >>> parse_size("1.5 kb")
        1536
        >>> parse_size("512")
        512
    """
    cleaned = clean_size_string(value).lower()
    if not cleaned:
        msg = "size string is empty"
        raise SizeParseError(msg)

    match = _SIZE_PATTERN.match(cleaned)
    if match is None:
        msg = f"invalid size {value!r}: expected a number followed by a unit such as 50GB"
        raise SizeParseError(msg)

    unit = _UNIT_ALIASES.get(match.group("unit"))
    if unit is None:
        msg = f"invalid size {value!r}: unrecognized unit {match.group('unit')!r}"
        raise SizeParseError(msg)

    try:
        number = Decimal(match.group("number"))
    except InvalidOperation as exc:  # pragma: no cover - guarded by the pattern
        msg = f"invalid size {value!r}"
        raise SizeParseError(msg) from exc

    return int(number * _UNIT_FACTORS[unit])


def format_size(bytes: int) -> str:
    """Convert bytes to a compact human-readable size.

    Picks the largest binary unit that keeps the value at or above one and
    always shows two decimal places with no space before the unit.

    Args:
        bytes: Number of bytes to format (must be non-negative)

    Returns:
        Size string such as ``"9.54MB"``

    Examples:
        >>> format_size(12)
        '12.00B'
        >>> format_size(5242880)
        '5.00MB'
        >>> format_size(10_000_000)
        '9.54MB'
    """
    if bytes < 0:
        msg = "bytes must be non-negative"
        raise ValueError(msg)

    for unit in _DISPLAY_UNITS:
        factor = _UNIT_FACTORS[unit]
        if bytes >= factor:
            return f"{bytes / factor:.2f}{unit}"

    return f"{bytes:.2f}B"


def parse_duration(value: str) -> timedelta:
    """Parse a Go-style duration string into a timedelta.

    A duration is a sequence of decimal numbers, each with an optional
    fraction and a unit suffix, such as ``"300ms"``, ``"1.5h"`` or
    ``"2h45m"``. Valid units are ``ns``, ``us`` (or ``µs``), ``ms``, ``s``,
    ``m`` and ``h``. The bare string ``"0"`` is accepted. Durations are
    never negative here, since a cooldown cannot run backwards.

    Args:
        value: Duration string

    Returns:
        Parsed duration (sub-microsecond precision is truncated)

    Raises:
        DurationParseError: If the string is empty, negative or malformed

    Examples:
        >>> parse_duration("1m")
        datetime.timedelta(seconds=60)
        >>> parse_duration("1h30m")
        datetime.timedelta(seconds=5400)
    """
    text = value.strip()
    if not text:
        msg = "duration string is empty"
        raise DurationParseError(msg)

    if text.startswith("-"):
        msg = f"invalid duration {value!r}: must not be negative"
        raise DurationParseError(msg)

    text = text.removeprefix("+")
    if text == "0":
        return timedelta(0)

    total_microseconds = Decimal(0)
    position = 0
    while position < len(text):
        match = _DURATION_COMPONENT.match(text, position)
        if match is None:
            msg = f"invalid duration {value!r}: expected values like 30s, 1m or 1h30m"
            raise DurationParseError(msg)
        total_microseconds += Decimal(match.group("number")) * _DURATION_UNITS[match.group("unit")]
        position = match.end()

    return timedelta(microseconds=int(total_microseconds))


def format_duration(seconds: float) -> str:
    """Convert seconds to human-readable duration format.

    Shows the two most significant units for values over one minute.

    Args:
        seconds: Duration in seconds (must be non-negative)

    Returns:
        Duration string such as ``"45s"``, ``"1m 30s"``, ``"1h 1m"`` or ``"1d 1h"``

    Examples:
        >>> format_duration(45)
        '45s'
        >>> format_duration(90)
        '1m 30s'
        >>> format_duration(3665)
        '1h 1m'
    """
    if seconds < 0:
        msg = "seconds must be non-negative"
        raise ValueError(msg)

    total_seconds = int(seconds)

    if total_seconds >= _DAY:
        days, remaining = divmod(total_seconds, _DAY)
        hours = remaining // _HOUR
        return f"{days}d {hours}h" if hours > 0 else f"{days}d"

    if total_seconds >= _HOUR:
        hours, remaining = divmod(total_seconds, _HOUR)
        minutes = remaining // _MINUTE
        return f"{hours}h {minutes}m" if minutes > 0 else f"{hours}h"

    if total_seconds >= _MINUTE:
        minutes, remaining = divmod(total_seconds, _MINUTE)
        return f"{minutes}m {remaining}s" if remaining > 0 else f"{minutes}m"

    return f"{total_seconds}s"
