"""Conversion of attribute text into typed scalars.

All helpers are total: text that cannot be understood yields the supplied
default instead of raising.
"""

import re
from decimal import Decimal
from typing import Optional

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
FALSE_VALUES = frozenset({"false", "0", "no", "off", ""})

# Binary multipliers, "10MB" == 10 * 1024 * 1024
BYTE_UNITS = {
    "": 1,
    "b": 1,
    "k": 1024,
    "kb": 1024,
    "m": 1024**2,
    "mb": 1024**2,
    "g": 1024**3,
    "gb": 1024**3,
    "t": 1024**4,
    "tb": 1024**4,
}

# "I" is minutes so that "M" can mean months
DURATION_UNITS = {
    "s": 1,
    "i": 60,
    "h": 3600,
    "d": 86400,
    "w": 7 * 86400,
    "m": 30 * 86400,
    "y": 365 * 86400,
}

_BYTES_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*([a-z]*)$")
_DURATION_RE = re.compile(r"^(\d+)\s*([a-z])$")


def to_boolean(text: Optional[str], default: bool) -> bool:
    """Convert a textual flag to bool.

    Args:
        text: Attribute value, None is treated like an empty string
        default: Returned for anything that is not a known token

    Returns:
        True for true/1/yes/on, False for false/0/no/off/empty, else default
    """
    value = (text or "").strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    return default


def to_bytes(text: Optional[str], default: Optional[int] = None) -> Optional[int]:
    """Convert a size such as "10MB", "512k" or "100" to a byte count."""
    match = _BYTES_RE.match((text or "").strip().lower())
    if not match:
        return default
    number, unit = match.groups()
    if unit not in BYTE_UNITS:
        return default
    try:
        return int(Decimal(number) * BYTE_UNITS[unit])
    except (ArithmeticError, ValueError):
        return default


def to_duration(text: Optional[str], default: Optional[int] = None) -> Optional[int]:
    """Convert a duration such as "2W" or "12H" to seconds."""
    match = _DURATION_RE.match((text or "").strip().lower())
    if not match:
        return default
    number, unit = match.groups()
    if unit not in DURATION_UNITS:
        return default
    try:
        return int(number) * DURATION_UNITS[unit]
    except ValueError:
        # int() refuses digit strings past sys.get_int_max_str_digits()
        return default
