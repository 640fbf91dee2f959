"""
Best-effort scalar coercion for model replies.

The model may send numbers as JSON numbers or as strings. One helper per
target type, applied uniformly by every reply parser.
"""

from __future__ import annotations

import math
from typing import Any, Optional


def coerce_text(value: Any) -> Optional[str]:
    """Return a stripped string, None for non-strings."""
    if isinstance(value, str):
        return value.strip()
    return None


def format_decimal(number: float) -> str:
    """Format a number without a trailing ``.0`` (150.0 -> "150", 2.5 -> "2.5")."""
    if isinstance(number, int):
        return str(number)
    if math.isfinite(number) and number.is_integer():
        return str(int(number))
    return repr(number)


def coerce_decimal_string(value: Any) -> Optional[str]:
    """
    Normalize a numeric-or-string field to a decimal string.

    Numbers are formatted, strings are kept as sent (trimmed).
    Booleans, empty strings and other types yield None.

    Example:
        >>> coerce_decimal_string(150)
        '150'
        >>> coerce_decimal_string(" 2.5 ")
        '2.5'
        >>> coerce_decimal_string(None) is None
        True
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return format_decimal(value)
    text = coerce_text(value)
    return text or None


def coerce_int(value: Any, default: int) -> int:
    """
    Normalize to int, truncating decimals.

    Example:
        >>> coerce_int("200", default=0)
        200
        >>> coerce_int(12.9, default=0)
        12
        >>> coerce_int("lots", default=1)
        1
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return default
        return int(number) if math.isfinite(number) else default
    return default


def coerce_float(value: Any, default: float) -> float:
    """
    Normalize to float.

    Example:
        >>> coerce_float("12.5", default=0.0)
        12.5
        >>> coerce_float(None, default=0.0)
        0.0
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    return number if math.isfinite(number) else default
