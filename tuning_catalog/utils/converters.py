"""Type conversion utilities for safely handling data from the content store.

This module is the single source of truth for safe type conversion.
All other modules should import from here instead of defining their own.
"""

import re
from typing import Any


def safe_float(val: Any, default: float = 0.0) -> float:
    """Safely convert a value to float.

    Args:
        val: Value to convert (can be str, int, float, None, etc.)
        default: Value to return if conversion fails

    Returns:
        Converted float or default value

    Examples:
        >>> safe_float("3.14")
        3.14
        >>> safe_float(None)
        0.0
        >>> safe_float("invalid", default=-1.0)
        -1.0
    """
    if val is None or val == "":
        return default
    try:
        return float(val)
    except (ValueError, TypeError):
        return default


def optional_amount(val: Any) -> float | None:
    """Convert a catalog figure (price, hk, Nm) to a number or None.

    Missing, unparseable and negative values all mean "not available";
    they are never coerced to zero.

    Examples:
        >>> optional_amount("4995")
        4995.0
        >>> optional_amount(-10)
        >>> optional_amount("")
    """
    if isinstance(val, bool):
        return None
    number = safe_float(val, default=-1.0)
    if number != number or number < 0:  # NaN or negative
        return None
    return number


def parse_price_input(val: Any) -> float | None:
    """Parse a price typed into an admin form, e.g. "4 995 kr" -> 4995.0.

    Everything except digits and the decimal point is dropped.
    """
    if val is None:
        return None
    cleaned = re.sub(r"[^0-9.]", "", str(val))
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None
