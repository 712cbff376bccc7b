"""
🔮 ONCHAIN PROPHECY · Sealed calls, public stakes.

Utility functions: scaled price values, address and time helpers.
"""

import re
import time
from typing import Optional

_NUMERIC_RE = re.compile(r"^[0-9]+(\.[0-9]+)?$")


def now_ts() -> int:
    """Get current unix time in whole seconds."""
    return int(time.time())


def normalize_address(address: str) -> str:
    """
    Normalize an account address for use as a store key.

    Args:
        address: Hex account address

    Returns:
        Lower-cased, stripped address

    Raises:
        ValueError: If the address is empty
    """
    normalized = (address or "").strip().lower()
    if not normalized:
        raise ValueError("address cannot be empty")
    return normalized


def to_scaled_value(text: str, decimals: int) -> int:
    """
    Convert a decimal string into a fixed-point integer.

    Extra fractional digits beyond ``decimals`` are truncated.

    Args:
        text: Decimal string such as "3150.25"
        decimals: Number of fractional digits in the scaled representation

    Returns:
        Scaled integer value

    Raises:
        ValueError: If the string is empty or not numeric
    """
    sanitized = (text or "").strip()
    if not sanitized:
        raise ValueError("Enter a price before submitting.")
    if not _NUMERIC_RE.match(sanitized):
        raise ValueError("Use numeric values for prices.")

    whole, _, fraction = sanitized.partition(".")
    padded_fraction = (fraction + "0" * decimals)[:decimals]
    return int((whole.lstrip("0") or "0") + padded_fraction)


def format_scaled_value(value: Optional[int], decimals: int) -> str:
    """
    Render a fixed-point integer as a decimal string without trailing zeros.

    Args:
        value: Scaled integer (None renders as "-")
        decimals: Number of fractional digits in the scaled representation

    Returns:
        Human readable decimal string
    """
    if value is None:
        return "-"
    raw = str(value).rjust(decimals + 1, "0")
    whole = raw[: len(raw) - decimals] or "0"
    fraction = raw[len(raw) - decimals :].rstrip("0")
    return f"{whole}.{fraction}" if fraction else whole


def format_day_label(day: Optional[int]) -> str:
    """Render a day index for display."""
    if day is None:
        return "-"
    return f"Day {day}"
