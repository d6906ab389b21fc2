"""Helpers for the loosely typed ids and filters accepted by the repositories."""

from typing import Any


def is_numeric_id(value: Any) -> bool:
    """True for non-negative ints and strings of ASCII digits 0-9."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value >= 0
    if isinstance(value, str):
        # isdigit() alone also accepts "²" and other digits int() rejects
        stripped = value.strip()
        return stripped.isascii() and stripped.isdecimal()
    return False


def is_blank(value: Any) -> bool:
    """True for None, empty strings, zero and empty collections."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in ("", "0")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return not value
