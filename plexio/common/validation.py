"""Coercion helpers for loosely typed upstream payloads.

Every helper returns ``None`` when the value cannot be interpreted, so callers
can reject the enclosing record instead of propagating a half-typed object.
"""

from __future__ import annotations

import math
import re
from typing import Any

_TRUE_STRINGS = frozenset({"1", "true"})
_FALSE_STRINGS = frozenset({"0", "false"})
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)", re.ASCII)


def to_boolean(value: Any) -> bool | None:
    """Interpret booleans, ``"1"``/``"true"``/``"0"``/``"false"`` and ``1``/``0``."""

    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return None
    if isinstance(value, (int, float)):
        if value == 1:
            return True
        if value == 0:
            return False
    return None


def to_string_or_null(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def to_number_from_unknown(value: Any) -> int | float | None:
    """Return finite numbers as-is and read the leading base-10 integer of strings.

    Trailing text is ignored, so ``"32400abc"`` gives 32400 and ``"12.5"`` gives 12.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if match is None:
            return None
        return int(match.group(1), 10)
    return None


def to_non_negative_int(value: Any) -> int | None:
    """Coerce *value* to an integral, non-negative ``int`` (ports, counts)."""

    number = to_number_from_unknown(value)
    if number is None:
        return None
    if isinstance(number, float):
        if not number.is_integer():
            return None
        number = int(number)
    if number < 0:
        return None
    return number


__all__ = [
    "to_boolean",
    "to_string_or_null",
    "to_number_from_unknown",
    "to_non_negative_int",
]
