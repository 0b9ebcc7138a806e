"""Value helpers shared by the flow engine.

Response bodies and literals follow the JSON value model
(``None | bool | int | float | str | list | dict``). A value that could not be
found at all is represented by ``NOT_SET``, which is distinct from ``None``.
"""

from __future__ import annotations

import json
import math
from typing import Any


class NotSet:
    """Marker for a value that is absent, as opposed to ``None``."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<NOT_SET>"

    def __bool__(self) -> bool:
        return False


NOT_SET = NotSet()


def is_number(value: Any) -> bool:
    """Check for an int or float that is not a bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def stringify(value: Any) -> str:
    """Render a value the way it reads in flow files and assertion messages."""
    if value is NOT_SET:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


def to_number(value: Any) -> float:
    """Convert a value to a float for ordering comparisons.

    Values without a numeric reading become NaN, so every ordering
    comparison against them is false.
    """
    if value is NOT_SET:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    if isinstance(value, list):
        if not value:
            return 0.0
        if len(value) == 1:
            return to_number(stringify(value[0]))
    return math.nan


def strict_equals(actual: Any, expected: Any) -> bool:
    """Compare two values without type coercion.

    Numbers compare by value (``1 == 1.0``), but booleans never equal numbers
    and strings never equal numbers.
    """
    if actual is NOT_SET or expected is NOT_SET:
        return actual is expected
    if actual is None or expected is None:
        return actual is expected
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual == expected
    if is_number(actual) and is_number(expected):
        return actual == expected
    if type(actual) is not type(expected):
        return False
    return actual == expected


__all__ = [
    "NOT_SET",
    "NotSet",
    "is_number",
    "stringify",
    "strict_equals",
    "to_number",
]
