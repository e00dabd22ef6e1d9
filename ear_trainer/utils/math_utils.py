"""Small math helpers."""

from __future__ import annotations


def clamp(value: float, min_value: float, max_value: float) -> float:
    """Return *value* limited to the inclusive range [min_value, max_value]."""
    if value < min_value:
        return min_value
    if value > max_value:
        return max_value
    return value


def to_float(value: object, default: float) -> float:
    """Coerce user input to float, returning *default* for non-numeric values."""
    if isinstance(value, bool):
        return default
    try:
        result = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if result != result:  # NaN
        return default
    return result
