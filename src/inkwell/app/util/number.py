"""Small helpers for numeric settings parsing."""

from __future__ import annotations


def coerce_int(
    value: object | None,
    *,
    default: int | None = None,
    minimum: int | None = None,
) -> int | None:
    """Return an int parsed from ``value`` or ``default`` when invalid."""

    if value is None:
        return default
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    if minimum is not None and parsed < minimum:
        return default
    return parsed


__all__ = ["coerce_int"]
