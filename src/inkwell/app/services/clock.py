from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from inkwell.app.util.dates import SimpleDate

logger = logging.getLogger(__name__)


class Clock(Protocol):
    def today(self) -> SimpleDate: ...


def resolve_zone(name: str) -> tzinfo:
    """Return the zone called ``name``, or UTC when it is unknown."""

    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone '%s'; falling back to UTC", name)
        return timezone.utc


class SystemClock:
    """Clock reading the current date in the blog's timezone."""

    def __init__(self, tz: str = "UTC") -> None:
        self._zone = resolve_zone(tz)

    @property
    def zone(self) -> tzinfo:
        return self._zone

    def today(self) -> SimpleDate:
        return SimpleDate.from_date(datetime.now(self._zone))


class FixedClock:
    """Clock pinned to one date."""

    def __init__(self, today: SimpleDate) -> None:
        self._today = today

    def today(self) -> SimpleDate:
        return self._today

    def set(self, today: SimpleDate) -> None:
        self._today = today


__all__ = ["Clock", "FixedClock", "SystemClock", "resolve_zone"]
