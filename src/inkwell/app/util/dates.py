"""Calendar value types shared by the archive and the clock."""

from __future__ import annotations

import calendar as _calendar
from dataclasses import dataclass
from datetime import date, datetime


def days_in_month(year: int, month: int) -> int:
    return _calendar.monthrange(year, month)[1]


def offset_month(year: int, month: int, delta: int) -> tuple[int, int]:
    total = (year * 12 + month - 1) + delta
    return total // 12, total % 12 + 1


@dataclass(frozen=True, slots=True, order=True)
class SimpleDate:
    """A calendar day without time or timezone."""

    year: int
    month: int
    day: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month out of range: {self.month}")
        if not 1 <= self.day <= days_in_month(self.year, self.month):
            raise ValueError(
                f"Day {self.day} is not valid for {self.year:04d}-{self.month:02d}"
            )

    @classmethod
    def from_date(cls, value: date | datetime) -> "SimpleDate":
        return cls(value.year, value.month, value.day)

    @classmethod
    def fromisoformat(cls, value: str) -> "SimpleDate":
        return cls.from_date(date.fromisoformat(value))

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    @property
    def last_day_in_month(self) -> int:
        return days_in_month(self.year, self.month)

    def __str__(self) -> str:
        return self.isoformat()


__all__ = ["SimpleDate", "days_in_month", "offset_month"]
