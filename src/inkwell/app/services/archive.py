"""Date-based navigation over a blog's entries: Archive -> Year -> Month -> Day.

Every node is an immutable snapshot. Lookups for periods without content
return freshly synthesized empty buckets (``is_empty`` is true) rather than
``None``, so callers rendering previous/next links never branch on missing
values. Updates go through :class:`ArchiveBuilder`, which replaces only the
nodes on the path to the changed day and shares every other node with the
archive it was seeded from.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import NamedTuple, Protocol

from inkwell.app.models import BlogEntry
from inkwell.app.util.dates import SimpleDate, days_in_month, offset_month

logger = logging.getLogger(__name__)


class Today(Protocol):
    def today(self) -> SimpleDate: ...


class DayItem(NamedTuple):
    date: datetime
    id: str
    published: bool


@dataclass(frozen=True, slots=True)
class Day:
    """Entries written on one calendar day, newest first."""

    date: SimpleDate
    items: tuple[DayItem, ...] = ()

    @classmethod
    def empty(cls, year: int, month: int, day: int) -> "Day":
        return cls(SimpleDate(year, month, day))

    @property
    def year(self) -> int:
        return self.date.year

    @property
    def month(self) -> int:
        return self.date.month

    @property
    def day(self) -> int:
        return self.date.day

    @property
    def is_empty(self) -> bool:
        return not self.items

    def has_blog_entries(self) -> bool:
        return bool(self.items)

    @property
    def entry_ids(self) -> tuple[str, ...]:
        return tuple(item.id for item in self.items)

    @property
    def published_ids(self) -> tuple[str, ...]:
        return tuple(item.id for item in self.items if item.published)

    @property
    def number_of_blog_entries(self) -> int:
        return len(self.items)

    def __contains__(self, entry_id: object) -> bool:
        return any(item.id == entry_id for item in self.items)

    def with_item(self, item: DayItem) -> "Day":
        items = [existing for existing in self.items if existing.id != item.id]
        items.append(item)
        items.sort(key=lambda value: (value.date, value.id), reverse=True)
        return Day(self.date, tuple(items))

    def without(self, entry_id: str) -> "Day":
        return Day(
            self.date, tuple(item for item in self.items if item.id != entry_id)
        )


@dataclass(frozen=True, slots=True)
class Month:
    """Days of one calendar month; only days with entries are stored."""

    year: int
    month: int
    days: tuple[Day, ...] = ()

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month out of range: {self.month}")

    @classmethod
    def empty(cls, year: int, month: int) -> "Month":
        return cls(year, month)

    @property
    def is_empty(self) -> bool:
        return not self.days

    def has_blog_entries(self) -> bool:
        return any(day.has_blog_entries() for day in self.days)

    @property
    def last_day_in_month(self) -> int:
        return days_in_month(self.year, self.month)

    def get_day(self, day: int) -> Day:
        for existing in self.days:
            if existing.day == day:
                return existing
        return Day.empty(self.year, self.month, day)

    def first_day(self) -> Day:
        return self.get_day(1)

    def last_day(self) -> Day:
        return self.get_day(self.last_day_in_month)

    @property
    def entry_ids(self) -> tuple[str, ...]:
        """All entry ids in the month, newest first."""

        ids: list[str] = []
        for day in reversed(self.days):
            ids.extend(day.entry_ids)
        return tuple(ids)

    @property
    def number_of_blog_entries(self) -> int:
        return sum(day.number_of_blog_entries for day in self.days)

    def with_day(self, day: Day) -> "Month":
        days = [existing for existing in self.days if existing.day != day.day]
        if day.has_blog_entries():
            days.append(day)
        days.sort(key=lambda value: value.day)
        return Month(self.year, self.month, tuple(days))


@dataclass(frozen=True, slots=True)
class Year:
    """The twelve month slots of one year."""

    year: int
    months: tuple[Month, ...]

    def __post_init__(self) -> None:
        if len(self.months) != 12:
            raise ValueError(f"Year {self.year} must have 12 month slots")

    @classmethod
    def empty(cls, year: int) -> "Year":
        return cls(year, tuple(Month.empty(year, month) for month in range(1, 13)))

    @property
    def is_empty(self) -> bool:
        return all(month.is_empty for month in self.months)

    def has_blog_entries(self) -> bool:
        return any(month.has_blog_entries() for month in self.months)

    def get_month(self, month: int) -> Month:
        if not 1 <= month <= 12:
            raise ValueError(f"Month out of range: {month}")
        return self.months[month - 1]

    def get_archives(self) -> list[Month]:
        """Months that contain entries, newest first."""

        return [month for month in reversed(self.months) if month.has_blog_entries()]

    @property
    def number_of_blog_entries(self) -> int:
        return sum(month.number_of_blog_entries for month in self.months)

    def with_month(self, month: Month) -> "Year":
        months = list(self.months)
        months[month.month - 1] = month
        return Year(self.year, tuple(months))


class Archive:
    """Immutable rollup of a blog's years with day/month/year navigation."""

    __slots__ = (
        "_owner",
        "_tz",
        "_years",
        "_by_number",
        "_number_of_blog_entries",
        "_number_of_published_blog_entries",
        "_number_of_unpublished_blog_entries",
    )

    def __init__(
        self,
        owner: Today,
        years: Iterable[Year],
        number_of_blog_entries: int,
        number_of_published_blog_entries: int,
        number_of_unpublished_blog_entries: int,
        *,
        tz: tzinfo | None = None,
    ) -> None:
        ordered = tuple(sorted(years, key=lambda year: year.year))
        by_number = {year.year: year for year in ordered}
        if len(by_number) != len(ordered):
            raise ValueError("Archive years must have distinct year numbers")
        self._owner = owner
        self._tz = tz or timezone.utc
        self._years = ordered
        self._by_number = by_number
        self._number_of_blog_entries = number_of_blog_entries
        self._number_of_published_blog_entries = number_of_published_blog_entries
        self._number_of_unpublished_blog_entries = number_of_unpublished_blog_entries

    @staticmethod
    def builder(seed: "Today | Archive") -> "ArchiveBuilder":
        """Start a builder from scratch, or from an existing archive."""

        if isinstance(seed, Archive):
            return ArchiveBuilder.like(seed)
        return ArchiveBuilder(seed)

    @property
    def owner(self) -> Today:
        return self._owner

    @property
    def tz(self) -> tzinfo:
        """Zone whose calendar days the entries are filed under."""

        return self._tz

    @property
    def years(self) -> list[Year]:
        """Years in the archive, newest first."""

        return list(reversed(self._years))

    @property
    def number_of_blog_entries(self) -> int:
        return self._number_of_blog_entries

    @property
    def number_of_published_blog_entries(self) -> int:
        return self._number_of_published_blog_entries

    @property
    def number_of_unpublished_blog_entries(self) -> int:
        return self._number_of_unpublished_blog_entries

    def get_year(self, year: int) -> Year:
        existing = self._by_number.get(year)
        if existing is not None:
            return existing
        return Year.empty(year)

    def get_first_month(self) -> Month:
        """Return the earliest month with entries, or an empty current month."""

        for year in self._years:
            for month in year.months:
                if month.has_blog_entries():
                    return month
        today = self._owner.today()
        return Month.empty(today.year, today.month)

    def get_month(self, year: int, month: int) -> Month:
        return self.get_year(year).get_month(month)

    def get_previous_month(self, month: Month) -> Month:
        return self.get_month(*offset_month(month.year, month.month, -1))

    def get_next_month(self, month: Month) -> Month:
        return self.get_month(*offset_month(month.year, month.month, 1))

    def get_previous_day(self, day: Day) -> Day:
        month = self.get_month(day.year, day.month)
        if day.day <= 1:
            return self.get_previous_month(month).last_day()
        return month.get_day(day.day - 1)

    def get_next_day(self, day: Day) -> Day:
        month = self.get_month(day.year, day.month)
        if day.day >= month.last_day_in_month:
            return self.get_next_month(month).first_day()
        return month.get_day(day.day + 1)

    def get_day(self, date: SimpleDate | int, month: int | None = None, day: int | None = None) -> Day:
        """Return the day for a :class:`SimpleDate` or a ``(year, month, day)`` triple."""

        if isinstance(date, SimpleDate):
            year, month, day = date.year, date.month, date.day
        else:
            if month is None or day is None:
                raise TypeError("get_day() needs a SimpleDate or year, month and day")
            year = date
        return self.get_year(year).get_month(month).get_day(day)

    def get_today(self) -> Day:
        return self.get_day(self._owner.today())

    def get_this_month(self) -> Month:
        today = self._owner.today()
        return self.get_month(today.year, today.month)

    def get_this_year(self) -> Year:
        return self.get_year(self._owner.today().year)

    def __repr__(self) -> str:
        return (
            f"Archive(years={[year.year for year in self._years]}, "
            f"entries={self._number_of_blog_entries})"
        )


class ArchiveBuilder:
    """Assemble an :class:`Archive`, reusing unchanged nodes of a seed archive."""

    def __init__(self, owner: Today, *, tz: tzinfo | None = None) -> None:
        self._owner = owner
        self._tz = tz or timezone.utc
        self._years: dict[int, Year] = {}
        self._number_of_blog_entries = 0
        self._number_of_published_blog_entries = 0
        self._number_of_unpublished_blog_entries = 0

    @classmethod
    def like(cls, archive: Archive) -> "ArchiveBuilder":
        builder = cls(archive.owner, tz=archive.tz)
        builder._years = {year.year: year for year in archive.years}
        builder._number_of_blog_entries = archive.number_of_blog_entries
        builder._number_of_published_blog_entries = (
            archive.number_of_published_blog_entries
        )
        builder._number_of_unpublished_blog_entries = (
            archive.number_of_unpublished_blog_entries
        )
        return builder

    @classmethod
    def from_entries(
        cls,
        owner: Today,
        entries: Iterable[BlogEntry],
        *,
        tz: tzinfo | None = None,
    ) -> Archive:
        builder = cls(owner, tz=tz)
        for entry in entries:
            builder.add_entry(entry)
        return builder.build()

    def set_years(self, years: Iterable[Year]) -> "ArchiveBuilder":
        self._years = {}
        for year in years:
            if year.year in self._years:
                raise ValueError(f"Duplicate year {year.year}")
            self._years[year.year] = year
        return self

    def set_number_of_blog_entries(self, value: int) -> "ArchiveBuilder":
        self._number_of_blog_entries = value
        return self

    def set_number_of_published_blog_entries(self, value: int) -> "ArchiveBuilder":
        self._number_of_published_blog_entries = value
        return self

    def set_number_of_unpublished_blog_entries(self, value: int) -> "ArchiveBuilder":
        self._number_of_unpublished_blog_entries = value
        return self

    def _replace_day(self, day: Day) -> None:
        year = self._years.get(day.year) or Year.empty(day.year)
        month = year.get_month(day.month).with_day(day)
        updated = year.with_month(month)
        if updated.is_empty:
            self._years.pop(day.year, None)
        else:
            self._years[day.year] = updated

    def _current_day(self, date: SimpleDate) -> Day:
        year = self._years.get(date.year)
        if year is None:
            return Day(date)
        return year.get_month(date.month).get_day(date.day)

    def _day_of(self, entry: BlogEntry) -> Day:
        return self._current_day(entry.simple_date_in(self._tz))

    def add_entry(self, entry: BlogEntry) -> "ArchiveBuilder":
        day = self._day_of(entry)
        if entry.id in day:
            self.remove_entry(entry)
            day = self._day_of(entry)
        self._replace_day(day.with_item(DayItem(entry.date, entry.id, entry.is_published)))
        self._number_of_blog_entries += 1
        if entry.is_published:
            self._number_of_published_blog_entries += 1
        else:
            self._number_of_unpublished_blog_entries += 1
        return self

    def remove_entry(self, entry: BlogEntry) -> "ArchiveBuilder":
        day = self._day_of(entry)
        existing = next((item for item in day.items if item.id == entry.id), None)
        if existing is None:
            logger.debug("Entry %s not in archive day %s", entry.id, day.date)
            return self
        self._replace_day(day.without(entry.id))
        self._number_of_blog_entries -= 1
        if existing.published:
            self._number_of_published_blog_entries -= 1
        else:
            self._number_of_unpublished_blog_entries -= 1
        return self

    def build(self) -> Archive:
        return Archive(
            self._owner,
            self._years.values(),
            self._number_of_blog_entries,
            self._number_of_published_blog_entries,
            self._number_of_unpublished_blog_entries,
            tz=self._tz,
        )


__all__ = ["Archive", "ArchiveBuilder", "Day", "DayItem", "Month", "Year"]
