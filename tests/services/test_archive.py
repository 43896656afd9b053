from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from inkwell.app.models import BlogEntry, PublishState
from inkwell.app.services.archive import (
    Archive,
    ArchiveBuilder,
    Day,
    DayItem,
    Month,
    Year,
)
from inkwell.app.services.clock import FixedClock
from inkwell.app.util.dates import SimpleDate

TODAY = SimpleDate(2024, 6, 15)


def _entry(
    entry_id: str,
    year: int,
    month: int,
    day: int,
    hour: int = 12,
    *,
    published: bool = True,
) -> BlogEntry:
    return BlogEntry(
        id=entry_id,
        title=entry_id,
        author="alice",
        date=datetime(year, month, day, hour, tzinfo=timezone.utc),
        state=PublishState.PUBLISHED if published else PublishState.UNPUBLISHED,
    )


def _archive(*entries: BlogEntry) -> Archive:
    return ArchiveBuilder.from_entries(FixedClock(TODAY), entries)


def test_empty_archive_is_total() -> None:
    archive = _archive()

    assert archive.years == []
    assert archive.number_of_blog_entries == 0

    year = archive.get_year(1999)
    assert year.year == 1999
    assert year.is_empty
    assert len(year.months) == 12

    first = archive.get_first_month()
    assert (first.year, first.month) == (2024, 6)
    assert first.is_empty
    assert not first.has_blog_entries()

    today = archive.get_today()
    assert today.date == TODAY
    assert today.is_empty
    assert archive.get_this_month().month == 6
    assert archive.get_this_year().year == 2024


def test_empty_buckets_are_fresh_instances() -> None:
    archive = _archive()

    assert archive.get_day(2024, 1, 1) == archive.get_day(SimpleDate(2024, 1, 1))
    assert archive.get_year(2000) is not archive.get_year(2001)
    with pytest.raises(AttributeError):
        archive.get_year(2000).year = 2001  # type: ignore[misc]


def test_previous_month_wraps_to_december() -> None:
    archive = _archive(_entry("a", 2023, 12, 24))

    previous = archive.get_previous_month(archive.get_month(2024, 1))

    assert (previous.year, previous.month) == (2023, 12)
    assert previous.has_blog_entries()


def test_next_month_wraps_to_january() -> None:
    archive = _archive(_entry("a", 2023, 5, 2))

    following = archive.get_next_month(archive.get_month(2023, 12))

    assert (following.year, following.month) == (2024, 1)
    assert following.is_empty


@pytest.mark.parametrize(
    ("start", "expected"),
    [
        (SimpleDate(2024, 3, 1), SimpleDate(2024, 2, 29)),
        (SimpleDate(2023, 3, 1), SimpleDate(2023, 2, 28)),
        (SimpleDate(2024, 1, 1), SimpleDate(2023, 12, 31)),
        (SimpleDate(2024, 5, 1), SimpleDate(2024, 4, 30)),
        (SimpleDate(2024, 5, 17), SimpleDate(2024, 5, 16)),
    ],
)
def test_previous_day_uses_calendar_length(start: SimpleDate, expected: SimpleDate) -> None:
    archive = _archive()

    assert archive.get_previous_day(archive.get_day(start)).date == expected


@pytest.mark.parametrize(
    ("start", "expected"),
    [
        (SimpleDate(2024, 2, 29), SimpleDate(2024, 3, 1)),
        (SimpleDate(2024, 2, 28), SimpleDate(2024, 2, 29)),
        (SimpleDate(2023, 2, 28), SimpleDate(2023, 3, 1)),
        (SimpleDate(2023, 12, 31), SimpleDate(2024, 1, 1)),
        (SimpleDate(2024, 4, 30), SimpleDate(2024, 5, 1)),
    ],
)
def test_next_day_uses_calendar_length(start: SimpleDate, expected: SimpleDate) -> None:
    archive = _archive()

    assert archive.get_next_day(archive.get_day(start)).date == expected


def test_day_lists_entries_newest_first() -> None:
    archive = _archive(
        _entry("morning", 2024, 2, 29, 8),
        _entry("evening", 2024, 2, 29, 20, published=False),
        _entry("noon", 2024, 2, 29, 12),
    )

    day = archive.get_day(2024, 2, 29)

    assert day.entry_ids == ("evening", "noon", "morning")
    assert day.published_ids == ("noon", "morning")
    assert "noon" in day
    assert archive.number_of_blog_entries == 3
    assert archive.number_of_published_blog_entries == 2
    assert archive.number_of_unpublished_blog_entries == 1


def test_years_are_exposed_newest_first() -> None:
    archive = _archive(
        _entry("a", 2021, 3, 1),
        _entry("b", 2023, 7, 1),
        _entry("c", 2022, 1, 1),
    )

    assert [year.year for year in archive.years] == [2023, 2022, 2021]
    assert [month.month for month in archive.get_year(2023).get_archives()] == [7]


def test_first_month_scans_chronologically() -> None:
    archive = _archive(
        _entry("late", 2023, 11, 5),
        _entry("early", 2022, 8, 9),
        _entry("middle", 2023, 2, 1),
    )

    first = archive.get_first_month()

    assert (first.year, first.month) == (2022, 8)


def test_only_days_with_entries_materialize() -> None:
    archive = _archive(_entry("a", 2024, 4, 10), _entry("b", 2024, 4, 20))

    month = archive.get_month(2024, 4)

    assert [day.day for day in month.days] == [10, 20]
    assert month.entry_ids == ("b", "a")
    assert month.get_day(15).is_empty
    assert month.last_day_in_month == 30


def test_builder_shares_untouched_nodes() -> None:
    clock = FixedClock(TODAY)
    original = ArchiveBuilder.from_entries(
        clock, [_entry("old", 2022, 3, 4), _entry("a", 2024, 5, 1)]
    )

    updated = Archive.builder(original).add_entry(_entry("b", 2024, 5, 2)).build()

    assert updated.get_year(2022) is original.get_year(2022)
    assert updated.get_month(2024, 1) is original.get_month(2024, 1)
    assert updated.get_day(2024, 5, 1) is original.get_day(2024, 5, 1)
    assert updated.get_month(2024, 5) is not original.get_month(2024, 5)
    assert updated.get_day(2024, 5, 2).entry_ids == ("b",)
    assert original.get_day(2024, 5, 2).is_empty
    assert updated.number_of_blog_entries == 3
    assert original.number_of_blog_entries == 2


def test_builder_remove_entry_drops_empty_years() -> None:
    entry = _entry("a", 2020, 1, 1)
    archive = _archive(entry, _entry("b", 2024, 1, 1))

    updated = Archive.builder(archive).remove_entry(entry).build()

    assert [year.year for year in updated.years] == [2024]
    assert updated.number_of_published_blog_entries == 1


def test_builder_re_adding_entry_replaces_it() -> None:
    entry = _entry("a", 2024, 1, 1, published=False)
    archive = _archive(entry)

    updated = (
        Archive.builder(archive)
        .add_entry(replace(entry, state=PublishState.PUBLISHED))
        .build()
    )

    assert updated.number_of_blog_entries == 1
    assert updated.number_of_published_blog_entries == 1
    assert updated.number_of_unpublished_blog_entries == 0


def test_builder_with_semantics_override_years_and_counts() -> None:
    clock = FixedClock(TODAY)
    seed = _archive(_entry("a", 2024, 1, 1))
    replacement = Year.empty(2010).with_month(
        Month.empty(2010, 3).with_day(
            Day.empty(2010, 3, 3).with_item(
                DayItem(datetime(2010, 3, 3, tzinfo=timezone.utc), "x", True)
            )
        )
    )

    archive = (
        Archive.builder(seed)
        .set_years([replacement])
        .set_number_of_blog_entries(1)
        .set_number_of_published_blog_entries(1)
        .set_number_of_unpublished_blog_entries(0)
        .build()
    )

    assert [year.year for year in archive.years] == [2010]
    assert archive.get_day(2010, 3, 3).entry_ids == ("x",)
    assert archive.number_of_blog_entries == 1
    assert archive.owner is seed.owner
    assert isinstance(Archive.builder(clock), ArchiveBuilder)


def test_duplicate_years_are_rejected() -> None:
    builder = ArchiveBuilder(FixedClock(TODAY))

    with pytest.raises(ValueError):
        builder.set_years([Year.empty(2020), Year.empty(2020)])



def test_builder_files_entries_under_zone_day_and_keeps_zone() -> None:
    auckland = ZoneInfo("Pacific/Auckland")
    late = _entry("late", 2024, 6, 14, hour=20)

    archive = ArchiveBuilder.from_entries(FixedClock(TODAY), [late], tz=auckland)

    assert archive.tz is auckland
    assert archive.get_day(2024, 6, 15).entry_ids == ("late",)
    assert archive.get_day(2024, 6, 14).is_empty

    updated = Archive.builder(archive).remove_entry(late).build()
    assert updated.tz is auckland
    assert updated.number_of_blog_entries == 0
    assert updated.get_day(2024, 6, 15).is_empty


def test_builder_defaults_to_utc_days() -> None:
    archive = _archive(_entry("late", 2024, 6, 14, hour=20))

    assert archive.tz is timezone.utc
    assert archive.get_day(2024, 6, 14).entry_ids == ("late",)
