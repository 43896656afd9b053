from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from inkwell.app.index.blog_entries import BlogEntryIndex
from inkwell.app.models import BlogEntry, PublishState

BASE = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _entry(
    entry_id: str,
    minutes: int = 0,
    *,
    published: bool = True,
) -> BlogEntry:
    return BlogEntry(
        id=entry_id,
        title=f"Entry {entry_id}",
        author="alice",
        date=BASE + timedelta(minutes=minutes),
        state=PublishState.PUBLISHED if published else PublishState.UNPUBLISHED,
    )


def test_empty_index_answers_every_query() -> None:
    index = BlogEntryIndex()

    assert index.get_blog_entries() == ()
    assert index.get_published_blog_entries() == ()
    assert index.get_number_of_blog_entries() == 0
    assert index.get_previous_blog_entry("missing") is None
    assert index.get_next_blog_entry("missing") is None
    index.clear()
    assert len(index) == 0


def test_added_entries_are_ordered_newest_first() -> None:
    index = BlogEntryIndex()
    index.added(_entry("b", 10))
    index.added(_entry("a", 0))
    index.added(_entry("c", 20, published=False))

    assert index.get_blog_entries() == ("c", "b", "a")
    assert index.get_published_blog_entries() == ("b", "a")
    assert index.get_unpublished_blog_entries() == ("c",)
    assert index.get_number_of_published_blog_entries() == 2
    assert index.get_number_of_unpublished_blog_entries() == 1


def test_same_timestamp_breaks_ties_by_id() -> None:
    index = BlogEntryIndex()
    index.added(_entry("a", 0))
    index.added(_entry("b", 0))

    assert index.get_blog_entries() == ("b", "a")


def test_publishing_moves_entry_between_buckets() -> None:
    index = BlogEntryIndex()
    draft = _entry("a", 0, published=False)
    index.added(draft)

    published = replace(draft, state=PublishState.PUBLISHED)
    index.changed(draft, published)

    assert index.get_published_blog_entries() == ("a",)
    assert index.get_unpublished_blog_entries() == ()
    assert index.get_blog_entries() == ("a",)
    assert index.keys_of("a") == frozenset({"all", "published"})


def test_changing_date_resettles_order() -> None:
    index = BlogEntryIndex()
    first = _entry("a", 0)
    index.added(first)
    index.added(_entry("b", 10))

    index.changed(first, replace(first, date=BASE + timedelta(minutes=30)))

    assert index.get_blog_entries() == ("a", "b")
    assert index.get_published_blog_entries() == ("a", "b")


def test_removed_entry_leaves_every_bucket() -> None:
    index = BlogEntryIndex()
    entry = _entry("a")
    index.added(entry)
    index.removed(entry)

    assert index.get_blog_entries() == ()
    assert "a" not in index
    assert index.keys() == []


@pytest.mark.parametrize(
    ("entry_id", "previous", "following"),
    [
        ("c", "b", None),
        ("b", "a", "c"),
        ("a", None, "b"),
        ("draft", None, None),
    ],
)
def test_previous_and_next_walk_published_entries(
    entry_id: str, previous: str | None, following: str | None
) -> None:
    index = BlogEntryIndex()
    index.index(
        [
            _entry("a", 0),
            _entry("b", 10),
            _entry("draft", 15, published=False),
            _entry("c", 20),
        ]
    )

    assert index.get_previous_blog_entry(entry_id) == previous
    assert index.get_next_blog_entry(entry_id) == following


def test_readers_keep_their_snapshot_during_writes() -> None:
    index = BlogEntryIndex()
    index.added(_entry("a", 0))
    before = index.get_blog_entries()

    index.added(_entry("b", 10))

    assert before == ("a",)
    assert index.get_blog_entries() == ("b", "a")


def test_low_level_mutators_report_changes() -> None:
    index = BlogEntryIndex()
    order = (BASE, "a")

    assert index.add("published", "a", order) is True
    assert index.add("published", "a", order) is False
    assert index.count("published") == 1

    index.move("published", "unpublished", "a", order)
    assert index.get("published") == ()
    assert index.get("unpublished") == ("a",)

    assert index.remove("unpublished", "a") is True
    assert index.remove("unpublished", "a") is False
    assert index.get("nonexistent") == ()
