from __future__ import annotations

from datetime import datetime, timezone

from inkwell.app.index.search import (
    InMemorySearchIndex,
    SearchIndex,
    tokenize,
    update_search_index,
)
from inkwell.app.models import BlogEntry, StaticPage

WHEN = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _entry(entry_id: str, title: str, body: str = "") -> BlogEntry:
    return BlogEntry(id=entry_id, title=title, author="alice", date=WHEN, body=body)


class _AddRemoveOnly:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def index_entries(self, entries) -> None:
        pass

    def index_static_documents(self, pages) -> None:
        pass

    def clear(self) -> None:
        pass

    def add(self, entry: BlogEntry) -> None:
        self.calls.append(("add", entry.id))

    def remove(self, entry_id: str) -> None:
        self.calls.append(("remove", entry_id))

    def search(self, query: str) -> list[str]:
        return []


def test_tokenize_lowercases_and_counts() -> None:
    assert tokenize("Hello, hello world", None) == {"hello": 2, "world": 1}


def test_search_requires_every_term() -> None:
    index = InMemorySearchIndex()
    index.index_entries(
        [
            _entry("a", "Python threads", "locks and threads"),
            _entry("b", "Python asyncio"),
        ]
    )

    assert index.search("python threads") == ["a"]
    assert index.search("python") == ["a", "b"]
    assert index.search("rust") == []
    assert index.search("   ") == []


def test_search_covers_static_pages_and_removal() -> None:
    index = InMemorySearchIndex()
    index.index_static_documents(
        [StaticPage(id="p1", name="about", title="About me", author="alice")]
    )
    index.add(_entry("a", "About this blog"))

    assert sorted(index.search("about")) == ["a", "p1"]

    index.remove("a")
    assert index.search("about") == ["p1"]

    index.clear()
    assert len(index) == 0


def test_update_replaces_previous_text() -> None:
    index = InMemorySearchIndex()
    index.add(_entry("a", "Old title"))

    update_search_index(index, _entry("a", "New title"))

    assert index.search("old") == []
    assert index.search("new") == ["a"]


def test_update_falls_back_to_remove_and_add() -> None:
    engine = _AddRemoveOnly()
    assert isinstance(engine, SearchIndex)

    update_search_index(engine, _entry("a", "Title"))

    assert engine.calls == [("remove", "a"), ("add", "a")]
