from __future__ import annotations

from inkwell.app.models import BlogEntry
from inkwell.app.services.entry_cache import EntryCache


def test_entry_cache_loads_once_and_evicts() -> None:
    loads: list[str] = []
    entries = {"a": BlogEntry(id="a", title="A", author="alice")}

    def loader(entry_id: str) -> BlogEntry | None:
        loads.append(entry_id)
        return entries.get(entry_id)

    cache = EntryCache(loader, maxsize=2)

    assert cache.get("a") is entries["a"]
    assert cache.get("a") is entries["a"]
    assert loads == ["a"]
    assert (cache.hits, cache.misses) == (1, 1)

    assert cache.get("missing") is None
    assert len(cache) == 1

    cache.evict("a")
    cache.get("a")
    assert loads == ["a", "missing", "a"]


def test_entry_cache_is_bounded() -> None:
    cache = EntryCache(lambda entry_id: BlogEntry(id=entry_id, title=entry_id, author="x"), maxsize=2)

    for entry_id in ("a", "b", "c"):
        cache.get(entry_id)

    assert len(cache) == 2
    cache.clear()
    assert len(cache) == 0
