"""Bounded cache of hydrated blog entries keyed by id."""

from __future__ import annotations

import threading
from collections.abc import Callable

from cachetools import LRUCache

from inkwell.app.models import BlogEntry
from inkwell.app.services.events import BlogEntryEvent, BlogEntryListener

_ENTRY_CACHE_LIMIT_FALLBACK = 512


class EntryCache:
    """LRU cache in front of the store's ``get_entry`` lookups."""

    __slots__ = ("_lock", "_entries", "_loader", "_generation", "_hits", "_misses")

    def __init__(
        self,
        loader: Callable[[str], BlogEntry | None],
        *,
        maxsize: int = _ENTRY_CACHE_LIMIT_FALLBACK,
    ) -> None:
        self._lock = threading.Lock()
        self._entries: LRUCache[str, BlogEntry] = LRUCache(maxsize=max(1, maxsize))
        self._loader = loader
        self._generation = 0
        self._hits = 0
        self._misses = 0

    def get(self, entry_id: str) -> BlogEntry | None:
        with self._lock:
            cached = self._entries.get(entry_id)
            if cached is not None:
                self._hits += 1
                return cached
            self._misses += 1
            generation = self._generation
        entry = self._loader(entry_id)
        if entry is not None:
            with self._lock:
                # Skip the fill if an eviction raced with the load.
                if generation == self._generation:
                    self._entries[entry_id] = entry
        return entry

    def evict(self, entry_id: str) -> None:
        with self._lock:
            self._generation += 1
            self._entries.pop(entry_id, None)

    def clear(self) -> None:
        with self._lock:
            self._generation += 1
            self._entries.clear()

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    def __len__(self) -> int:
        return len(self._entries)


class EntryCacheListener(BlogEntryListener):
    """Evict stale entries from the cache when they change."""

    def __init__(self, cache: EntryCache) -> None:
        self._cache = cache

    def entry_updated(self, event: BlogEntryEvent) -> None:
        self._cache.evict(event.entry_id)

    def entry_deleted(self, event: BlogEntryEvent) -> None:
        self._cache.evict(event.entry_id)


__all__ = ["EntryCache", "EntryCacheListener"]
