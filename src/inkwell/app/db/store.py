"""Canonical entry store contract and an in-memory implementation."""

from __future__ import annotations

import logging
import threading
from typing import Protocol, runtime_checkable

from inkwell.app.models import BlogEntry, Response, StaticPage

logger = logging.getLogger(__name__)


@runtime_checkable
class EntryStore(Protocol):
    """The minimal persistence contract the indexes rely on.

    ``load_all_*`` must return the full current truth for one blog; partial
    or paginated loads are not supported.
    """

    def load_all_entries(self) -> list[BlogEntry]: ...

    def load_all_responses(self) -> list[Response]: ...

    def load_all_static_pages(self) -> list[StaticPage]: ...

    def get_entry(self, entry_id: str) -> BlogEntry | None: ...

    def get_response(self, response_id: str) -> Response | None: ...

    def get_static_page(self, page_id: str) -> StaticPage | None: ...

    def store_entry(self, entry: BlogEntry) -> BlogEntry | None: ...

    def remove_entry(self, entry_id: str) -> tuple[BlogEntry | None, list[Response]]: ...

    def store_response(self, response: Response) -> Response | None: ...

    def remove_response(self, response_id: str) -> Response | None: ...

    def store_static_page(self, page: StaticPage) -> StaticPage | None: ...


class InMemoryEntryStore:
    """Thread-safe dictionary-backed store.

    Removing an entry cascades to its responses. ``store_*`` methods return
    the version they replaced, or ``None`` for a new entity.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._entries: dict[str, BlogEntry] = {}
        self._responses: dict[str, Response] = {}
        self._pages: dict[str, StaticPage] = {}

    def load_all_entries(self) -> list[BlogEntry]:
        with self._lock:
            entries = list(self._entries.values())
        entries.sort(key=lambda entry: entry.order_key, reverse=True)
        return entries

    def load_all_responses(self) -> list[Response]:
        with self._lock:
            responses = list(self._responses.values())
        responses.sort(key=lambda response: response.order_key, reverse=True)
        return responses

    def load_all_static_pages(self) -> list[StaticPage]:
        with self._lock:
            return sorted(self._pages.values(), key=lambda page: page.name)

    def get_entry(self, entry_id: str) -> BlogEntry | None:
        return self._entries.get(entry_id)

    def get_response(self, response_id: str) -> Response | None:
        return self._responses.get(response_id)

    def get_static_page(self, page_id: str) -> StaticPage | None:
        return self._pages.get(page_id)

    def store_entry(self, entry: BlogEntry) -> BlogEntry | None:
        with self._lock:
            previous = self._entries.get(entry.id)
            self._entries[entry.id] = entry
        return previous

    def remove_entry(self, entry_id: str) -> tuple[BlogEntry | None, list[Response]]:
        with self._lock:
            entry = self._entries.pop(entry_id, None)
            orphans = [
                response
                for response in self._responses.values()
                if response.entry_id == entry_id
            ]
            for response in orphans:
                del self._responses[response.id]
        if orphans:
            logger.debug(
                "Removed %d responses with entry %s", len(orphans), entry_id
            )
        return entry, orphans

    def store_response(self, response: Response) -> Response | None:
        with self._lock:
            if response.entry_id not in self._entries:
                raise KeyError(response.entry_id)
            previous = self._responses.get(response.id)
            self._responses[response.id] = response
        return previous

    def remove_response(self, response_id: str) -> Response | None:
        with self._lock:
            return self._responses.pop(response_id, None)

    def store_static_page(self, page: StaticPage) -> StaticPage | None:
        with self._lock:
            previous = self._pages.get(page.id)
            self._pages[page.id] = page
        return previous


__all__ = ["EntryStore", "InMemoryEntryStore"]
