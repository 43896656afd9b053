"""A blog: its content store, derived indexes, archive and helpers.

Every blog owns its own :class:`IndexCoordinator`, listener list,
:class:`MemoizedCache` and category tree; nothing is shared between blogs.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from inkwell.app.db.store import EntryStore, InMemoryEntryStore
from inkwell.app.index.classifications import TagSummary
from inkwell.app.index.search import InMemorySearchIndex, SearchIndex
from inkwell.app.models import BlogEntry, Response, StaticPage
from inkwell.app.services.archive import Archive, ArchiveBuilder
from inkwell.app.services.audit import AuditListener
from inkwell.app.services.blog_config import BlogConfig
from inkwell.app.services.categories import CategoryTree
from inkwell.app.services.clock import Clock, SystemClock, resolve_zone
from inkwell.app.services.entry_cache import EntryCache, EntryCacheListener
from inkwell.app.services.events import (
    BlogEntryEvent,
    BlogEntryListener,
    EventDispatcher,
    ResponseEvent,
    ResponseListener,
)
from inkwell.app.services.index_coordinator import IndexCoordinator, ReindexReport
from inkwell.app.services.memo_cache import MemoizedCache
from inkwell.app.services.plugins import ListenerRegistry
from inkwell.app.services.request_log import RequestLog
from inkwell.app.util.dates import SimpleDate
from inkwell.app.util.tags import canonicalize

logger = logging.getLogger(__name__)

ARCHIVE_CACHE_KEY = "archive"


class ArchiveResetListener(BlogEntryListener):
    """Drop the memoized archive whenever an entry changes."""

    def __init__(self, cache: MemoizedCache) -> None:
        self._cache = cache

    def entry_created(self, event: BlogEntryEvent) -> None:
        self._cache.reset(ARCHIVE_CACHE_KEY)

    def entry_updated(self, event: BlogEntryEvent) -> None:
        self._cache.reset(ARCHIVE_CACHE_KEY)

    def entry_deleted(self, event: BlogEntryEvent) -> None:
        self._cache.reset(ARCHIVE_CACHE_KEY)


class Blog:
    """Content collection with derived indexes and date navigation."""

    def __init__(
        self,
        config: BlogConfig | None = None,
        *,
        store: EntryStore | None = None,
        search_index: SearchIndex | None = None,
        clock: Clock | None = None,
        registry: ListenerRegistry | None = None,
    ) -> None:
        self._config = config or BlogConfig()
        self._id = self._config.blog_id
        self._store: EntryStore = store if store is not None else InMemoryEntryStore()
        self._zone = resolve_zone(self._config.timezone)
        self._clock: Clock = clock or SystemClock(self._config.timezone)
        self._cache = MemoizedCache(f"blog:{self._id}")
        self._indexes = IndexCoordinator(
            self._id,
            self._store,
            search_index if search_index is not None else InMemorySearchIndex(),
        )
        self._entry_cache = EntryCache(
            self._store.get_entry, maxsize=self._config.entry_cache_maxsize
        )
        self._categories = CategoryTree(self._config.name)
        self._request_log: RequestLog | None = None
        if self._config.request_log_enabled:
            self._request_log = RequestLog(
                self._config.request_log_directory, self._id
            )
        self._audit = AuditListener()
        self._write_lock = threading.RLock()

        registry = registry or ListenerRegistry.with_builtins()
        entry_listeners: list[BlogEntryListener] = [
            *self._indexes.entry_listeners(),
            EntryCacheListener(self._entry_cache),
            ArchiveResetListener(self._cache),
            self._audit,
            *registry.entry_listeners(self._config.entry_listeners),
        ]
        response_listeners: list[ResponseListener] = [
            *self._indexes.response_listeners(),
            self._audit,
            *registry.response_listeners(self._config.response_listeners),
        ]
        self._dispatcher = EventDispatcher(
            self._id,
            entry_listeners=entry_listeners,
            response_listeners=response_listeners,
        )

    # -- identity and collaborators -------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> BlogConfig:
        return self._config

    @property
    def store(self) -> EntryStore:
        return self._store

    @property
    def indexes(self) -> IndexCoordinator:
        return self._indexes

    @property
    def cache(self) -> MemoizedCache:
        return self._cache

    @property
    def entry_cache(self) -> EntryCache:
        return self._entry_cache

    @property
    def categories(self) -> CategoryTree:
        return self._categories

    @property
    def write_lock(self) -> threading.RLock:
        """Held across a store write and the event it raises."""

        return self._write_lock

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    @property
    def audit_trail(self) -> AuditListener:
        return self._audit

    @property
    def request_log(self) -> RequestLog | None:
        return self._request_log

    def today(self) -> SimpleDate:
        return self._clock.today()

    # -- lifecycle ----------------------------------------------------------

    def start(self) -> None:
        """Build the indexes unless they already exist or startup skips it."""

        if self._indexes.is_indexed:
            return
        if not self._config.reindex_on_start:
            logger.info("Skipping startup reindex for blog %s", self._id)
            return
        self.reindex()

    def reindex(self) -> ReindexReport:
        with self._write_lock:
            self._cache.reset_all()
            self._entry_cache.clear()
            report = self._indexes.reindex()
        for entry in self._store.load_all_entries():
            if entry.category:
                self._categories.add_category(entry.category)
        return report

    def fire_entry_event(self, event: BlogEntryEvent) -> None:
        self._dispatcher.fire_entry_event(event)

    def fire_response_event(self, event: ResponseEvent) -> None:
        self._dispatcher.fire_response_event(event)

    # -- archive ------------------------------------------------------------

    def get_archive(self) -> Archive:
        """Return the date archive, built at most once between writes."""

        return self._cache.get_or_compute(ARCHIVE_CACHE_KEY, self._build_archive)

    def _build_archive(self) -> Archive:
        archive = ArchiveBuilder.from_entries(
            self, self._store.load_all_entries(), tz=self._zone
        )
        logger.debug("Built archive for blog %s: %r", self._id, archive)
        return archive

    # -- entries ------------------------------------------------------------

    def get_blog_entry(self, entry_id: str) -> BlogEntry | None:
        return self._entry_cache.get(entry_id)

    def get_blog_entries(self, entry_ids: Iterable[str]) -> list[BlogEntry]:
        """Hydrate ``entry_ids`` in order, skipping ids the store no longer has."""

        entries = []
        for entry_id in entry_ids:
            entry = self._entry_cache.get(entry_id)
            if entry is not None:
                entries.append(entry)
        return entries

    def _recent(self, ids: Iterable[str], limit: int | None) -> list[BlogEntry]:
        count = self._config.recent_blog_entries_on_home_page if limit is None else limit
        selected = list(ids)[: max(count, 0)]
        return self.get_blog_entries(selected)

    def get_recent_blog_entries(self, limit: int | None = None) -> list[BlogEntry]:
        return self._recent(self._indexes.blog_entry_index.get_blog_entries(), limit)

    def get_recent_published_blog_entries(
        self,
        *,
        tag: str | None = None,
        category: str | None = None,
        author: str | None = None,
        limit: int | None = None,
    ) -> list[BlogEntry]:
        """Most recent published entries, optionally narrowed by one facet."""

        published = self._indexes.blog_entry_index.get_published_blog_entries()
        if tag is None and category is None and author is None:
            return self._recent(published, limit)

        if tag is not None:
            candidates = self._indexes.tag_index.get_recent_blog_entries(tag)
        elif category is not None:
            candidates = self._indexes.category_index.get_recent_blog_entries(category)
        else:
            candidates = self._indexes.author_index.get_recent_blog_entries(author or "")
        allowed = frozenset(published)
        return self._recent(
            (entry_id for entry_id in candidates if entry_id in allowed), limit
        )

    def get_previous_blog_entry(self, entry: BlogEntry | str) -> BlogEntry | None:
        entry_id = entry if isinstance(entry, str) else entry.id
        previous_id = self._indexes.blog_entry_index.get_previous_blog_entry(entry_id)
        return self.get_blog_entry(previous_id) if previous_id else None

    def get_next_blog_entry(self, entry: BlogEntry | str) -> BlogEntry | None:
        entry_id = entry if isinstance(entry, str) else entry.id
        next_id = self._indexes.blog_entry_index.get_next_blog_entry(entry_id)
        return self.get_blog_entry(next_id) if next_id else None

    def get_last_modified(self) -> datetime | None:
        """Date of the newest published entry, if any."""

        published = self._indexes.blog_entry_index.get_published_blog_entries()
        for entry_id in published:
            entry = self.get_blog_entry(entry_id)
            if entry is not None:
                return entry.date
        return None

    def get_number_of_blog_entries(self) -> int:
        return self._indexes.blog_entry_index.get_number_of_blog_entries()

    def get_number_of_published_blog_entries(self) -> int:
        return self._indexes.blog_entry_index.get_number_of_published_blog_entries()

    def get_number_of_unpublished_blog_entries(self) -> int:
        return self._indexes.blog_entry_index.get_number_of_unpublished_blog_entries()

    def get_tags(self) -> list[TagSummary]:
        return self._indexes.tag_index.get_tags()

    def get_tag(self, name: str) -> TagSummary | None:
        """Summary for one tag, looked up by any spelling that canonicalizes to it."""

        try:
            tag = canonicalize(name)
        except ValueError:
            return None
        return next((summary for summary in self.get_tags() if summary.name == tag), None)

    def get_authors(self) -> list[str]:
        return self._indexes.author_index.get_authors()

    # -- responses ----------------------------------------------------------

    def get_response(self, response_id: str) -> Response | None:
        return self._store.get_response(response_id)

    def get_recent_approved_responses(self, limit: int | None = None) -> list[Response]:
        count = self._config.recent_responses_on_home_page if limit is None else limit
        responses = []
        for response_id in self._indexes.response_index.get_approved_responses():
            if len(responses) >= count:
                break
            response = self._store.get_response(response_id)
            if response is not None:
                responses.append(response)
        return responses

    def get_date_of_last_response(self) -> datetime | None:
        """Date of the newest approved response, if any."""

        for response_id in self._indexes.response_index.get_approved_responses():
            response = self._store.get_response(response_id)
            if response is not None:
                return response.date
        return None

    def get_number_of_responses(self) -> int:
        return self._indexes.response_index.get_number_of_responses()

    # -- static pages and search -------------------------------------------

    def get_static_page(self, name: str) -> StaticPage | None:
        page_id = self._indexes.static_page_index.get_static_page(name)
        if page_id is None:
            return None
        return self._store.get_static_page(page_id)

    def search(self, query: str) -> list[str]:
        """Ids of entries and static pages matching ``query``."""

        return list(self._indexes.search_index.search(query))

    # -- request log --------------------------------------------------------

    def log_request(self, path: str, status: int, **details: object) -> Path | None:
        if self._request_log is None:
            return None
        return self._request_log.log(path, status, **details)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return f"Blog(id={self._id!r}, name={self._config.name!r})"


__all__ = ["ARCHIVE_CACHE_KEY", "ArchiveResetListener", "Blog"]
