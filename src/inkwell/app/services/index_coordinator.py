"""Keep every secondary index and the search index in step with the store.

Flow:
1) ``BlogService`` writes to the canonical store and raises a lifecycle event.
2) The blog's ``EventDispatcher`` calls the listeners built here, in order,
   on the writing thread. By the time the write returns, every index
   reflects it.
3) ``reindex`` throws all derived state away and rebuilds it from the store;
   its result matches what the incremental listeners maintain.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field

from inkwell.app.db.store import EntryStore
from inkwell.app.errors import ReindexError
from inkwell.app.index.base import SecondaryIndex
from inkwell.app.index.blog_entries import BlogEntryIndex
from inkwell.app.index.classifications import AuthorIndex, CategoryIndex, TagIndex
from inkwell.app.index.responses import ResponseIndex
from inkwell.app.index.search import SearchIndex, update_search_index
from inkwell.app.index.static_pages import StaticPageIndex
from inkwell.app.services.events import (
    BlogEntryEvent,
    BlogEntryListener,
    ResponseEvent,
    ResponseListener,
)

logger = logging.getLogger(__name__)


class SecondaryIndexListener(BlogEntryListener):
    """Apply entry lifecycle events to one entry-keyed secondary index."""

    def __init__(self, index: SecondaryIndex) -> None:
        self._index = index

    @property
    def index(self) -> SecondaryIndex:
        return self._index

    def entry_created(self, event: BlogEntryEvent) -> None:
        if event.current is not None:
            self._index.added(event.current)

    def entry_updated(self, event: BlogEntryEvent) -> None:
        if event.current is not None:
            self._index.changed(event.previous, event.current)

    def entry_deleted(self, event: BlogEntryEvent) -> None:
        self._index.discard(event.entry_id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._index.name})"


class ResponseIndexListener(BlogEntryListener, ResponseListener):
    """Apply moderation events to the response index.

    Also listens for deleted entries, whose responses the store removes
    with them.
    """

    def __init__(self, index: ResponseIndex) -> None:
        self._index = index

    def response_created(self, event: ResponseEvent) -> None:
        if event.current is not None:
            self._index.added(event.current)

    def response_moderated(self, event: ResponseEvent) -> None:
        if event.current is not None:
            self._index.changed(event.previous, event.current)

    def response_deleted(self, event: ResponseEvent) -> None:
        if event.previous is not None:
            self._index.removed(event.previous)
        else:
            self._index.discard(event.response_id)

    def entry_deleted(self, event: BlogEntryEvent) -> None:
        self._index.remove_for_entry(event.entry_id)

    def __repr__(self) -> str:
        return "ResponseIndexListener()"


class SearchIndexListener(BlogEntryListener):
    def __init__(self, search_index: SearchIndex) -> None:
        self._search_index = search_index

    def entry_created(self, event: BlogEntryEvent) -> None:
        if event.current is not None:
            self._search_index.add(event.current)

    def entry_updated(self, event: BlogEntryEvent) -> None:
        if event.current is not None:
            update_search_index(self._search_index, event.current)

    def entry_deleted(self, event: BlogEntryEvent) -> None:
        self._search_index.remove(event.entry_id)

    def __repr__(self) -> str:
        return "SearchIndexListener()"


@dataclass(slots=True)
class ReindexReport:
    blog_id: str
    entries: int = 0
    responses: int = 0
    static_pages: int = 0
    elapsed_ms: float = 0.0
    stages: list[str] = field(default_factory=list)


class IndexCoordinator:
    """Own a blog's secondary indexes and the listeners that maintain them."""

    def __init__(
        self,
        blog_id: str,
        store: EntryStore,
        search_index: SearchIndex,
    ) -> None:
        self._blog_id = blog_id
        self._store = store
        self._search_index = search_index
        self._reindex_lock = threading.Lock()
        self._indexed = False
        self.blog_entry_index = BlogEntryIndex()
        self.response_index = ResponseIndex()
        self.tag_index = TagIndex()
        self.category_index = CategoryIndex()
        self.author_index = AuthorIndex()
        self.static_page_index = StaticPageIndex()

    @property
    def search_index(self) -> SearchIndex:
        return self._search_index

    @property
    def is_indexed(self) -> bool:
        """Whether a full reindex has completed since the last failure."""

        return self._indexed

    @property
    def entry_indexes(self) -> tuple[SecondaryIndex, ...]:
        return (
            self.blog_entry_index,
            self.tag_index,
            self.category_index,
            self.author_index,
        )

    @property
    def indexes(self) -> tuple[SecondaryIndex, ...]:
        return (
            *self.entry_indexes,
            self.response_index,
            self.static_page_index,
        )

    def entry_listeners(self) -> list[BlogEntryListener]:
        """Built-in entry listeners, in dispatch order."""

        listeners: list[BlogEntryListener] = [
            SecondaryIndexListener(index) for index in self.entry_indexes
        ]
        listeners.append(ResponseIndexListener(self.response_index))
        listeners.append(SearchIndexListener(self._search_index))
        return listeners

    def response_listeners(self) -> list[ResponseListener]:
        return [ResponseIndexListener(self.response_index)]

    def clear(self) -> None:
        for index in self.indexes:
            index.clear()
        self._search_index.clear()
        self._indexed = False

    def reindex(self) -> ReindexReport:
        """Clear and rebuild every index from the canonical store.

        Raises :class:`ReindexError` if the store or the search engine fails;
        the indexes are then left cleared or partially rebuilt.
        """

        report = ReindexReport(blog_id=self._blog_id)
        started = time.perf_counter()
        with self._reindex_lock:
            stage = "clearing indexes"
            try:
                self.clear()
                report.stages.append(stage)

                stage = "loading blog entries"
                entries = list(self._store.load_all_entries())
                report.stages.append(stage)

                stage = "indexing blog entries"
                for index in self.entry_indexes:
                    index.index(entries)
                report.entries = len(entries)
                report.stages.append(stage)

                stage = "loading responses"
                responses = list(self._store.load_all_responses())
                report.stages.append(stage)

                stage = "indexing responses"
                self.response_index.index(responses)
                report.responses = len(responses)
                report.stages.append(stage)

                stage = "loading static pages"
                pages = list(self._store.load_all_static_pages())
                report.stages.append(stage)

                stage = "indexing static pages"
                self.static_page_index.index(pages)
                report.static_pages = len(pages)
                report.stages.append(stage)

                stage = "updating the search index"
                self._search_index.index_entries(entries)
                self._search_index.index_static_documents(pages)
                report.stages.append(stage)
            except Exception as exc:
                self._indexed = False
                logger.exception(
                    "Error reindexing blog %s while %s", self._blog_id, stage
                )
                raise ReindexError(self._blog_id, stage) from exc
            self._indexed = True

        report.elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "Reindexed blog %s: %d entries, %d responses, %d static pages in %.1fms",
            self._blog_id,
            report.entries,
            report.responses,
            report.static_pages,
            report.elapsed_ms,
        )
        return report

    def snapshot(self) -> dict[str, dict[str, tuple[str, ...]]]:
        """Bucket contents of every secondary index, keyed by index name."""

        return {index.name: index.snapshot() for index in self.indexes}


__all__ = [
    "IndexCoordinator",
    "ReindexReport",
    "ResponseIndexListener",
    "SearchIndexListener",
    "SecondaryIndexListener",
]
