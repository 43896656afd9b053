"""Full-text search index contract and a small in-memory implementation.

Ranking and tokenisation belong to the engine; the coordinator only relies
on the bulk, incremental and query calls declared by :class:`SearchIndex`.
"""

from __future__ import annotations

import logging
import re
import threading
from collections import Counter, defaultdict
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from inkwell.app.models import BlogEntry, StaticPage

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"\w+", re.UNICODE)


@runtime_checkable
class SearchIndex(Protocol):
    def index_entries(self, entries: Iterable[BlogEntry]) -> None: ...

    def index_static_documents(self, pages: Iterable[StaticPage]) -> None: ...

    def clear(self) -> None: ...

    def add(self, entry: BlogEntry) -> None: ...

    def remove(self, entry_id: str) -> None: ...

    def search(self, query: str) -> list[str]: ...


def update_search_index(index: SearchIndex, entry: BlogEntry) -> None:
    """Re-index ``entry``; engines without ``update`` get remove + add."""

    update = getattr(index, "update", None)
    if callable(update):
        update(entry)
        return
    index.remove(entry.id)
    index.add(entry)


def tokenize(*texts: str | None) -> Counter[str]:
    tokens: Counter[str] = Counter()
    for text in texts:
        if text:
            tokens.update(match.lower() for match in _TOKEN.findall(text))
    return tokens


class InMemorySearchIndex:
    """Token-frequency index over entry and static page text."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._documents: dict[str, Counter[str]] = {}
        self._postings: dict[str, set[str]] = defaultdict(set)

    def _put(self, doc_id: str, tokens: Counter[str]) -> None:
        self._drop(doc_id)
        self._documents[doc_id] = tokens
        for token in tokens:
            self._postings[token].add(doc_id)

    def _drop(self, doc_id: str) -> None:
        tokens = self._documents.pop(doc_id, None)
        if not tokens:
            return
        for token in tokens:
            postings = self._postings.get(token)
            if postings is None:
                continue
            postings.discard(doc_id)
            if not postings:
                del self._postings[token]

    @staticmethod
    def _entry_tokens(entry: BlogEntry) -> Counter[str]:
        return tokenize(
            entry.title, entry.body, entry.author, entry.category, *sorted(entry.tags)
        )

    def index_entries(self, entries: Iterable[BlogEntry]) -> None:
        with self._lock:
            for entry in entries:
                self._put(entry.id, self._entry_tokens(entry))

    def index_static_documents(self, pages: Iterable[StaticPage]) -> None:
        with self._lock:
            for page in pages:
                self._put(page.id, tokenize(page.name, page.title, page.body))

    def clear(self) -> None:
        with self._lock:
            self._documents = {}
            self._postings = defaultdict(set)

    def add(self, entry: BlogEntry) -> None:
        with self._lock:
            self._put(entry.id, self._entry_tokens(entry))

    def update(self, entry: BlogEntry) -> None:
        self.add(entry)

    def remove(self, entry_id: str) -> None:
        with self._lock:
            self._drop(entry_id)

    def search(self, query: str) -> list[str]:
        """Return ids matching every query token, best match first."""

        terms = list(tokenize(query))
        if not terms:
            return []
        with self._lock:
            candidates: set[str] | None = None
            for term in terms:
                postings = self._postings.get(term, set())
                candidates = set(postings) if candidates is None else candidates & postings
                if not candidates:
                    return []
            scored = [
                (sum(self._documents[doc_id][term] for term in terms), doc_id)
                for doc_id in candidates or ()
            ]
        scored.sort(key=lambda item: (-item[0], item[1]))
        return [doc_id for _, doc_id in scored]

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._documents

    def __len__(self) -> int:
        return len(self._documents)


__all__ = ["InMemorySearchIndex", "SearchIndex", "tokenize", "update_search_index"]
