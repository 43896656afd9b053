"""Tag, category, and author indexes over blog entries."""

from __future__ import annotations

import math
from dataclasses import dataclass

from inkwell.app.index.base import SecondaryIndex
from inkwell.app.models import BlogEntry, normalize_category
from inkwell.app.util.tags import canonicalize

MAX_TAG_RANK = 10


@dataclass(frozen=True, slots=True)
class TagSummary:
    name: str
    count: int
    rank: int


class TagIndex(SecondaryIndex[BlogEntry]):
    """Index of blog entry ids by canonical tag."""

    name = "tags"

    def keys_for(self, item: BlogEntry) -> frozenset[str]:
        return item.tags

    def get_recent_blog_entries(self, tag: str) -> tuple[str, ...]:
        try:
            return self.get(canonicalize(tag))
        except ValueError:
            return ()

    def get_tags(self) -> list[TagSummary]:
        """Return every tag in use with its entry count and a 1-10 rank."""

        buckets = self.snapshot()
        if not buckets:
            return []
        most = max(len(ids) for ids in buckets.values())
        return [
            TagSummary(
                name=name,
                count=len(ids),
                rank=max(1, math.ceil(len(ids) / most * MAX_TAG_RANK)),
            )
            for name, ids in sorted(buckets.items())
        ]


def category_lineage(category: str | None) -> frozenset[str]:
    """Return ``category`` and all of its ancestors, excluding the root."""

    path = normalize_category(category)
    if path is None:
        return frozenset()
    parts = path.strip("/").split("/")
    return frozenset("/" + "/".join(parts[: depth + 1]) for depth in range(len(parts)))


class CategoryIndex(SecondaryIndex[BlogEntry]):
    """Index of blog entry ids by category path.

    An entry filed under ``/tech/python`` is also listed under ``/tech`` so
    that a parent category shows its descendants' entries.
    """

    name = "categories"

    def keys_for(self, item: BlogEntry) -> frozenset[str]:
        return category_lineage(item.category)

    def get_recent_blog_entries(self, category: str) -> tuple[str, ...]:
        path = normalize_category(category)
        if path is None:
            return ()
        return self.get(path)


class AuthorIndex(SecondaryIndex[BlogEntry]):
    """Index of blog entry ids by author username."""

    name = "authors"

    def keys_for(self, item: BlogEntry) -> frozenset[str]:
        author = (item.author or "").strip()
        return frozenset((author,)) if author else frozenset()

    def get_recent_blog_entries(self, author: str) -> tuple[str, ...]:
        return self.get((author or "").strip())

    def get_authors(self) -> list[str]:
        return self.keys()


__all__ = [
    "AuthorIndex",
    "CategoryIndex",
    "TagIndex",
    "TagSummary",
    "category_lineage",
]
