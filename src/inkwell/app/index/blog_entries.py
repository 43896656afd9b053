from __future__ import annotations

from inkwell.app.index.base import SecondaryIndex
from inkwell.app.models import BlogEntry, PublishState

ALL = "all"
PUBLISHED = PublishState.PUBLISHED.value
UNPUBLISHED = PublishState.UNPUBLISHED.value


class BlogEntryIndex(SecondaryIndex[BlogEntry]):
    """Index of blog entry ids by publication state."""

    name = "blog-entries"

    def keys_for(self, item: BlogEntry) -> frozenset[str]:
        return frozenset((ALL, item.state.value))

    def get_blog_entries(self) -> tuple[str, ...]:
        return self.get(ALL)

    def get_published_blog_entries(self) -> tuple[str, ...]:
        return self.get(PUBLISHED)

    def get_unpublished_blog_entries(self) -> tuple[str, ...]:
        return self.get(UNPUBLISHED)

    def get_number_of_blog_entries(self) -> int:
        return self.count(ALL)

    def get_number_of_published_blog_entries(self) -> int:
        return self.count(PUBLISHED)

    def get_number_of_unpublished_blog_entries(self) -> int:
        return self.count(UNPUBLISHED)

    def get_previous_blog_entry(self, entry_id: str) -> str | None:
        """Return the published entry immediately older than ``entry_id``."""

        published = self.get_published_blog_entries()
        try:
            position = published.index(entry_id)
        except ValueError:
            return None
        if position + 1 < len(published):
            return published[position + 1]
        return None

    def get_next_blog_entry(self, entry_id: str) -> str | None:
        """Return the published entry immediately newer than ``entry_id``."""

        published = self.get_published_blog_entries()
        try:
            position = published.index(entry_id)
        except ValueError:
            return None
        if position > 0:
            return published[position - 1]
        return None


__all__ = ["BlogEntryIndex", "ALL", "PUBLISHED", "UNPUBLISHED"]
