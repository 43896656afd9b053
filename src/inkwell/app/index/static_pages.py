from __future__ import annotations

from inkwell.app.index.base import SecondaryIndex
from inkwell.app.models import StaticPage


class StaticPageIndex(SecondaryIndex[StaticPage]):
    """Index of static page ids by page name."""

    name = "static-pages"

    def keys_for(self, item: StaticPage) -> frozenset[str]:
        name = (item.name or "").strip()
        return frozenset((name,)) if name else frozenset()

    def get_static_page(self, name: str) -> str | None:
        ids = self.get((name or "").strip())
        return ids[0] if ids else None

    def contains(self, name: str) -> bool:
        return self.count((name or "").strip()) > 0

    def get_number_of_static_pages(self) -> int:
        return len(self)


__all__ = ["StaticPageIndex"]
