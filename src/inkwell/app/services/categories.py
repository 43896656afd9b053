"""The blog's category hierarchy.

Categories are addressed by absolute paths (``/tech/python``); the root is
``/``. The tree is read by many threads and mutated rarely, so every mutation
takes the blog-wide lock and publishes a fresh mapping that readers pick up
without locking.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from inkwell.app.models import normalize_category

logger = logging.getLogger(__name__)

ROOT = "/"


@dataclass(frozen=True, slots=True)
class Category:
    id: str
    name: str

    @property
    def parent_id(self) -> str | None:
        if self.id == ROOT:
            return None
        head, _, _ = self.id.rpartition("/")
        return head or ROOT

    @property
    def is_root(self) -> bool:
        return self.id == ROOT

    @property
    def depth(self) -> int:
        return 0 if self.id == ROOT else self.id.count("/")


class CategoryTree:
    def __init__(self, root_name: str = "All") -> None:
        self._lock = threading.RLock()
        self._categories: dict[str, Category] = {ROOT: Category(ROOT, root_name)}

    @property
    def root(self) -> Category:
        return self._categories[ROOT]

    def get_category(self, category_id: str) -> Category | None:
        path = normalize_category(category_id) or ROOT
        return self._categories.get(path)

    def get_categories(self) -> list[Category]:
        """Every category, root first, parents before their children."""

        return sorted(self._categories.values(), key=lambda item: item.id)

    def get_children(self, category_id: str) -> list[Category]:
        path = normalize_category(category_id) or ROOT
        return [
            category
            for category in self.get_categories()
            if category.parent_id == path
        ]

    def add_category(self, category_id: str, name: str | None = None) -> Category:
        """Add ``category_id`` and any missing ancestors; return the category."""

        path = normalize_category(category_id)
        if path is None:
            return self.root
        with self._lock:
            existing = self._categories.get(path)
            if existing is not None:
                return existing
            updated = dict(self._categories)
            parts = path.strip("/").split("/")
            for depth in range(len(parts)):
                ancestor = "/" + "/".join(parts[: depth + 1])
                if ancestor not in updated:
                    label = parts[depth]
                    if ancestor == path and name:
                        label = name
                    updated[ancestor] = Category(ancestor, label)
            self._categories = updated
            logger.debug("Added category %s", path)
            return updated[path]

    def remove_category(self, category_id: str) -> bool:
        """Remove ``category_id`` and its descendants; the root stays."""

        path = normalize_category(category_id)
        if path is None:
            return False
        with self._lock:
            if path not in self._categories:
                return False
            prefix = path + "/"
            self._categories = {
                key: value
                for key, value in self._categories.items()
                if key != path and not key.startswith(prefix)
            }
            logger.debug("Removed category %s", path)
            return True

    def __contains__(self, category_id: object) -> bool:
        if not isinstance(category_id, str):
            return False
        return (normalize_category(category_id) or ROOT) in self._categories

    def __len__(self) -> int:
        return len(self._categories)


__all__ = ["Category", "CategoryTree", "ROOT"]
