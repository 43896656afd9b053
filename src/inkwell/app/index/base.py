"""Shared machinery for the secondary indexes.

Every index maps a classification key to a tuple of item ids ordered newest
first. Buckets are replaced wholesale on every write (copy-on-write) so
readers never take the lock and never observe a half-applied update; writers
are serialized per index.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

OrderKey = tuple[datetime, str]
T = TypeVar("T")


def _insertion_point(
    ids: list[str], orders: Mapping[str, OrderKey], order: OrderKey
) -> int:
    lo, hi = 0, len(ids)
    while lo < hi:
        mid = (lo + hi) // 2
        if orders[ids[mid]] > order:
            lo = mid + 1
        else:
            hi = mid
    return lo


class SecondaryIndex(ABC, Generic[T]):
    """Classification key -> ordered ids, rebuildable from canonical data."""

    name = "index"

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._buckets: dict[str, tuple[str, ...]] = {}
        self._orders: dict[str, OrderKey] = {}
        self._memberships: dict[str, frozenset[str]] = {}

    @abstractmethod
    def keys_for(self, item: T) -> frozenset[str]:
        """Return the classification keys ``item`` belongs to."""

    def item_id(self, item: T) -> str:
        return getattr(item, "id")

    def order_for(self, item: T) -> OrderKey:
        return getattr(item, "order_key")

    # Incremental mutators -------------------------------------------------

    def add(self, key: str, item_id: str, order: OrderKey) -> bool:
        """Add ``item_id`` to the ``key`` bucket; return whether it changed."""

        with self._lock:
            current = self._buckets.get(key, ())
            if item_id in current:
                return False
            if self._orders.get(item_id, order) != order:
                # The item moved in time; resettle it everywhere first.
                keys = self._memberships.get(item_id, frozenset())
                self.discard(item_id)
                for existing_key in keys:
                    self.add(existing_key, item_id, order)
                current = self._buckets.get(key, ())
                if item_id in current:
                    return True
            self._orders[item_id] = order
            ids = list(current)
            ids.insert(_insertion_point(ids, self._orders, order), item_id)
            self._buckets[key] = tuple(ids)
            self._memberships[item_id] = self._memberships.get(
                item_id, frozenset()
            ) | {key}
            return True

    def remove(self, key: str, item_id: str) -> bool:
        """Remove ``item_id`` from the ``key`` bucket; return whether it changed."""

        with self._lock:
            current = self._buckets.get(key)
            if not current or item_id not in current:
                return False
            remaining = tuple(value for value in current if value != item_id)
            if remaining:
                self._buckets[key] = remaining
            else:
                del self._buckets[key]
            keys = self._memberships.get(item_id, frozenset()) - {key}
            if keys:
                self._memberships[item_id] = keys
            else:
                self._memberships.pop(item_id, None)
                self._orders.pop(item_id, None)
            return True

    def move(self, old_key: str, new_key: str, item_id: str, order: OrderKey) -> None:
        """Move ``item_id`` from ``old_key`` to ``new_key`` in one locked step."""

        with self._lock:
            self.remove(old_key, item_id)
            self.add(new_key, item_id, order)

    def discard(self, item_id: str) -> frozenset[str]:
        """Remove ``item_id`` from every bucket and return the keys it left."""

        with self._lock:
            keys = self._memberships.get(item_id, frozenset())
            for key in keys:
                self.remove(key, item_id)
            return keys

    # Lifecycle events -----------------------------------------------------

    def added(self, item: T) -> None:
        item_id = self.item_id(item)
        order = self.order_for(item)
        with self._lock:
            for key in self.keys_for(item):
                self.add(key, item_id, order)

    def removed(self, item: T) -> None:
        self.discard(self.item_id(item))

    def changed(self, previous: T | None, current: T) -> None:
        """Apply the classification difference between two versions of an item."""

        item_id = self.item_id(current)
        order = self.order_for(current)
        with self._lock:
            stale = self._memberships.get(item_id, frozenset())
            if previous is not None:
                stale = stale | self.keys_for(previous)
            fresh = self.keys_for(current)
            if self._orders.get(item_id, order) != order:
                self.discard(item_id)
                stale = frozenset()
            for key in stale - fresh:
                self.remove(key, item_id)
            for key in fresh - stale:
                self.add(key, item_id, order)
            for key in fresh & stale:
                # Keep buckets whose membership predates the tracked keys.
                self.add(key, item_id, order)

    def index(self, items: Iterable[T]) -> None:
        """Bulk-load ``items``, replacing whatever each was filed under before."""

        count = 0
        with self._lock:
            for item in items:
                self.discard(self.item_id(item))
                self.added(item)
                count += 1
        logger.debug("Indexed %d items into %s", count, self.name)

    def clear(self) -> None:
        with self._lock:
            self._buckets = {}
            self._orders = {}
            self._memberships = {}
        logger.debug("Cleared %s", self.name)

    # Queries ----------------------------------------------------------------

    def get(self, key: str) -> tuple[str, ...]:
        """Return the ids filed under ``key``, newest first."""

        return self._buckets.get(key, ())

    def count(self, key: str) -> int:
        return len(self._buckets.get(key, ()))

    def keys(self) -> list[str]:
        return sorted(self._buckets)

    def keys_of(self, item_id: str) -> frozenset[str]:
        return self._memberships.get(item_id, frozenset())

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._memberships

    def __len__(self) -> int:
        return len(self._memberships)

    def snapshot(self) -> dict[str, tuple[str, ...]]:
        """Return a shallow copy of every bucket."""

        return dict(self._buckets)

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "items": len(self._memberships),
            "buckets": {key: list(ids) for key, ids in sorted(self._buckets.items())},
        }


__all__ = ["OrderKey", "SecondaryIndex"]
