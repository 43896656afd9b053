"""Per-blog cache with at-most-once computation per key.

Racing callers on a never-seen key all obtain the same memoizing wrapper
through an atomic check-and-insert, and only the first one to enter the
wrapper runs the computation. A failed computation is evicted so the next
caller retries; callers already waiting on it see the same exception.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Memoized(Generic[T]):
    __slots__ = ("_compute", "_lock", "_done", "_value", "_error")

    def __init__(self, compute: Callable[[], T]) -> None:
        self._compute: Callable[[], T] | None = compute
        self._lock = threading.Lock()
        self._done = False
        self._value: T | None = None
        self._error: BaseException | None = None

    @property
    def failed(self) -> bool:
        return self._error is not None

    def get(self) -> T:
        if self._done:
            return self._value  # type: ignore[return-value]
        with self._lock:
            if not self._done and self._error is None:
                compute = self._compute
                assert compute is not None
                try:
                    value = compute()
                except BaseException as exc:
                    self._error = exc
                    raise
                self._value = value
                self._done = True
                self._compute = None
            if self._error is not None:
                raise self._error
            return self._value  # type: ignore[return-value]


class MemoizedCache:
    """String-keyed cache of lazily computed values; no eviction, no TTL."""

    def __init__(self, name: str = "cache") -> None:
        self._name = name
        self._lock = threading.Lock()
        self._entries: dict[str, _Memoized[Any]] = {}

    def get_or_compute(self, key: str, compute: Callable[[], T]) -> T:
        """Return the value cached for ``key``, computing it at most once."""

        with self._lock:
            holder = self._entries.get(key)
            if holder is None:
                holder = _Memoized(compute)
                self._entries[key] = holder
        try:
            return holder.get()
        except BaseException:
            self._evict_failed(key, holder)
            raise

    def _evict_failed(self, key: str, holder: _Memoized[Any]) -> None:
        with self._lock:
            if self._entries.get(key) is holder:
                del self._entries[key]
                logger.debug("Evicted failed computation %s[%s]", self._name, key)

    def reset(self, key: str) -> None:
        """Forget ``key`` so the next lookup recomputes it."""

        with self._lock:
            self._entries.pop(key, None)

    def reset_all(self) -> None:
        with self._lock:
            self._entries = {}

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._entries)

    def __contains__(self, key: object) -> bool:
        holder = self._entries.get(key)  # type: ignore[arg-type]
        return holder is not None and not holder.failed

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["MemoizedCache"]
