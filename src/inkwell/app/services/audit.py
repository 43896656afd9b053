from __future__ import annotations

import logging
from collections import deque
from typing import Any

import orjson

from inkwell.app.services.events import (
    BlogEntryEvent,
    BlogEntryListener,
    ResponseEvent,
    ResponseListener,
)

AUDIT_LOGGER = "inkwell.audit"
DEFAULT_TRAIL_SIZE = 256


class AuditListener(BlogEntryListener, ResponseListener):
    """Record every entry and response lifecycle event on the audit logger."""

    def __init__(
        self, logger_name: str = AUDIT_LOGGER, *, trail_size: int = DEFAULT_TRAIL_SIZE
    ) -> None:
        self._logger = logging.getLogger(logger_name)
        self._trail: deque[dict[str, Any]] = deque(maxlen=max(trail_size, 1))

    @property
    def trail(self) -> list[dict[str, Any]]:
        """Most recent audit records, oldest first."""

        return list(self._trail)

    def _record(self, event: BlogEntryEvent | ResponseEvent) -> None:
        payload = event.as_payload()
        self._trail.append(payload)
        self._logger.info("%s", orjson.dumps(payload).decode())

    def entry_created(self, event: BlogEntryEvent) -> None:
        self._record(event)

    def entry_updated(self, event: BlogEntryEvent) -> None:
        self._record(event)

    def entry_deleted(self, event: BlogEntryEvent) -> None:
        self._record(event)

    def response_created(self, event: ResponseEvent) -> None:
        self._record(event)

    def response_moderated(self, event: ResponseEvent) -> None:
        self._record(event)

    def response_deleted(self, event: ResponseEvent) -> None:
        self._record(event)


__all__ = ["AuditListener", "AUDIT_LOGGER"]
