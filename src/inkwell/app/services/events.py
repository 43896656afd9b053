"""Lifecycle events and the per-blog dispatcher.

Listeners are held in an ordered list built once when the blog is
constructed. Each listener call is isolated: a failure is logged and the
remaining listeners still run, and the write that raised the event is not
rolled back. After the in-process listeners have run, the event is also sent
on a blinker signal so external observers can subscribe by event name.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from blinker import Namespace

from inkwell.app.models import BlogEntry, Response

logger = logging.getLogger(__name__)

ENTRY_CREATED_EVENT = "entry.created"
ENTRY_UPDATED_EVENT = "entry.updated"
ENTRY_DELETED_EVENT = "entry.deleted"
RESPONSE_CREATED_EVENT = "response.created"
RESPONSE_MODERATED_EVENT = "response.moderated"
RESPONSE_DELETED_EVENT = "response.deleted"

ENTRY_EVENTS = (ENTRY_CREATED_EVENT, ENTRY_UPDATED_EVENT, ENTRY_DELETED_EVENT)
RESPONSE_EVENTS = (
    RESPONSE_CREATED_EVENT,
    RESPONSE_MODERATED_EVENT,
    RESPONSE_DELETED_EVENT,
)

signals = Namespace()


@dataclass(frozen=True, slots=True)
class BlogEntryEvent:
    name: str
    blog_id: str
    entry_id: str
    previous: BlogEntry | None = None
    current: BlogEntry | None = None

    @property
    def publish_state_changed(self) -> bool:
        if self.previous is None or self.current is None:
            return False
        return self.previous.state is not self.current.state

    def as_payload(self) -> dict[str, Any]:
        return {
            "event": self.name,
            "blog_id": self.blog_id,
            "entry_id": self.entry_id,
            "previous_state": self.previous.state.value if self.previous else None,
            "state": self.current.state.value if self.current else None,
        }


@dataclass(frozen=True, slots=True)
class ResponseEvent:
    name: str
    blog_id: str
    response_id: str
    entry_id: str
    previous: Response | None = None
    current: Response | None = None

    def as_payload(self) -> dict[str, Any]:
        return {
            "event": self.name,
            "blog_id": self.blog_id,
            "response_id": self.response_id,
            "entry_id": self.entry_id,
            "previous_state": self.previous.state.value if self.previous else None,
            "state": self.current.state.value if self.current else None,
        }


class BlogEntryListener:
    """Base class for blog entry listeners; override what you need."""

    def entry_created(self, event: BlogEntryEvent) -> None:
        pass

    def entry_updated(self, event: BlogEntryEvent) -> None:
        pass

    def entry_deleted(self, event: BlogEntryEvent) -> None:
        pass


class ResponseListener:
    """Base class for comment and trackback listeners."""

    def response_created(self, event: ResponseEvent) -> None:
        pass

    def response_moderated(self, event: ResponseEvent) -> None:
        pass

    def response_deleted(self, event: ResponseEvent) -> None:
        pass


_ENTRY_HANDLERS = {
    ENTRY_CREATED_EVENT: "entry_created",
    ENTRY_UPDATED_EVENT: "entry_updated",
    ENTRY_DELETED_EVENT: "entry_deleted",
}
_RESPONSE_HANDLERS = {
    RESPONSE_CREATED_EVENT: "response_created",
    RESPONSE_MODERATED_EVENT: "response_moderated",
    RESPONSE_DELETED_EVENT: "response_deleted",
}


class EventDispatcher:
    """Deliver lifecycle events to an ordered, fixed set of listeners."""

    __slots__ = (
        "_blog_id",
        "_entry_listeners",
        "_response_listeners",
        "_failures",
        "_failures_lock",
    )

    def __init__(
        self,
        blog_id: str,
        *,
        entry_listeners: Iterable[BlogEntryListener] = (),
        response_listeners: Iterable[ResponseListener] = (),
    ) -> None:
        self._blog_id = blog_id
        self._entry_listeners: tuple[BlogEntryListener, ...] = tuple(entry_listeners)
        self._response_listeners: tuple[ResponseListener, ...] = tuple(
            response_listeners
        )
        self._failures = 0
        self._failures_lock = threading.Lock()

    @property
    def entry_listeners(self) -> Sequence[BlogEntryListener]:
        return self._entry_listeners

    @property
    def response_listeners(self) -> Sequence[ResponseListener]:
        return self._response_listeners

    @property
    def failures(self) -> int:
        """Number of listener calls that raised since the blog started."""

        return self._failures

    def fire_entry_event(self, event: BlogEntryEvent) -> None:
        method = _ENTRY_HANDLERS[event.name]
        for listener in self._entry_listeners:
            self._call(listener, method, event)
        self._send(event.name, event)

    def fire_response_event(self, event: ResponseEvent) -> None:
        method = _RESPONSE_HANDLERS[event.name]
        for listener in self._response_listeners:
            self._call(listener, method, event)
        self._send(event.name, event)

    def _record_failure(self) -> None:
        with self._failures_lock:
            self._failures += 1

    def _call(self, listener: object, method: str, event: object) -> None:
        try:
            getattr(listener, method)(event)
        except Exception:
            self._record_failure()
            logger.exception(
                "Listener %r failed handling %s for blog %s",
                listener,
                getattr(event, "name", method),
                self._blog_id,
            )

    def _send(self, name: str, event: object) -> None:
        try:
            signals.signal(name).send(self._blog_id, event=event)
        except Exception:
            self._record_failure()
            logger.exception("Signal receiver failed for %s", name)


__all__ = [
    "BlogEntryEvent",
    "BlogEntryListener",
    "EventDispatcher",
    "ResponseEvent",
    "ResponseListener",
    "signals",
    "ENTRY_CREATED_EVENT",
    "ENTRY_UPDATED_EVENT",
    "ENTRY_DELETED_EVENT",
    "ENTRY_EVENTS",
    "RESPONSE_CREATED_EVENT",
    "RESPONSE_MODERATED_EVENT",
    "RESPONSE_DELETED_EVENT",
    "RESPONSE_EVENTS",
]
