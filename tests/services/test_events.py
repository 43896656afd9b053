from __future__ import annotations

import logging
import threading

import pytest

from inkwell.app.models import BlogEntry, Response
from inkwell.app.services.events import (
    ENTRY_CREATED_EVENT,
    ENTRY_DELETED_EVENT,
    RESPONSE_MODERATED_EVENT,
    BlogEntryEvent,
    BlogEntryListener,
    EventDispatcher,
    ResponseEvent,
    ResponseListener,
    signals,
)


class _Recorder(BlogEntryListener, ResponseListener):
    def __init__(self, label: str, calls: list[str]) -> None:
        self._label = label
        self._calls = calls

    def entry_created(self, event: BlogEntryEvent) -> None:
        self._calls.append(f"{self._label}:{event.name}")

    def entry_deleted(self, event: BlogEntryEvent) -> None:
        self._calls.append(f"{self._label}:{event.name}")

    def response_moderated(self, event: ResponseEvent) -> None:
        self._calls.append(f"{self._label}:{event.name}")


class _Exploding(BlogEntryListener):
    def entry_created(self, event: BlogEntryEvent) -> None:
        raise RuntimeError("listener exploded")


def _created(entry_id: str = "e1") -> BlogEntryEvent:
    entry = BlogEntry(id=entry_id, title="T", author="alice")
    return BlogEntryEvent(
        name=ENTRY_CREATED_EVENT, blog_id="blog", entry_id=entry_id, current=entry
    )


def test_listeners_run_in_registration_order() -> None:
    calls: list[str] = []
    dispatcher = EventDispatcher(
        "blog",
        entry_listeners=[_Recorder("one", calls), _Recorder("two", calls)],
    )

    dispatcher.fire_entry_event(_created())
    dispatcher.fire_entry_event(
        BlogEntryEvent(name=ENTRY_DELETED_EVENT, blog_id="blog", entry_id="e1")
    )

    assert calls == [
        "one:entry.created",
        "two:entry.created",
        "one:entry.deleted",
        "two:entry.deleted",
    ]


def test_failing_listener_does_not_stop_the_rest(
    caplog: pytest.LogCaptureFixture,
) -> None:
    calls: list[str] = []
    dispatcher = EventDispatcher(
        "blog",
        entry_listeners=[
            _Recorder("before", calls),
            _Exploding(),
            _Recorder("after", calls),
        ],
    )

    with caplog.at_level(logging.ERROR, logger="inkwell.app.services.events"):
        dispatcher.fire_entry_event(_created())

    assert calls == ["before:entry.created", "after:entry.created"]
    assert dispatcher.failures == 1
    assert "listener exploded" in caplog.text


def test_response_events_reach_response_listeners_only() -> None:
    calls: list[str] = []
    recorder = _Recorder("r", calls)
    dispatcher = EventDispatcher("blog", response_listeners=[recorder])
    response = Response(id="r1", entry_id="e1", author="bob")

    dispatcher.fire_entry_event(_created())
    dispatcher.fire_response_event(
        ResponseEvent(
            name=RESPONSE_MODERATED_EVENT,
            blog_id="blog",
            response_id="r1",
            entry_id="e1",
            previous=response,
            current=response,
        )
    )

    assert calls == ["r:response.moderated"]


def test_events_are_sent_on_blinker_signals() -> None:
    received: list[tuple[str, str]] = []

    def receiver(sender: str, event: BlogEntryEvent) -> None:
        received.append((sender, event.entry_id))

    signal = signals.signal(ENTRY_CREATED_EVENT)
    signal.connect(receiver)
    try:
        EventDispatcher("blog").fire_entry_event(_created("e9"))
    finally:
        signal.disconnect(receiver)

    assert received == [("blog", "e9")]


def test_event_payload_describes_state_transition() -> None:
    draft = BlogEntry(id="e1", title="T", author="alice")
    published = BlogEntry(id="e1", title="T", author="alice", state="published")
    event = BlogEntryEvent(
        name="entry.updated",
        blog_id="blog",
        entry_id="e1",
        previous=draft,
        current=published,
    )

    assert event.publish_state_changed
    assert event.as_payload() == {
        "event": "entry.updated",
        "blog_id": "blog",
        "entry_id": "e1",
        "previous_state": "unpublished",
        "state": "published",
    }


def test_failure_count_is_exact_under_concurrent_events() -> None:
    dispatcher = EventDispatcher("blog", entry_listeners=[_Exploding()])
    threads = [
        threading.Thread(
            target=lambda: [dispatcher.fire_entry_event(_created()) for _ in range(50)]
        )
        for _ in range(8)
    ]

    logging.disable(logging.ERROR)
    try:
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)
    finally:
        logging.disable(logging.NOTSET)

    assert dispatcher.failures == 8 * 50
