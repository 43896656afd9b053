"""Write path for blog content.

Each operation writes to the canonical store first and then raises the
matching lifecycle event, so by the time a call returns the blog's indexes,
caches and listeners have seen the change. Both steps run under the blog's
write lock; concurrent writers are applied to the indexes in the order they
reached the store.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime

from inkwell.app.errors import UnknownEntryError
from inkwell.app.models import (
    BlogEntry,
    ModerationState,
    PublishState,
    Response,
    ResponseKind,
    StaticPage,
    new_id,
)
from inkwell.app.services.blog import Blog
from inkwell.app.services.events import (
    ENTRY_CREATED_EVENT,
    ENTRY_DELETED_EVENT,
    ENTRY_UPDATED_EVENT,
    RESPONSE_CREATED_EVENT,
    RESPONSE_DELETED_EVENT,
    RESPONSE_MODERATED_EVENT,
    BlogEntryEvent,
    ResponseEvent,
)

logger = logging.getLogger(__name__)


class BlogService:
    def __init__(self, blog: Blog) -> None:
        self._blog = blog

    @property
    def blog(self) -> Blog:
        return self._blog

    # -- entries ------------------------------------------------------------

    def create_entry(
        self,
        title: str,
        author: str,
        *,
        body: str = "",
        tags: Iterable[str] = (),
        category: str | None = None,
        date: datetime | None = None,
        published: bool = False,
    ) -> BlogEntry:
        fields: dict[str, object] = {}
        if date is not None:
            fields["date"] = date
        entry = BlogEntry(
            id=new_id(),
            title=title,
            author=author,
            body=body,
            tags=frozenset(tags),
            category=category,
            state=PublishState.PUBLISHED if published else PublishState.UNPUBLISHED,
            **fields,  # type: ignore[arg-type]
        )
        return self.save_entry(entry)

    def save_entry(self, entry: BlogEntry) -> BlogEntry:
        """Store ``entry`` and raise ``entry.created`` or ``entry.updated``."""

        with self._blog.write_lock:
            previous = self._blog.store.store_entry(entry)
            if entry.category:
                self._blog.categories.add_category(entry.category)
            name = ENTRY_CREATED_EVENT if previous is None else ENTRY_UPDATED_EVENT
            logger.debug("%s %s in blog %s", name, entry.id, self._blog.id)
            self._blog.fire_entry_event(
                BlogEntryEvent(
                    name=name,
                    blog_id=self._blog.id,
                    entry_id=entry.id,
                    previous=previous,
                    current=entry,
                )
            )
        return entry

    def update_entry(self, entry_id: str, **changes: object) -> BlogEntry:
        with self._blog.write_lock:
            current = self._require_entry(entry_id)
            return self.save_entry(replace(current, **changes))  # type: ignore[arg-type]

    def publish(self, entry_id: str) -> BlogEntry:
        return self._set_state(entry_id, PublishState.PUBLISHED)

    def unpublish(self, entry_id: str) -> BlogEntry:
        return self._set_state(entry_id, PublishState.UNPUBLISHED)

    def _set_state(self, entry_id: str, state: PublishState) -> BlogEntry:
        with self._blog.write_lock:
            current = self._require_entry(entry_id)
            if current.state is state:
                return current
            return self.save_entry(replace(current, state=state))

    def delete_entry(self, entry_id: str) -> BlogEntry:
        """Remove an entry and its responses."""

        with self._blog.write_lock:
            entry, orphans = self._blog.store.remove_entry(entry_id)
            if entry is None:
                raise UnknownEntryError(entry_id)
            logger.debug(
                "Deleted entry %s and %d responses from blog %s",
                entry_id,
                len(orphans),
                self._blog.id,
            )
            self._blog.fire_entry_event(
                BlogEntryEvent(
                    name=ENTRY_DELETED_EVENT,
                    blog_id=self._blog.id,
                    entry_id=entry_id,
                    previous=entry,
                )
            )
        return entry

    def _require_entry(self, entry_id: str) -> BlogEntry:
        entry = self._blog.store.get_entry(entry_id)
        if entry is None:
            raise UnknownEntryError(entry_id)
        return entry

    # -- responses ----------------------------------------------------------

    def add_response(
        self,
        entry_id: str,
        author: str,
        body: str = "",
        *,
        kind: ResponseKind = ResponseKind.COMMENT,
        state: ModerationState = ModerationState.PENDING,
        date: datetime | None = None,
    ) -> Response:
        fields: dict[str, object] = {}
        if date is not None:
            fields["date"] = date
        response = Response(
            id=new_id(),
            entry_id=entry_id,
            author=author,
            body=body,
            kind=kind,
            state=state,
            **fields,  # type: ignore[arg-type]
        )
        return self.save_response(response)

    def save_response(self, response: Response) -> Response:
        with self._blog.write_lock:
            try:
                previous = self._blog.store.store_response(response)
            except KeyError as exc:
                raise UnknownEntryError(response.entry_id) from exc
            name = (
                RESPONSE_CREATED_EVENT if previous is None else RESPONSE_MODERATED_EVENT
            )
            self._blog.fire_response_event(
                ResponseEvent(
                    name=name,
                    blog_id=self._blog.id,
                    response_id=response.id,
                    entry_id=response.entry_id,
                    previous=previous,
                    current=response,
                )
            )
        return response

    def moderate(self, response_id: str, state: ModerationState | str) -> Response:
        target = ModerationState(state)
        with self._blog.write_lock:
            current = self._blog.store.get_response(response_id)
            if current is None:
                raise UnknownEntryError(response_id)
            if current.state is target:
                return current
            return self.save_response(replace(current, state=target))

    def approve(self, response_id: str) -> Response:
        return self.moderate(response_id, ModerationState.APPROVED)

    def reject(self, response_id: str) -> Response:
        return self.moderate(response_id, ModerationState.REJECTED)

    def delete_response(self, response_id: str) -> Response:
        with self._blog.write_lock:
            response = self._blog.store.remove_response(response_id)
            if response is None:
                raise UnknownEntryError(response_id)
            self._blog.fire_response_event(
                ResponseEvent(
                    name=RESPONSE_DELETED_EVENT,
                    blog_id=self._blog.id,
                    response_id=response_id,
                    entry_id=response.entry_id,
                    previous=response,
                )
            )
        return response

    # -- static pages -------------------------------------------------------

    def save_static_page(self, page: StaticPage) -> StaticPage:
        with self._blog.write_lock:
            previous = self._blog.store.store_static_page(page)
            indexes = self._blog.indexes
            indexes.static_page_index.changed(previous, page)
            indexes.search_index.index_static_documents([page])
        return page


__all__ = ["BlogService"]
