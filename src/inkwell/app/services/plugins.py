"""Named listener factories resolved from configuration.

Blogs list extra listeners by capability tag, for example::

    [default.LISTENERS]
    blog_entry = ["audit", "debug"]
    response = ["audit"]

Each tag maps to a zero-argument factory. Listeners are instantiated once per
blog when it is constructed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from inkwell.app.errors import ConfigurationError
from inkwell.app.services.audit import AuditListener
from inkwell.app.services.events import (
    BlogEntryEvent,
    BlogEntryListener,
    ResponseEvent,
    ResponseListener,
)

logger = logging.getLogger(__name__)

EXTRA_AUDIT_LOGGER = "inkwell.audit.extra"

ListenerFactory = Callable[[], object]


class DebugListener(BlogEntryListener, ResponseListener):
    """Log every lifecycle event at debug level."""

    def __init__(self, logger_name: str = "inkwell.events") -> None:
        self._logger = logging.getLogger(logger_name)

    def _log(self, event: BlogEntryEvent | ResponseEvent) -> None:
        self._logger.debug("%s %s", event.name, event.as_payload())

    def entry_created(self, event: BlogEntryEvent) -> None:
        self._log(event)

    def entry_updated(self, event: BlogEntryEvent) -> None:
        self._log(event)

    def entry_deleted(self, event: BlogEntryEvent) -> None:
        self._log(event)

    def response_created(self, event: ResponseEvent) -> None:
        self._log(event)

    def response_moderated(self, event: ResponseEvent) -> None:
        self._log(event)

    def response_deleted(self, event: ResponseEvent) -> None:
        self._log(event)


class ListenerRegistry:
    """Map capability tags to listener factories."""

    def __init__(self) -> None:
        self._factories: dict[str, ListenerFactory] = {}

    @classmethod
    def with_builtins(cls) -> "ListenerRegistry":
        registry = cls()
        registry.register("audit", lambda: AuditListener(EXTRA_AUDIT_LOGGER))
        registry.register("debug", DebugListener)
        return registry

    def register(self, tag: str, factory: ListenerFactory) -> None:
        key = tag.strip().lower()
        if not key:
            raise ConfigurationError("Listener tag must not be empty")
        if key in self._factories:
            logger.debug("Replacing listener factory for %s", key)
        self._factories[key] = factory

    def tags(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and tag.strip().lower() in self._factories

    def _create(self, tag: str, expected: type) -> object:
        key = tag.strip().lower()
        factory = self._factories.get(key)
        if factory is None:
            raise ConfigurationError(
                f"Unknown listener {tag!r}; known listeners: {', '.join(self.tags())}"
            )
        listener = factory()
        if not isinstance(listener, expected):
            raise ConfigurationError(
                f"Listener {tag!r} is not a {expected.__name__}"
            )
        return listener

    def entry_listeners(self, tags: Iterable[str]) -> list[BlogEntryListener]:
        """Instantiate the entry listeners named by ``tags``, in order."""

        return [self._create(tag, BlogEntryListener) for tag in tags]  # type: ignore[misc]

    def response_listeners(self, tags: Iterable[str]) -> list[ResponseListener]:
        return [self._create(tag, ResponseListener) for tag in tags]  # type: ignore[misc]


__all__ = ["DebugListener", "ListenerRegistry", "EXTRA_AUDIT_LOGGER"]
