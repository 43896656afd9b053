from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from inkwell.app.errors import ConfigurationError
from inkwell.app.util.number import coerce_int

_DEFAULT_RECENT = 3
_DEFAULT_ENTRY_CACHE_MAXSIZE = 512


def _section(source: Any, name: str) -> Mapping[str, Any]:
    value = getattr(source, "get", lambda *_: None)(name)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{name} settings must be a table")
    return value


def _tags(value: Any, name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [part for part in value.split() if not part.startswith("#")]
    if not isinstance(value, (list, tuple)):
        raise ConfigurationError(f"LISTENERS.{name} must be a list of tags")
    return tuple(str(tag).strip() for tag in value if str(tag).strip())


def _flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass(frozen=True, slots=True)
class BlogConfig:
    """Typed view over the ``BLOG`` and related settings sections."""

    blog_id: str = "default"
    name: str = "My Blog"
    timezone: str = "UTC"
    recent_blog_entries_on_home_page: int = _DEFAULT_RECENT
    recent_responses_on_home_page: int = _DEFAULT_RECENT
    entry_listeners: tuple[str, ...] = ()
    response_listeners: tuple[str, ...] = ()
    reindex_on_start: bool = True
    entry_cache_maxsize: int = _DEFAULT_ENTRY_CACHE_MAXSIZE
    request_log_enabled: bool = False
    request_log_directory: str = "logs"

    @classmethod
    def from_settings(cls, settings: Any) -> "BlogConfig":
        blog = _section(settings, "BLOG")
        listeners = _section(settings, "LISTENERS")
        index = _section(settings, "INDEX")
        cache = _section(settings, "CACHE")
        request_log = _section(settings, "REQUEST_LOG")

        blog_id = str(blog.get("id", "default")).strip()
        if not blog_id:
            raise ConfigurationError("BLOG.id must not be empty")

        return cls(
            blog_id=blog_id,
            name=str(blog.get("name") or "My Blog"),
            timezone=str(blog.get("timezone") or "UTC"),
            recent_blog_entries_on_home_page=coerce_int(
                blog.get("recent_blog_entries_on_home_page"),
                default=_DEFAULT_RECENT,
                minimum=0,
            )
            or 0,
            recent_responses_on_home_page=coerce_int(
                blog.get("recent_responses_on_home_page"),
                default=_DEFAULT_RECENT,
                minimum=0,
            )
            or 0,
            entry_listeners=_tags(listeners.get("blog_entry"), "blog_entry"),
            response_listeners=_tags(listeners.get("response"), "response"),
            reindex_on_start=_flag(index.get("reindex_on_start"), True),
            entry_cache_maxsize=coerce_int(
                cache.get("entry_cache_maxsize"),
                default=_DEFAULT_ENTRY_CACHE_MAXSIZE,
                minimum=1,
            )
            or _DEFAULT_ENTRY_CACHE_MAXSIZE,
            request_log_enabled=_flag(request_log.get("enabled"), False),
            request_log_directory=str(request_log.get("directory") or "logs"),
        )


__all__ = ["BlogConfig"]
