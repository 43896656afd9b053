"""Exceptions raised by the blog index and archive services."""

from __future__ import annotations


class InkwellError(Exception):
    """Base class for errors raised by inkwell."""


class ConfigurationError(InkwellError, ValueError):
    """Raised when settings name unknown listeners or hold invalid values."""


class ReindexError(InkwellError):
    """Raised when a full reindex could not be completed.

    Indexes are left cleared or partially rebuilt; the only recovery is to
    run the reindex again.
    """

    def __init__(self, blog_id: str, stage: str) -> None:
        super().__init__(f"Reindexing blog {blog_id!r} failed while {stage}")
        self.blog_id = blog_id
        self.stage = stage


class UnknownEntryError(InkwellError, KeyError):
    """Raised when a write targets an entity missing from the store."""


__all__ = [
    "InkwellError",
    "ConfigurationError",
    "ReindexError",
    "UnknownEntryError",
]
