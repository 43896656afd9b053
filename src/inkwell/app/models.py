"""Content entities consumed by the indexes and the archive."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from enum import Enum

from ulid import ULID

from inkwell.app.util.dates import SimpleDate
from inkwell.app.util.tags import canonicalize_all


class PublishState(str, Enum):
    PUBLISHED = "published"
    UNPUBLISHED = "unpublished"


class ModerationState(str, Enum):
    APPROVED = "approved"
    PENDING = "pending"
    REJECTED = "rejected"


class ResponseKind(str, Enum):
    COMMENT = "comment"
    TRACKBACK = "trackback"


def new_id() -> str:
    """Return a new time-sortable identifier."""

    return str(ULID())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def normalize_category(value: str | None) -> str | None:
    """Return ``value`` as an absolute ``/a/b`` category path, or ``None``."""

    if value is None:
        return None
    parts = [part.strip() for part in str(value).split("/") if part.strip()]
    if not parts:
        return None
    return "/" + "/".join(parts)


@dataclass(frozen=True, slots=True)
class BlogEntry:
    id: str
    title: str
    author: str
    date: datetime = field(default_factory=_utcnow)
    body: str = ""
    tags: frozenset[str] = frozenset()
    category: str | None = None
    state: PublishState = PublishState.UNPUBLISHED

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", _aware(self.date))
        object.__setattr__(self, "tags", canonicalize_all(self.tags))
        object.__setattr__(self, "category", normalize_category(self.category))
        object.__setattr__(self, "state", PublishState(self.state))

    @property
    def is_published(self) -> bool:
        return self.state is PublishState.PUBLISHED

    @property
    def simple_date(self) -> SimpleDate:
        return SimpleDate.from_date(self.date)

    def simple_date_in(self, zone: tzinfo) -> SimpleDate:
        """Calendar day of the entry as seen in ``zone``."""

        return SimpleDate.from_date(self.date.astimezone(zone))

    @property
    def order_key(self) -> tuple[datetime, str]:
        return (self.date, self.id)


@dataclass(frozen=True, slots=True)
class Response:
    id: str
    entry_id: str
    author: str
    date: datetime = field(default_factory=_utcnow)
    body: str = ""
    kind: ResponseKind = ResponseKind.COMMENT
    state: ModerationState = ModerationState.PENDING

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", _aware(self.date))
        object.__setattr__(self, "kind", ResponseKind(self.kind))
        object.__setattr__(self, "state", ModerationState(self.state))

    @property
    def order_key(self) -> tuple[datetime, str]:
        return (self.date, self.id)


@dataclass(frozen=True, slots=True)
class StaticPage:
    id: str
    name: str
    title: str
    author: str
    date: datetime = field(default_factory=_utcnow)
    body: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", _aware(self.date))


__all__ = [
    "BlogEntry",
    "ModerationState",
    "PublishState",
    "Response",
    "ResponseKind",
    "StaticPage",
    "new_id",
    "normalize_category",
]
