from __future__ import annotations

import logging

from inkwell.app.index.base import SecondaryIndex
from inkwell.app.models import ModerationState, Response

logger = logging.getLogger(__name__)

APPROVED = ModerationState.APPROVED.value
PENDING = ModerationState.PENDING.value
REJECTED = ModerationState.REJECTED.value


class ResponseIndex(SecondaryIndex[Response]):
    """Index of comment and trackback ids by moderation state."""

    name = "responses"

    def __init__(self) -> None:
        super().__init__()
        self._by_entry: dict[str, frozenset[str]] = {}

    def keys_for(self, item: Response) -> frozenset[str]:
        return frozenset((item.state.value,))

    def added(self, item: Response) -> None:
        with self._lock:
            super().added(item)
            self._by_entry[item.entry_id] = self._by_entry.get(
                item.entry_id, frozenset()
            ) | {item.id}

    def removed(self, item: Response) -> None:
        with self._lock:
            super().removed(item)
            remaining = self._by_entry.get(item.entry_id, frozenset()) - {item.id}
            if remaining:
                self._by_entry[item.entry_id] = remaining
            else:
                self._by_entry.pop(item.entry_id, None)

    def remove_for_entry(self, entry_id: str) -> frozenset[str]:
        """Drop every response filed against ``entry_id``."""

        with self._lock:
            response_ids = self._by_entry.pop(entry_id, frozenset())
            for response_id in response_ids:
                self.discard(response_id)
        if response_ids:
            logger.debug(
                "Dropped %d responses for entry %s", len(response_ids), entry_id
            )
        return response_ids

    def clear(self) -> None:
        with self._lock:
            super().clear()
            self._by_entry = {}

    def get_responses_for_entry(self, entry_id: str) -> frozenset[str]:
        return self._by_entry.get(entry_id, frozenset())

    def get_approved_responses(self) -> tuple[str, ...]:
        return self.get(APPROVED)

    def get_pending_responses(self) -> tuple[str, ...]:
        return self.get(PENDING)

    def get_rejected_responses(self) -> tuple[str, ...]:
        return self.get(REJECTED)

    def get_number_of_responses(self) -> int:
        return len(self)

    def get_number_of_approved_responses(self) -> int:
        return self.count(APPROVED)

    def get_number_of_pending_responses(self) -> int:
        return self.count(PENDING)

    def get_number_of_rejected_responses(self) -> int:
        return self.count(REJECTED)


__all__ = ["ResponseIndex", "APPROVED", "PENDING", "REJECTED"]
