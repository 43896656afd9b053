"""Append-only per-blog request log, one JSON object per line."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import orjson

logger = logging.getLogger(__name__)


class RequestLog:
    """Serialize appends for one blog so concurrent requests never interleave."""

    def __init__(self, directory: str | Path, blog_id: str) -> None:
        self._directory = Path(directory).expanduser() / blog_id
        self._blog_id = blog_id
        self._lock = threading.Lock()
        self._count = 0

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def count(self) -> int:
        return self._count

    def path_for(self, when: datetime) -> Path:
        return self._directory / f"requests-{when:%Y%m%d}.jsonl"

    def log(
        self,
        path: str,
        status: int,
        *,
        method: str = "GET",
        referer: str | None = None,
        agent: str | None = None,
        remote_addr: str | None = None,
        when: datetime | None = None,
    ) -> Path:
        timestamp = when or datetime.now(timezone.utc)
        record: dict[str, Any] = {
            "time": timestamp.isoformat(),
            "blog_id": self._blog_id,
            "method": method,
            "path": path,
            "status": int(status),
        }
        if referer:
            record["referer"] = referer
        if agent:
            record["agent"] = agent
        if remote_addr:
            record["remote_addr"] = remote_addr
        line = orjson.dumps(record) + b"\n"
        target = self.path_for(timestamp)
        with self._lock:
            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open("ab") as handle:
                handle.write(line)
            self._count += 1
        return target

    def read(self, when: datetime) -> list[dict[str, Any]]:
        target = self.path_for(when)
        if not target.exists():
            return []
        with self._lock:
            lines = target.read_bytes().splitlines()
        return [orjson.loads(line) for line in lines if line.strip()]


__all__ = ["RequestLog"]
