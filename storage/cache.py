from __future__ import annotations

"""Explicit TTL cache and a cached repository over the attempt store.

Callers construct an AttemptRepository and pass it where records are needed;
there is no module-level client or cache.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Hashable, Optional, Sequence, TypeVar

from examprep.results.schema import AttemptRecord

from .store import append_attempts, frame_to_records, init_store, load_all, query_user, validate_records

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ALL_USERS = "*"


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    expires_at: float


def is_expired(entry: CacheEntry[Any], now: float) -> bool:
    return now >= entry.expires_at


class TTLCache:
    """Key/value cache whose entries lapse ``ttl_seconds`` after being stored."""

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry[Any]] = {}

    def get(self, key: Hashable, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        if is_expired(entry, self._clock()):
            del self._entries[key]
            return default
        return entry.value

    def put(self, key: Hashable, value: Any) -> CacheEntry[Any]:
        self.purge()
        entry = CacheEntry(value=value, expires_at=self._clock() + self.ttl_seconds)
        self._entries[key] = entry
        return entry

    def invalidate(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def purge(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        stale = [k for k, entry in self._entries.items() if is_expired(entry, now)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def __contains__(self, key: Hashable) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not is_expired(entry, self._clock())

    def __len__(self) -> int:
        self.purge()
        return len(self._entries)


class AttemptRepository:
    """Read/write access to stored attempts with per-user read caching."""

    def __init__(self, data_dir: Path, cache: Optional[TTLCache] = None) -> None:
        self.data_dir = Path(data_dir)
        self.cache = cache if cache is not None else TTLCache()

    def initialize(self) -> None:
        init_store(self.data_dir)

    def load(self, user_id: Optional[str] = None) -> list[AttemptRecord]:
        key = user_id if user_id is not None else _ALL_USERS
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Attempt cache hit for %s", key)
            return list(cached)
        df = load_all(self.data_dir)
        if user_id is not None:
            df = query_user(df, user_id)
        records = frame_to_records(df)
        self.cache.put(key, tuple(records))
        return records

    def append(self, records: Sequence[AttemptRecord]) -> None:
        if not records:
            return
        append_attempts(validate_records(list(records)), self.data_dir)
        # Any user's view and the all-users view may now be stale
        self.cache.clear()
