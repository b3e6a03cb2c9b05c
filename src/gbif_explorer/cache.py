"""In-memory response cache with per-entry TTL.

Keyed by a canonical request signature (endpoint prefix + sorted params),
so the same search within its TTL is answered without calling the API.
After the TTL the next request for that key refetches.

The cache is process-scoped: nothing is persisted, and a new process starts
empty. Occurrence pages can be large, so they are deliberately kept out of
the on-disk ``JsonStore``.

Construct one ``ResponseCache`` per session and inject it into the clients
that need it. Fetches run on worker threads (see ``refetch.py``), so reads
and writes are serialized with a lock.
"""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

OCCURRENCE_TTL: float = 15 * 60  # seconds
SPECIES_TTL: float = 2 * 60
DEFAULT_TTL: float = 5 * 60


@dataclass(frozen=True)
class _Entry:
    value: Any
    expires_at: float


def canonical_key(prefix: str, params: Mapping[str, Any]) -> str:
    """Deterministic cache key, independent of param insertion order."""
    body = json.dumps(params, sort_keys=True, separators=(",", ":"), default=str)
    return f"{prefix}:{body}"


class ResponseCache:
    """TTL cache for API payloads."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    canonical_key = staticmethod(canonical_key)

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if missing or expired.

        Expired entries are evicted on read.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl: float = DEFAULT_TTL) -> None:
        """Store ``value`` for ``ttl`` seconds, replacing any prior entry."""
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
