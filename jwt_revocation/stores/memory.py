"""Simple in-memory revocation store.

Not recommended for production: records live in process memory and are not
shared between workers.
"""

import heapq
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from jwt_revocation.stores.protocols import StoreValue

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: StoreValue
    expires_at: float | None = None


class MemoryStore:
    """Dict-backed store with per-key expiry deadlines.

    Deadlines are kept in a heap; every call first drops the records whose
    deadline has passed, so expired keys never accumulate.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: dict[str, _Entry] = {}
        self._deadlines: list[tuple[float, str]] = []

    def _evict_expired(self, now: float) -> None:
        while self._deadlines and self._deadlines[0][0] <= now:
            expires_at, key = heapq.heappop(self._deadlines)
            entry = self._data.get(key)
            # Stale heap item if the key was overwritten with another deadline
            if entry is not None and entry.expires_at == expires_at:
                del self._data[key]

    async def write(self, key: str, value: StoreValue, ttl_seconds: float | None = None) -> None:
        now = self._clock()
        self._evict_expired(now)
        expires_at = now + ttl_seconds if ttl_seconds and ttl_seconds > 0 else None
        self._data[key] = _Entry(value=value, expires_at=expires_at)
        if expires_at is not None:
            heapq.heappush(self._deadlines, (expires_at, key))
        logger.debug("Memory store write key=%s ttl=%s", key, ttl_seconds)

    async def batch_read(self, keys: Sequence[str]) -> dict[str, StoreValue | None]:
        self._evict_expired(self._clock())
        result: dict[str, StoreValue | None] = {}
        for key in keys:
            entry = self._data.get(key)
            result[key] = entry.value if entry is not None else None
        return result
