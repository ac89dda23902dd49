"""Redis-backed revocation store.

Records are plain string keys so that Redis' own TTL handles expiry::

    jwt-blacklist::<sub>          -> "<purge watermark>"
    jwt-blacklist::<sub>:<iat>    -> ""
"""

import logging
import math
from collections.abc import Sequence

from redis.asyncio import Redis
from redis.exceptions import RedisError

from jwt_revocation.exceptions import StoreError
from jwt_revocation.stores.protocols import StoreValue

logger = logging.getLogger(__name__)


def create_redis(redis_url: str) -> Redis:
    """Create the async Redis client."""
    return Redis.from_url(redis_url, decode_responses=True)


class RedisStore:
    """Store that maps ``write`` to ``SET [EX]`` and ``batch_read`` to ``MGET``."""

    def __init__(self, redis: Redis):
        self.redis = redis

    @classmethod
    def from_url(cls, redis_url: str) -> "RedisStore":
        """Build a store around a new client for *redis_url*."""
        return cls(create_redis(redis_url))

    async def write(self, key: str, value: StoreValue, ttl_seconds: float | None = None) -> None:
        # A single SET replaces the value and clears or resets any previous TTL
        ex = math.ceil(ttl_seconds) if ttl_seconds and ttl_seconds > 0 else None
        try:
            await self.redis.set(key, value, ex=ex)
        except RedisError as e:
            logger.warning("Redis write failed (key=%s): %s", key, e)
            raise StoreError(f"Failed to write {key!r}") from e

    async def batch_read(self, keys: Sequence[str]) -> dict[str, StoreValue | None]:
        keys = list(keys)
        try:
            values = await self.redis.mget(keys)
        except RedisError as e:
            logger.warning("Redis read failed (keys=%s): %s", keys, e)
            raise StoreError(f"Failed to read {len(keys)} keys") from e
        return dict(zip(keys, values, strict=True))

    async def close(self) -> None:
        """Close the underlying client."""
        await self.redis.aclose()
