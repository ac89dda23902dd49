"""Revocation store backends."""

from jwt_revocation.config import Settings
from jwt_revocation.stores.memory import MemoryStore
from jwt_revocation.stores.protocols import RevocationStore, StoreValue
from jwt_revocation.stores.redis import RedisStore, create_redis


def create_store(settings: Settings) -> RevocationStore:
    """Create the store selected by ``settings.store_type``."""
    if settings.store_type == "redis":
        return RedisStore.from_url(settings.redis_url)
    return MemoryStore()


__all__ = [
    "MemoryStore",
    "RedisStore",
    "RevocationStore",
    "StoreValue",
    "create_redis",
    "create_store",
]
