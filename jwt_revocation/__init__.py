"""Revocation checks for signed session tokens."""

from jwt_revocation.config import Settings, get_settings
from jwt_revocation.engine import REVOKED_SENTINEL, RevocationEngine, configure
from jwt_revocation.exceptions import RevocationError, RevocationValidationError, StoreError
from jwt_revocation.stores import MemoryStore, RedisStore, RevocationStore, create_store

__all__ = [
    "REVOKED_SENTINEL",
    "MemoryStore",
    "RedisStore",
    "RevocationEngine",
    "RevocationError",
    "RevocationStore",
    "RevocationValidationError",
    "Settings",
    "StoreError",
    "configure",
    "create_store",
    "get_settings",
]
