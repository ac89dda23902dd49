"""Protocol definition for revocation store backends.

Any object exposing these two coroutines can back a ``RevocationEngine``;
the engine never depends on a concrete store class.
"""

from collections.abc import Sequence
from typing import Protocol

StoreValue = str | bytes | int | float


class RevocationStore(Protocol):
    """Interface for revocation record storage."""

    async def write(self, key: str, value: StoreValue, ttl_seconds: float | None = None) -> None:
        """Store *value* at *key*, replacing any previous value and expiry.

        A positive *ttl_seconds* makes the key unreadable once it elapses;
        ``None`` or a non-positive value stores the key without expiry.
        """
        ...

    async def batch_read(self, keys: Sequence[str]) -> dict[str, StoreValue | None]:
        """Return every requested key mapped to its value, or ``None`` if absent."""
        ...
