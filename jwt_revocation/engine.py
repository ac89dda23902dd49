"""JWT revocation engine.

A JWT carries a unique principal identifier (``sub``) and an issued-at
timestamp (``iat``), which together identify one issued token. Two kinds of
records are kept in the store:

* **revoke**: ``<prefix>:<sub>:<iat>`` holds an empty string and revokes the
  single token issued at that index.
* **purge**: ``<prefix>:<sub>`` holds a watermark timestamp and revokes every
  token of that subject issued at or before it.

Records never need to outlive the token they describe, so their TTL defaults
to the token's own lifetime (``exp - iat``).

Usage from an auth middleware or incident-response script::

    engine = configure(strict_on_error=True)

    await engine.revoke(claims)
    assert await engine.is_revoked(claims)
"""

import logging
import math
import numbers
import time
from collections.abc import Callable, Mapping
from typing import Any

from jwt_revocation.config import Settings, get_settings
from jwt_revocation.exceptions import RevocationValidationError, StoreError
from jwt_revocation.stores import RevocationStore, StoreValue, create_store

logger = logging.getLogger(__name__)

# Value stored at a revoke key
REVOKED_SENTINEL = ""

# Methods a store must provide, see RevocationStore
_STORE_METHODS = ("write", "batch_read")

Claims = Mapping[str, Any]


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _as_number(value: StoreValue | None) -> float | None:
    """Parse a stored watermark; Redis hands values back as strings."""
    if value is None or value == REVOKED_SENTINEL:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric purge watermark: %r", value)
        return None


class RevocationEngine:
    """Decides whether a token is revoked and records revocations.

    The engine is stateless apart from its settings and store, so several
    independently configured engines may share a process.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: RevocationStore | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings or get_settings()
        if store is None:
            store = create_store(self.settings)
        elif not all(callable(getattr(store, name, None)) for name in _STORE_METHODS):
            raise TypeError(
                f"store must implement write() and batch_read(), got {type(store).__name__}"
            )
        self.store = store
        self._clock = clock

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def purge_key(self, token_id: Any) -> str:
        return f"{self.settings.key_prefix}:{token_id}"

    def revoke_key(self, token_id: Any, index: Any) -> str:
        return f"{self.settings.key_prefix}:{token_id}:{index}"

    def _token_id(self, claims: Claims) -> Any:
        token_id = claims.get(self.settings.token_id_claim)
        if not token_id:
            raise RevocationValidationError(
                f"JWT missing tokenId claim {self.settings.token_id_claim}"
            )
        return token_id

    def _index(self, claims: Claims) -> Any:
        index = claims.get(self.settings.index_by_claim)
        if not index:
            raise RevocationValidationError(
                f"JWT missing indexBy claim {self.settings.index_by_claim}"
            )
        return index

    # ------------------------------------------------------------------
    # Check
    # ------------------------------------------------------------------

    async def is_revoked(self, claims: Claims | None) -> bool:
        """Return ``True`` if the token described by *claims* is revoked.

        Raises:
            RevocationValidationError: the token id or index claim is missing.

        A store failure does not raise; the configured ``strict_on_error``
        verdict is returned instead.
        """
        if claims is None:
            raise RevocationValidationError("JWT claims missing")
        token_id = self._token_id(claims)
        index = self._index(claims)

        purge_key = self.purge_key(token_id)
        revoke_key = self.revoke_key(token_id, index)
        try:
            records = await self.store.batch_read([purge_key, revoke_key])
        except Exception as e:
            logger.warning(
                "Revocation lookup failed (token_id=%s), returning strict=%s: %s",
                token_id,
                self.settings.strict_on_error,
                e,
            )
            return self.settings.strict_on_error

        purged = records.get(purge_key)
        revoked = records.get(revoke_key)
        logger.debug("Revocation lookup %s=%r %s=%r", purge_key, purged, revoke_key, revoked)

        # Purge is checked first and dominates an individual revoke
        watermark = _as_number(purged)
        iat = claims.get("iat")
        if watermark is not None and _is_number(iat) and watermark >= iat:
            return True

        return revoked in (REVOKED_SENTINEL, REVOKED_SENTINEL.encode())

    # ------------------------------------------------------------------
    # Revoke / purge
    # ------------------------------------------------------------------

    def _lifetime(self, claims: Claims, lifetime: float | None) -> float | None:
        """Validate the write arguments and resolve the record TTL."""
        if lifetime is not None and (
            not _is_number(lifetime) or lifetime < 0 or not math.isfinite(lifetime)
        ):
            raise RevocationValidationError("Invalid lifetime value")

        iat = claims.get("iat")
        if not lifetime and not _is_number(iat):
            raise RevocationValidationError("Invalid iat value")

        if lifetime:
            return lifetime
        exp = claims.get("exp")
        if _is_number(exp):
            ttl = exp - iat
            if not math.isfinite(ttl):
                raise RevocationValidationError("Invalid exp value")
            return ttl
        return None

    async def revoke(self, claims: Claims | None, lifetime: float | None = None) -> None:
        """Revoke the single token identified by its token id and index claims.

        Args:
            claims: Decoded JWT payload.
            lifetime: Record TTL in seconds. Defaults to ``exp - iat``; without
                ``exp`` the record never expires. Nothing is written when
                ``exp - iat`` is not positive.

        Raises:
            RevocationValidationError: claims or lifetime are invalid.
            StoreError: the record could not be written.
        """
        if claims is None:
            raise RevocationValidationError("JWT claims missing")
        ttl = self._lifetime(claims, lifetime)
        token_id = self._token_id(claims)
        index = self._index(claims)

        key = self.revoke_key(token_id, index)
        await self._write("revoke", key, REVOKED_SENTINEL, ttl)

    async def purge(self, claims: Claims | None, lifetime: float | None = None) -> None:
        """Revoke every token of the subject issued before now.

        The watermark is one second in the past so that a token issued in the
        same second as the purge stays valid.
        """
        if claims is None:
            raise RevocationValidationError("JWT claims missing")
        ttl = self._lifetime(claims, lifetime)
        token_id = self._token_id(claims)

        key = self.purge_key(token_id)
        await self._write("purge", key, int(self._clock()) - 1, ttl)

    async def _write(self, operation: str, key: str, value: StoreValue, ttl: float | None) -> None:
        if ttl is not None and ttl <= 0:
            # Token already expired; the record would vanish immediately
            logger.debug(
                "Revocation %s skipped for expired token (key=%s ttl=%s)", operation, key, ttl
            )
            return
        logger.debug("Revocation %s key=%s value=%r ttl=%s", operation, key, value, ttl)
        try:
            await self.store.write(key, value, ttl)
        except StoreError:
            logger.error("Revocation %s could not be persisted (key=%s)", operation, key)
            raise

    async def close(self) -> None:
        """Release the store's resources, if it holds any."""
        close = getattr(self.store, "close", None)
        if close is not None:
            await close()


def configure(store: RevocationStore | None = None, **options: Any) -> RevocationEngine:
    """Build an engine from explicit options.

    Options are validated as :class:`Settings` fields, e.g.
    ``configure(token_id_claim="uid", strict_on_error=True)``; unspecified
    options fall back to the environment.

    Raises:
        TypeError: an option is not a known setting.
    """
    unknown = sorted(set(options) - set(Settings.model_fields))
    if unknown:
        raise TypeError(f"Unknown revocation options: {', '.join(unknown)}")
    return RevocationEngine(Settings(**options), store)
