"""Integration tests for gating FastAPI routes on token revocation."""

import time
from collections.abc import AsyncGenerator
from typing import Annotated, Any
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from httpx import ASGITransport, AsyncClient
from jose import JWTError

from jwt_revocation.config import Settings
from jwt_revocation.dependencies import require_unrevoked, revocation_lifespan
from jwt_revocation.engine import RevocationEngine
from jwt_revocation.exceptions import StoreError
from jwt_revocation.stores import MemoryStore
from tests.helpers.token_factory import create_token, decode_token

bearer = HTTPBearer()


async def get_claims(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer)],
) -> dict[str, Any]:
    """Verify the bearer token signature and return its claims."""
    try:
        return decode_token(credentials.credentials)
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from exc


ActiveClaims = Annotated[dict[str, Any], Depends(require_unrevoked(get_claims))]


def _make_app() -> FastAPI:
    app = FastAPI()

    @app.get("/me")
    async def me(claims: ActiveClaims) -> dict[str, Any]:
        return {"sub": claims.get("sub")}

    return app


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def revocation_engine() -> RevocationEngine:
    return RevocationEngine(Settings(store_type="memory"), MemoryStore())


@pytest_asyncio.fixture()
async def client(revocation_engine) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to an app with an in-memory engine."""
    app = _make_app()
    app.state.revocation_engine = revocation_engine

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestRequireUnrevoked:
    """Tests for the require_unrevoked dependency."""

    async def test_active_token_passes(self, client):
        response = await client.get("/me", headers=_auth(create_token("user-1")))

        assert response.status_code == 200
        assert response.json() == {"sub": "user-1"}

    async def test_revoked_token_is_rejected(self, client, revocation_engine):
        token = create_token("user-1")
        await revocation_engine.revoke(decode_token(token))

        response = await client.get("/me", headers=_auth(token))

        assert response.status_code == 401
        assert response.json()["detail"] == "Token has been revoked"
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_revoke_leaves_other_sessions_active(self, client, revocation_engine):
        now = int(time.time())
        old = create_token("user-1", iat=now - 60)
        await revocation_engine.revoke(decode_token(old))

        response = await client.get("/me", headers=_auth(create_token("user-1", iat=now)))

        assert response.status_code == 200

    async def test_purge_rejects_older_tokens(self, client, revocation_engine):
        now = int(time.time())
        old = create_token("user-1", iat=now - 60)
        await revocation_engine.purge({"sub": "user-1"}, 3600)

        rejected = await client.get("/me", headers=_auth(old))
        accepted = await client.get("/me", headers=_auth(create_token("user-1", iat=now + 5)))

        assert rejected.status_code == 401
        assert accepted.status_code == 200

    async def test_missing_subject_is_rejected(self, client):
        response = await client.get("/me", headers=_auth(create_token(sub=None)))

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token claims"

    async def test_bad_signature_never_reaches_engine(self, client):
        token = create_token("user-1")[:-4] + "XXXX"

        response = await client.get("/me", headers=_auth(token))

        assert response.status_code == 401

    async def test_store_outage_fails_open_by_default(self, client, revocation_engine):
        revocation_engine.store.batch_read = AsyncMock(side_effect=StoreError("down"))

        response = await client.get("/me", headers=_auth(create_token("user-1")))

        assert response.status_code == 200


class TestLifespan:
    """Tests for revocation_lifespan."""

    async def test_lifespan_installs_engine(self, monkeypatch):
        monkeypatch.setattr(
            "jwt_revocation.dependencies.get_settings", lambda: Settings(store_type="memory")
        )
        app = FastAPI()

        async with revocation_lifespan(app):
            assert isinstance(app.state.revocation_engine, RevocationEngine)
            assert isinstance(app.state.revocation_engine.store, MemoryStore)

    async def test_missing_engine_is_a_configuration_error(self):
        transport = ASGITransport(app=_make_app())

        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            with pytest.raises(RuntimeError, match="revocation_engine"):
                await ac.get("/me", headers=_auth(create_token("user-1")))
