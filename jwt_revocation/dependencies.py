"""FastAPI dependencies for rejecting revoked tokens.

Signature verification stays with the caller: ``require_unrevoked`` wraps
whatever dependency already decodes and verifies the JWT, and only adds the
revocation check on top::

    app = FastAPI(lifespan=revocation_lifespan)

    @app.get("/me")
    async def me(claims: Annotated[dict, Depends(require_unrevoked(get_claims))]):
        ...
"""

import logging
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI, HTTPException, Request, status

from jwt_revocation.config import get_settings
from jwt_revocation.engine import RevocationEngine
from jwt_revocation.exceptions import RevocationValidationError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def revocation_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan that owns the engine stored on ``app.state``."""
    engine = RevocationEngine(get_settings())
    app.state.revocation_engine = engine
    logger.info("Revocation engine started (store=%s)", type(engine.store).__name__)
    try:
        yield
    finally:
        await engine.close()


def get_revocation_engine(request: Request) -> RevocationEngine:
    """Dependency that provides the engine from app.state."""
    engine = getattr(request.app.state, "revocation_engine", None)
    if engine is None:
        raise RuntimeError("app.state.revocation_engine is not configured")
    return engine


RevocationEngineDep = Annotated[RevocationEngine, Depends(get_revocation_engine)]


def require_unrevoked(get_claims: Callable[..., Any]):
    """Dependency factory that rejects revoked tokens with 401.

    *get_claims* must return the verified JWT payload as a mapping.
    """

    async def _check_revocation(
        claims: Annotated[dict[str, Any], Depends(get_claims)],
        engine: RevocationEngineDep,
    ) -> dict[str, Any]:
        try:
            revoked = await engine.is_revoked(claims)
        except RevocationValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token claims",
                headers={"WWW-Authenticate": "Bearer"},
            ) from exc
        if revoked:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has been revoked",
                headers={"WWW-Authenticate": "Bearer"},
            )
        return claims

    return _check_revocation
