from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from marketplace.db.engine import session_scope, using_database
from marketplace.models.principal import Principal
from marketplace.repos.registry import Repos, memory_repos, pg_repos
from marketplace.services import token_service
from marketplace.services.change_feed import change_feed, publish_all

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")
# Same scheme, but a missing header yields None instead of a 401.
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def _principal_from_claims(claims: dict) -> Principal:
    return Principal(
        user_id=claims["sub"],
        roles=frozenset(claims.get("roles", [])),
    )


def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Validate the bearer token or fail with 401.

    Used by every write path (purchase, lesson completion) and by /auth/me.
    """
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = _principal_from_claims(claims)
    logger.debug("Token validated for user=%s", principal.user_id)
    return principal


def optional_user(
    raw_token: Annotated[str | None, Depends(optional_oauth2_scheme)],
) -> Principal | None:
    """Return the caller's Principal, or None for anonymous callers.

    Read paths use this: an anonymous (or expired) caller gets the empty
    answer (no access, no progress, no purchases) rather than an error.
    """
    if not raw_token:
        return None
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.debug("Expired token on read path; treating as anonymous")
        return None
    except jwt.InvalidTokenError:
        logger.debug("Invalid token on read path; treating as anonymous")
        return None
    return _principal_from_claims(claims)


def require_role(role: str):
    """Dependency factory: demand a specific role (403 otherwise)."""

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_role(role):
            logger.warning(
                "Access denied: user=%s missing role=%s",
                principal.user_id,
                role,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


async def get_repos() -> AsyncGenerator[Repos, None]:
    """Request-scoped stores.

    PostgreSQL when DATABASE_URL is set (one session per request, committed
    on success), otherwise the in-memory singletons.  Tables the request
    changed are announced on the change feed only once the writes are
    durable, so a subscriber that re-queries immediately sees them.
    """
    if not using_database():
        repos = memory_repos()
        yield repos
        await publish_all(change_feed, repos.changes)
        return

    async with session_scope() as session:
        repos = pg_repos(session)
        yield repos
    await publish_all(change_feed, repos.changes)


UserDep = Annotated[Principal, Depends(require_user)]
OptionalUserDep = Annotated[Principal | None, Depends(optional_user)]
ReposDep = Annotated[Repos, Depends(get_repos)]
