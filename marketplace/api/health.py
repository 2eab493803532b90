"""Health and readiness endpoints.

  /health (liveness): "Is this process alive?"  Always 200; the body's
    status says whether a configured backend (PostgreSQL, Redis) is
    reachable.  Restarting the container would not fix an unreachable
    database, so a partial outage is reported, not failed.

  /ready (readiness): "Can this instance take traffic?"  Both backends
    are optional (in-memory fallbacks), so readiness only fails when a
    configured database cannot be reached.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response

from marketplace.db.engine import engine, ping_database
from marketplace.db.redis import redis_pool

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _redis_status() -> str:
    if redis_pool is None:
        return "not_configured"
    try:
        await redis_pool.ping()  # type: ignore[misc]
    except Exception:
        logger.warning("Redis ping failed", exc_info=True)
        return "degraded"
    return "ok"


async def _database_status() -> str:
    if engine is None:
        return "not_configured"
    return "ok" if await ping_database() else "degraded"


@router.get("/health")
async def health() -> dict:
    checks = {
        "redis": await _redis_status(),
        "database": await _database_status(),
    }
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> Response:
    if await _database_status() == "degraded":
        return Response(status_code=503)
    return Response(status_code=200)
