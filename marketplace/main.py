from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketplace.api.admin import router as admin_router
from marketplace.api.auth import router as auth_router
from marketplace.api.changes import router as changes_router
from marketplace.api.courses import router as courses_router
from marketplace.api.health import router as health_router
from marketplace.api.me import router as me_router
from marketplace.api.metrics_endpoint import router as metrics_router
from marketplace.core.config import SETTINGS
from marketplace.core.logging import setup_logging
from marketplace.db.engine import lifespan_db, session_scope, using_database
from marketplace.db.redis import lifespan_redis
from marketplace.middleware.metrics import MetricsMiddleware
from marketplace.middleware.request_context import RequestContextMiddleware
from marketplace.repos.registry import memory_repos, pg_repos
from marketplace.services.catalog_service import seed_if_empty

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


async def _seed_sample_catalog() -> None:
    if using_database():
        async with session_scope() as session:
            seeded = await seed_if_empty(pg_repos(session))
    else:
        seeded = await seed_if_empty(memory_repos())
    if not seeded:
        logger.info("Catalog already populated; startup seed skipped")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Nested so teardown runs in reverse order even if one fails.
    async with lifespan_db():
        async with lifespan_redis():
            if SETTINGS.seed_on_startup:
                await _seed_sample_catalog()
            yield


app = FastAPI(
    title="course-marketplace",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Middleware execution order: last-added runs first (outermost layer).
# RequestContext (outermost) → Metrics → CORS → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(courses_router)
app.include_router(me_router)
app.include_router(changes_router)
app.include_router(admin_router)

logger.info(
    "course-marketplace started  env=%s log_level=%s port=%d docs=%s db=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
    "postgres" if using_database() else "memory",
)
