from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from marketplace.main import app
from marketplace.models.course import Course
from marketplace.repos.catalog_repo import InMemoryCatalogRepo
from marketplace.repos.progress_repo import InMemoryProgressRepo
from marketplace.repos.purchase_repo import InMemoryPurchaseRepo
from marketplace.repos.registry import (
    Repos,
    catalog_repo,
    memory_repos,
    progress_repo,
    purchase_repo,
    user_repo,
)
from marketplace.repos.user_repo import InMemoryUserRepo
from marketplace.services import catalog_service, token_service
from marketplace.services.change_feed import change_feed

# Ensure repo root is on sys.path so `import marketplace` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_catalog_state() -> None:
    catalog_repo._courses.clear()
    catalog_repo._lessons.clear()


@pytest.fixture(autouse=True)
def reset_learner_state() -> None:
    """Clear purchases, progress and accounts between tests."""
    purchase_repo._by_key.clear()
    progress_repo._by_key.clear()
    user_repo._by_email.clear()
    user_repo._by_id.clear()


@pytest.fixture(autouse=True)
def reset_change_feed() -> None:
    if hasattr(change_feed, "_version"):
        change_feed._version = 0  # type: ignore[union-attr]
    if hasattr(change_feed, "_subscribers"):
        change_feed._subscribers.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token() -> str:
    """Token with default role (user)."""
    return mint_token()


@pytest.fixture
def admin_token() -> str:
    """Token with admin role."""
    return mint_token(username="test-admin", roles=["user", "admin"])


# ---------------------------------------------------------------------------
# Catalog helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def seeded() -> list[Course]:
    """Write the sample catalog; return its courses in insertion order."""
    asyncio.run(catalog_service.reseed_catalog(memory_repos()))
    return asyncio.run(catalog_repo.list_courses())


def course_titled(courses: list[Course], title: str) -> Course:
    return next(c for c in courses if c.title == title)


@pytest.fixture
def repos() -> Repos:
    """Private in-memory stores for service-level tests."""
    return Repos(
        catalog=InMemoryCatalogRepo(),
        purchases=InMemoryPurchaseRepo(),
        progress=InMemoryProgressRepo(),
        users=InMemoryUserRepo(),
    )
