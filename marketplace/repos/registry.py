"""One request's view of the stores.

Services take a ``Repos`` instead of four separate repositories.  It also
records which tables a request changed, so the change feed is notified
only after the request's writes are committed (see api/dependencies.py).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.repos.catalog_repo import CatalogRepo, InMemoryCatalogRepo
from marketplace.repos.pg_catalog_repo import PgCatalogRepo
from marketplace.repos.pg_progress_repo import PgProgressRepo
from marketplace.repos.pg_purchase_repo import PgPurchaseRepo
from marketplace.repos.pg_user_repo import PgUserRepo
from marketplace.repos.progress_repo import InMemoryProgressRepo, ProgressRepo
from marketplace.repos.purchase_repo import InMemoryPurchaseRepo, PurchaseRepo
from marketplace.repos.user_repo import InMemoryUserRepo, UserRepo


@dataclass(slots=True)
class Repos:
    catalog: CatalogRepo
    purchases: PurchaseRepo
    progress: ProgressRepo
    users: UserRepo
    changes: list[tuple[str, str]] = field(default_factory=list)

    def record_change(self, table: str, action: str) -> None:
        if (table, action) not in self.changes:
            self.changes.append((table, action))


# --- Module-level singletons for the in-memory backend ---
catalog_repo = InMemoryCatalogRepo()
purchase_repo = InMemoryPurchaseRepo()
progress_repo = InMemoryProgressRepo()
user_repo = InMemoryUserRepo()


def memory_repos() -> Repos:
    return Repos(
        catalog=catalog_repo,
        purchases=purchase_repo,
        progress=progress_repo,
        users=user_repo,
    )


def pg_repos(session: AsyncSession) -> Repos:
    return Repos(
        catalog=PgCatalogRepo(session),
        purchases=PgPurchaseRepo(session),
        progress=PgProgressRepo(session),
        users=PgUserRepo(session),
    )
