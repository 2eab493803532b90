from __future__ import annotations

from typing import Protocol
from uuid import UUID

from marketplace.models.purchase import Purchase


class PurchaseRepo(Protocol):
    async def get(self, user_id: str, course_id: UUID) -> Purchase | None: ...
    async def add(self, purchase: Purchase) -> None: ...
    async def list_by_user(self, user_id: str) -> list[Purchase]: ...


class InMemoryPurchaseRepo:
    def __init__(self) -> None:
        self._by_key: dict[tuple[str, UUID], Purchase] = {}

    async def get(self, user_id: str, course_id: UUID) -> Purchase | None:
        return self._by_key.get((user_id, course_id))

    async def add(self, purchase: Purchase) -> None:
        key = (purchase.user_id, purchase.course_id)
        if key in self._by_key:
            raise ValueError("purchase already exists")
        self._by_key[key] = purchase

    async def list_by_user(self, user_id: str) -> list[Purchase]:
        owned = [p for (uid, _), p in self._by_key.items() if uid == user_id]
        return sorted(owned, key=lambda p: p.purchased_at)
