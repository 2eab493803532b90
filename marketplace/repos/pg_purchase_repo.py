"""PostgreSQL implementation of PurchaseRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.db.engine import is_unique_violation
from marketplace.db.tables import PurchaseRow
from marketplace.models.purchase import Purchase


class PgPurchaseRepo:
    """Satisfies the PurchaseRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str, course_id: UUID) -> Purchase | None:
        stmt = select(PurchaseRow).where(
            PurchaseRow.user_id == UUID(user_id),
            PurchaseRow.course_id == course_id,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_purchase(row)

    async def add(self, purchase: Purchase) -> None:
        row = PurchaseRow(
            id=purchase.id,
            user_id=UUID(purchase.user_id),
            course_id=purchase.course_id,
            purchased_at=purchase.purchased_at,
            amount=purchase.amount,
        )
        # Savepoint so a lost race on the unique constraint leaves the
        # request's session usable.
        try:
            async with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError as e:
            if not is_unique_violation(e):
                raise
            raise ValueError("purchase already exists") from None

    async def list_by_user(self, user_id: str) -> list[Purchase]:
        stmt = (
            select(PurchaseRow)
            .where(PurchaseRow.user_id == UUID(user_id))
            .order_by(PurchaseRow.purchased_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_purchase(r) for r in rows]


def _row_to_purchase(row: PurchaseRow) -> Purchase:
    return Purchase(
        id=row.id,
        user_id=str(row.user_id),
        course_id=row.course_id,
        purchased_at=row.purchased_at,
        amount=row.amount,
    )
