"""PostgreSQL implementation of ProgressRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.db.tables import ProgressRow
from marketplace.models.progress import LessonProgress


class PgProgressRepo:
    """Satisfies the ProgressRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str, lesson_id: UUID) -> LessonProgress | None:
        stmt = select(ProgressRow).where(
            ProgressRow.user_id == UUID(user_id),
            ProgressRow.lesson_id == lesson_id,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_progress(row)

    async def add(self, progress: LessonProgress) -> LessonProgress:
        # A concurrent completion may have inserted between the caller's
        # lookup and this insert; fold into that row (last write wins).
        stmt = (
            insert(ProgressRow)
            .values(
                id=progress.id,
                user_id=UUID(progress.user_id),
                course_id=progress.course_id,
                lesson_id=progress.lesson_id,
                completed=progress.completed,
                watch_time=progress.watch_time,
                last_watched=progress.last_watched,
            )
            .on_conflict_do_update(
                constraint="uq_progress_user_lesson",
                set_={
                    "completed": progress.completed,
                    "watch_time": progress.watch_time,
                    "last_watched": progress.last_watched,
                },
            )
            .returning(ProgressRow)
        )
        row = (await self._session.execute(stmt)).scalar_one()
        return _row_to_progress(row)

    async def update(self, progress: LessonProgress) -> None:
        stmt = (
            update(ProgressRow)
            .where(ProgressRow.id == progress.id)
            .values(
                completed=progress.completed,
                watch_time=progress.watch_time,
                last_watched=progress.last_watched,
            )
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise KeyError("progress not found")

    async def list_by_user_course(
        self, user_id: str, course_id: UUID
    ) -> list[LessonProgress]:
        stmt = select(ProgressRow).where(
            ProgressRow.user_id == UUID(user_id),
            ProgressRow.course_id == course_id,
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_progress(r) for r in rows]


def _row_to_progress(row: ProgressRow) -> LessonProgress:
    return LessonProgress(
        id=row.id,
        user_id=str(row.user_id),
        course_id=row.course_id,
        lesson_id=row.lesson_id,
        completed=row.completed,
        watch_time=row.watch_time,
        last_watched=row.last_watched,
    )
