"""PostgreSQL implementation of CatalogRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import and_, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.db.tables import CourseRow, LessonRow
from marketplace.models.course import Course, Lesson


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PgCatalogRepo:
    """Satisfies the CatalogRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_courses(self, subject: str | None = None) -> list[Course]:
        stmt = select(CourseRow)
        if subject is not None:
            stmt = stmt.where(CourseRow.subject == subject)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def list_featured(self) -> list[Course]:
        stmt = select(CourseRow).where(CourseRow.featured.is_(True))
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def search(
        self,
        terms: list[str],
        *,
        subject: str | None = None,
        difficulty: str | None = None,
    ) -> list[Course]:
        clauses = [
            CourseRow.title.ilike(f"%{_escape_like(t)}%", escape="\\") for t in terms
        ]
        if subject is not None:
            clauses.append(CourseRow.subject == subject)
        if difficulty is not None:
            clauses.append(CourseRow.difficulty == difficulty)
        stmt = select(CourseRow).where(and_(*clauses))
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def get_course(self, course_id: UUID) -> Course | None:
        row = await self._session.get(CourseRow, course_id)
        if row is None:
            return None
        return _row_to_course(row)

    async def get_courses(self, course_ids: list[UUID]) -> dict[UUID, Course]:
        if not course_ids:
            return {}
        stmt = select(CourseRow).where(CourseRow.id.in_(course_ids))
        rows = (await self._session.execute(stmt)).scalars().all()
        return {r.id: _row_to_course(r) for r in rows}

    async def list_lessons(self, course_id: UUID) -> list[Lesson]:
        stmt = (
            select(LessonRow)
            .where(LessonRow.course_id == course_id)
            .order_by(LessonRow.position)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_lesson(r) for r in rows]

    async def get_lesson(self, lesson_id: UUID) -> Lesson | None:
        row = await self._session.get(LessonRow, lesson_id)
        if row is None:
            return None
        return _row_to_lesson(row)

    async def lesson_counts(self, course_ids: list[UUID]) -> dict[UUID, int]:
        if not course_ids:
            return {}
        stmt = (
            select(LessonRow.course_id, func.count())
            .where(LessonRow.course_id.in_(course_ids))
            .group_by(LessonRow.course_id)
        )
        found = dict((await self._session.execute(stmt)).tuples().all())
        return {cid: found.get(cid, 0) for cid in course_ids}

    async def add_course(self, course: Course) -> None:
        self._session.add(
            CourseRow(
                id=course.id,
                title=course.title,
                subject=course.subject,
                description=course.description,
                price=course.price,
                image_url=course.image_url,
                difficulty=course.difficulty,
                age_range=course.age_range,
                featured=course.featured,
            )
        )
        await self._session.flush()

    async def add_lesson(self, lesson: Lesson) -> None:
        self._session.add(
            LessonRow(
                id=lesson.id,
                course_id=lesson.course_id,
                title=lesson.title,
                description=lesson.description,
                video_url=lesson.video_url,
                duration=lesson.duration,
                position=lesson.order,
                thumbnail=lesson.thumbnail,
            )
        )
        await self._session.flush()

    async def clear(self) -> tuple[int, int]:
        lessons = await self._session.execute(delete(LessonRow))
        courses = await self._session.execute(delete(CourseRow))
        return courses.rowcount, lessons.rowcount


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        title=row.title,
        subject=row.subject,
        description=row.description,
        price=row.price,
        image_url=row.image_url,
        difficulty=row.difficulty,  # type: ignore[arg-type]
        age_range=row.age_range,
        featured=row.featured,
    )


def _row_to_lesson(row: LessonRow) -> Lesson:
    return Lesson(
        id=row.id,
        course_id=row.course_id,
        title=row.title,
        description=row.description,
        video_url=row.video_url,
        duration=row.duration,
        order=row.position,
        thumbnail=row.thumbnail,
    )
