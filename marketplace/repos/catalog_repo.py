from __future__ import annotations

from collections import Counter
from typing import Protocol
from uuid import UUID

from marketplace.models.course import Course, Lesson


def title_matches(title: str, terms: list[str]) -> bool:
    """True when every (lower-cased) term occurs somewhere in the title."""
    lowered = title.lower()
    return all(term in lowered for term in terms)


class CatalogRepo(Protocol):
    async def list_courses(self, subject: str | None = None) -> list[Course]: ...
    async def list_featured(self) -> list[Course]: ...
    async def search(
        self,
        terms: list[str],
        *,
        subject: str | None = None,
        difficulty: str | None = None,
    ) -> list[Course]: ...
    async def get_course(self, course_id: UUID) -> Course | None: ...
    async def get_courses(self, course_ids: list[UUID]) -> dict[UUID, Course]: ...
    async def list_lessons(self, course_id: UUID) -> list[Lesson]: ...
    async def get_lesson(self, lesson_id: UUID) -> Lesson | None: ...
    async def lesson_counts(self, course_ids: list[UUID]) -> dict[UUID, int]: ...
    async def add_course(self, course: Course) -> None: ...
    async def add_lesson(self, lesson: Lesson) -> None: ...
    async def clear(self) -> tuple[int, int]: ...


class InMemoryCatalogRepo:
    """Courses and lessons in insertion order."""

    def __init__(self) -> None:
        self._courses: dict[UUID, Course] = {}
        self._lessons: dict[UUID, Lesson] = {}

    async def list_courses(self, subject: str | None = None) -> list[Course]:
        return [
            c
            for c in self._courses.values()
            if subject is None or c.subject == subject
        ]

    async def list_featured(self) -> list[Course]:
        return [c for c in self._courses.values() if c.featured]

    async def search(
        self,
        terms: list[str],
        *,
        subject: str | None = None,
        difficulty: str | None = None,
    ) -> list[Course]:
        return [
            c
            for c in self._courses.values()
            if title_matches(c.title, terms)
            and (subject is None or c.subject == subject)
            and (difficulty is None or c.difficulty == difficulty)
        ]

    async def get_course(self, course_id: UUID) -> Course | None:
        return self._courses.get(course_id)

    async def get_courses(self, course_ids: list[UUID]) -> dict[UUID, Course]:
        return {cid: self._courses[cid] for cid in course_ids if cid in self._courses}

    async def list_lessons(self, course_id: UUID) -> list[Lesson]:
        lessons = [x for x in self._lessons.values() if x.course_id == course_id]
        return sorted(lessons, key=lambda x: x.order)

    async def get_lesson(self, lesson_id: UUID) -> Lesson | None:
        return self._lessons.get(lesson_id)

    async def lesson_counts(self, course_ids: list[UUID]) -> dict[UUID, int]:
        wanted = set(course_ids)
        counts = Counter(
            x.course_id for x in self._lessons.values() if x.course_id in wanted
        )
        return {cid: counts.get(cid, 0) for cid in course_ids}

    async def add_course(self, course: Course) -> None:
        if course.id in self._courses:
            raise ValueError("course already exists")
        self._courses[course.id] = course

    async def add_lesson(self, lesson: Lesson) -> None:
        if lesson.course_id not in self._courses:
            raise KeyError("course not found")
        if any(
            x.course_id == lesson.course_id and x.order == lesson.order
            for x in self._lessons.values()
        ):
            raise ValueError("lesson order already taken in this course")
        self._lessons[lesson.id] = lesson

    async def clear(self) -> tuple[int, int]:
        deleted = (len(self._courses), len(self._lessons))
        self._courses.clear()
        self._lessons.clear()
        return deleted
