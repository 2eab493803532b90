from __future__ import annotations

from typing import Protocol
from uuid import UUID

from marketplace.models.progress import LessonProgress


class ProgressRepo(Protocol):
    async def get(self, user_id: str, lesson_id: UUID) -> LessonProgress | None: ...
    async def add(self, progress: LessonProgress) -> LessonProgress: ...
    async def update(self, progress: LessonProgress) -> None: ...
    async def list_by_user_course(
        self, user_id: str, course_id: UUID
    ) -> list[LessonProgress]: ...


class InMemoryProgressRepo:
    def __init__(self) -> None:
        self._by_key: dict[tuple[str, UUID], LessonProgress] = {}

    async def get(self, user_id: str, lesson_id: UUID) -> LessonProgress | None:
        return self._by_key.get((user_id, lesson_id))

    async def add(self, progress: LessonProgress) -> LessonProgress:
        key = (progress.user_id, progress.lesson_id)
        if key in self._by_key:
            raise ValueError("progress already exists for this lesson")
        self._by_key[key] = progress
        return progress

    async def update(self, progress: LessonProgress) -> None:
        key = (progress.user_id, progress.lesson_id)
        if key not in self._by_key:
            raise KeyError("progress not found")
        self._by_key[key] = progress

    async def list_by_user_course(
        self, user_id: str, course_id: UUID
    ) -> list[LessonProgress]:
        return [
            p
            for p in self._by_key.values()
            if p.user_id == user_id and p.course_id == course_id
        ]
