from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class LessonProgress:
    """Per-user, per-lesson completion record: one per (user, lesson)."""

    id: UUID
    user_id: str
    course_id: UUID
    lesson_id: UUID
    completed: bool
    watch_time: int  # seconds, latest reported value
    last_watched: int  # epoch ms

    @staticmethod
    def new(
        *,
        user_id: str,
        course_id: UUID,
        lesson_id: UUID,
        watch_time: int,
        last_watched: int,
        completed: bool = True,
    ) -> LessonProgress:
        return LessonProgress(
            id=uuid4(),
            user_id=user_id,
            course_id=course_id,
            lesson_id=lesson_id,
            completed=completed,
            watch_time=watch_time,
            last_watched=last_watched,
        )


@dataclass(frozen=True, slots=True)
class CourseProgressSummary:
    """Read model behind the course page progress bar."""

    course_id: UUID
    completed_lessons: int
    total_lessons: int

    @property
    def percent_complete(self) -> float:
        if self.total_lessons == 0:
            return 0.0
        return round(self.completed_lessons / self.total_lessons * 100, 1)
