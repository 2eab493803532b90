"""Per-lesson completion tracking."""

from __future__ import annotations

import logging
from dataclasses import replace
from uuid import UUID

from marketplace.core.clock import now_ms
from marketplace.core.metrics import LESSON_COMPLETIONS
from marketplace.models.progress import CourseProgressSummary, LessonProgress
from marketplace.repos.registry import Repos
from marketplace.services.catalog_service import CourseNotFoundError

logger = logging.getLogger(__name__)


class LessonNotFoundError(LookupError):
    pass


async def complete_lesson(
    repos: Repos,
    user_id: str,
    course_id: UUID,
    lesson_id: UUID,
    watch_time: int,
) -> LessonProgress:
    """Mark a lesson completed for ``user_id``.

    One record per (user, lesson).  A repeat completion overwrites
    watch_time with the value just reported (it is not summed or maxed)
    and restamps last_watched.
    """
    if await repos.catalog.get_course(course_id) is None:
        raise CourseNotFoundError(str(course_id))
    lesson = await repos.catalog.get_lesson(lesson_id)
    if lesson is None or lesson.course_id != course_id:
        raise LessonNotFoundError(str(lesson_id))

    log_extra = {
        "user_id": user_id,
        "course_id": str(course_id),
        "lesson_id": str(lesson_id),
    }
    now = now_ms()
    existing = await repos.progress.get(user_id, lesson_id)

    if existing is not None:
        progress = replace(
            existing, completed=True, watch_time=watch_time, last_watched=now
        )
        await repos.progress.update(progress)
        repos.record_change("progress", "update")
        LESSON_COMPLETIONS.labels(outcome="updated").inc()
        logger.info(
            "Lesson re-completed user=%s lesson=%s watch_time=%d",
            user_id,
            lesson_id,
            watch_time,
            extra=log_extra,
        )
        return progress

    progress = await repos.progress.add(
        LessonProgress.new(
            user_id=user_id,
            course_id=course_id,
            lesson_id=lesson_id,
            watch_time=watch_time,
            last_watched=now,
        )
    )
    repos.record_change("progress", "insert")
    LESSON_COMPLETIONS.labels(outcome="created").inc()
    logger.info(
        "Lesson completed user=%s lesson=%s watch_time=%d",
        user_id,
        lesson_id,
        watch_time,
        extra=log_extra,
    )
    return progress


async def list_progress(
    repos: Repos, user_id: str | None, course_id: UUID
) -> list[LessonProgress]:
    if user_id is None:
        return []
    return await repos.progress.list_by_user_course(user_id, course_id)


async def course_summary(
    repos: Repos, user_id: str | None, course_id: UUID
) -> CourseProgressSummary:
    counts = await repos.catalog.lesson_counts([course_id])
    records = await list_progress(repos, user_id, course_id)
    return CourseProgressSummary(
        course_id=course_id,
        completed_lessons=sum(1 for p in records if p.completed),
        total_lessons=counts.get(course_id, 0),
    )
