"""Course catalog reads, title search, and the sample-catalog reseed."""

from __future__ import annotations

import logging
from uuid import UUID

from marketplace.core.metrics import CATALOG_RESEEDS
from marketplace.models.course import CatalogEntry, Course, Lesson
from marketplace.repos.registry import Repos
from marketplace.services import sample_catalog

logger = logging.getLogger(__name__)

RESEED_MESSAGE = "Sample data created successfully!"


class CourseNotFoundError(LookupError):
    pass


class SearchValidationError(ValueError):
    pass


def search_terms(query: str) -> list[str]:
    terms = query.lower().split()
    if not terms:
        raise SearchValidationError("search term must be non-empty")
    return terms


async def _with_counts(repos: Repos, courses: list[Course]) -> list[CatalogEntry]:
    counts = await repos.catalog.lesson_counts([c.id for c in courses])
    return [CatalogEntry(course=c, total_lessons=counts.get(c.id, 0)) for c in courses]


async def list_courses(
    repos: Repos, *, subject: str | None = None
) -> list[CatalogEntry]:
    return await _with_counts(repos, await repos.catalog.list_courses(subject))


async def list_featured(repos: Repos) -> list[CatalogEntry]:
    return await _with_counts(repos, await repos.catalog.list_featured())


async def search_courses(
    repos: Repos,
    query: str,
    *,
    subject: str | None = None,
    difficulty: str | None = None,
) -> list[CatalogEntry]:
    """Courses whose title contains every term of ``query`` (case-insensitive).

    ``subject`` and ``difficulty`` are exact-match filters applied on top.
    """
    terms = search_terms(query)
    found = await repos.catalog.search(terms, subject=subject, difficulty=difficulty)
    return await _with_counts(repos, found)


async def list_subjects(repos: Repos) -> list[str]:
    return sorted({c.subject for c in await repos.catalog.list_courses()})


async def get_course(repos: Repos, course_id: UUID) -> CatalogEntry:
    course = await repos.catalog.get_course(course_id)
    if course is None:
        raise CourseNotFoundError(str(course_id))
    counts = await repos.catalog.lesson_counts([course_id])
    return CatalogEntry(course=course, total_lessons=counts[course_id])


async def list_lessons(repos: Repos, course_id: UUID) -> list[Lesson]:
    if await repos.catalog.get_course(course_id) is None:
        raise CourseNotFoundError(str(course_id))
    return await repos.catalog.list_lessons(course_id)


async def reseed_catalog(repos: Repos) -> str:
    """Delete every course and lesson, then write the sample catalog.

    Purchases and progress are left alone; after a reseed they point at
    course IDs that no longer exist.
    """
    deleted_courses, deleted_lessons = await repos.catalog.clear()

    for sample in sample_catalog.SAMPLE_COURSES:
        course = sample_catalog.build_course(sample)
        await repos.catalog.add_course(course)
        for lesson in sample_catalog.build_lessons(sample, course.id):
            await repos.catalog.add_lesson(lesson)

    repos.record_change("courses", "delete")
    repos.record_change("lessons", "delete")
    repos.record_change("courses", "insert")
    repos.record_change("lessons", "insert")
    CATALOG_RESEEDS.inc()

    logger.info(
        "Catalog reseeded  deleted_courses=%d deleted_lessons=%d "
        "courses=%d lessons=%d",
        deleted_courses,
        deleted_lessons,
        sample_catalog.SAMPLE_COURSE_COUNT,
        sample_catalog.SAMPLE_LESSON_COUNT,
    )
    return RESEED_MESSAGE


async def seed_if_empty(repos: Repos) -> bool:
    """Write the sample catalog only when there are no courses yet."""
    if await repos.catalog.list_courses():
        return False
    await reseed_catalog(repos)
    return True
