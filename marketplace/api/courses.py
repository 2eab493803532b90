"""Catalog, purchase and lesson-progress endpoints under /v1/courses.

Reads are public.  Entitlement and progress reads take an optional bearer
token and answer "no access" / "no progress" for anonymous callers;
purchasing and completing a lesson require one.
"""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from marketplace.api.dependencies import OptionalUserDep, ReposDep, UserDep
from marketplace.models.course import CatalogEntry, Course, Difficulty, Lesson
from marketplace.models.progress import LessonProgress
from marketplace.models.purchase import Purchase
from marketplace.services import (
    catalog_service,
    enrollment_service,
    progress_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/courses", tags=["courses"])


# --- Response / Request schemas -------------------------------------------


class CourseOut(BaseModel):
    id: str
    title: str
    subject: str
    description: str
    price: float
    image_url: str
    difficulty: str
    age_range: str
    featured: bool
    total_lessons: int

    @staticmethod
    def build(course: Course, total_lessons: int) -> CourseOut:
        return CourseOut(
            id=str(course.id),
            title=course.title,
            subject=course.subject,
            description=course.description,
            price=course.price,
            image_url=course.image_url,
            difficulty=course.difficulty,
            age_range=course.age_range,
            featured=course.featured,
            total_lessons=total_lessons,
        )

    @staticmethod
    def from_entry(entry: CatalogEntry) -> CourseOut:
        return CourseOut.build(entry.course, entry.total_lessons)


class LessonOut(BaseModel):
    id: str
    course_id: str
    title: str
    description: str
    video_url: str
    duration: int
    order: int
    thumbnail: str

    @staticmethod
    def from_lesson(lesson: Lesson) -> LessonOut:
        return LessonOut(
            id=str(lesson.id),
            course_id=str(lesson.course_id),
            title=lesson.title,
            description=lesson.description,
            video_url=lesson.video_url,
            duration=lesson.duration,
            order=lesson.order,
            thumbnail=lesson.thumbnail,
        )


class ProgressOut(BaseModel):
    id: str
    user_id: str
    course_id: str
    lesson_id: str
    completed: bool
    watch_time: int
    last_watched: int

    @staticmethod
    def from_progress(p: LessonProgress) -> ProgressOut:
        return ProgressOut(
            id=str(p.id),
            user_id=p.user_id,
            course_id=str(p.course_id),
            lesson_id=str(p.lesson_id),
            completed=p.completed,
            watch_time=p.watch_time,
            last_watched=p.last_watched,
        )


class ProgressSummaryOut(BaseModel):
    course_id: str
    completed_lessons: int
    total_lessons: int
    percent_complete: float


class AccessOut(BaseModel):
    has_access: bool


class PurchaseIn(BaseModel):
    # Omitted: charge the course's list price.
    amount: float | None = Field(default=None, ge=0)


class PurchaseOut(BaseModel):
    id: str
    user_id: str
    course_id: str
    purchased_at: int
    amount: float

    @staticmethod
    def from_purchase(p: Purchase) -> PurchaseOut:
        return PurchaseOut(
            id=str(p.id),
            user_id=p.user_id,
            course_id=str(p.course_id),
            purchased_at=p.purchased_at,
            amount=p.amount,
        )


class CompleteLessonIn(BaseModel):
    watch_time: int = Field(ge=0)


def _course_not_found(course_id: UUID) -> HTTPException:
    logger.warning("Course not found  course_id=%s", course_id)
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Course not found"
    )


# --- Catalog reads --------------------------------------------------------
# Literal paths are registered before /{course_id} so they are not parsed
# as a course id.


@router.get("", response_model=list[CourseOut])
async def list_courses(
    repos: ReposDep,
    subject: Annotated[str | None, Query()] = None,
) -> list[CourseOut]:
    entries = await catalog_service.list_courses(repos, subject=subject)
    return [CourseOut.from_entry(e) for e in entries]


@router.get("/featured", response_model=list[CourseOut])
async def list_featured(repos: ReposDep) -> list[CourseOut]:
    return [CourseOut.from_entry(e) for e in await catalog_service.list_featured(repos)]


@router.get("/search", response_model=list[CourseOut])
async def search_courses(
    repos: ReposDep,
    q: Annotated[str, Query(max_length=200)],
    subject: Annotated[str | None, Query()] = None,
    difficulty: Annotated[Difficulty | None, Query()] = None,
) -> list[CourseOut]:
    try:
        entries = await catalog_service.search_courses(
            repos, q, subject=subject, difficulty=difficulty
        )
    except catalog_service.SearchValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from None
    return [CourseOut.from_entry(e) for e in entries]


@router.get("/subjects", response_model=list[str])
async def list_subjects(repos: ReposDep) -> list[str]:
    return await catalog_service.list_subjects(repos)


@router.get("/{course_id}", response_model=CourseOut)
async def get_course(course_id: UUID, repos: ReposDep) -> CourseOut:
    try:
        entry = await catalog_service.get_course(repos, course_id)
    except catalog_service.CourseNotFoundError:
        raise _course_not_found(course_id) from None
    return CourseOut.from_entry(entry)


@router.get("/{course_id}/lessons", response_model=list[LessonOut])
async def list_lessons(course_id: UUID, repos: ReposDep) -> list[LessonOut]:
    try:
        lessons = await catalog_service.list_lessons(repos, course_id)
    except catalog_service.CourseNotFoundError:
        raise _course_not_found(course_id) from None
    return [LessonOut.from_lesson(lesson) for lesson in lessons]


# --- Entitlement ----------------------------------------------------------


@router.get("/{course_id}/access", response_model=AccessOut)
async def get_access(
    course_id: UUID, repos: ReposDep, principal: OptionalUserDep
) -> AccessOut:
    user_id = principal.user_id if principal is not None else None
    return AccessOut(
        has_access=await enrollment_service.has_access(repos, user_id, course_id)
    )


@router.post(
    "/{course_id}/purchase",
    response_model=PurchaseOut,
    status_code=status.HTTP_201_CREATED,
)
async def purchase_course(
    course_id: UUID,
    principal: UserDep,
    repos: ReposDep,
    payload: PurchaseIn | None = None,
) -> PurchaseOut:
    amount = payload.amount if payload is not None else None
    try:
        purchase = await enrollment_service.purchase_course(
            repos, principal.user_id, course_id, amount
        )
    except catalog_service.CourseNotFoundError:
        raise _course_not_found(course_id) from None
    except enrollment_service.AlreadyPurchasedError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Course already purchased",
        ) from None
    return PurchaseOut.from_purchase(purchase)


# --- Lesson progress ------------------------------------------------------


@router.get("/{course_id}/progress", response_model=list[ProgressOut])
async def list_progress(
    course_id: UUID, repos: ReposDep, principal: OptionalUserDep
) -> list[ProgressOut]:
    user_id = principal.user_id if principal is not None else None
    records = await progress_service.list_progress(repos, user_id, course_id)
    return [ProgressOut.from_progress(p) for p in records]


@router.get("/{course_id}/progress/summary", response_model=ProgressSummaryOut)
async def progress_summary(
    course_id: UUID, repos: ReposDep, principal: OptionalUserDep
) -> ProgressSummaryOut:
    user_id = principal.user_id if principal is not None else None
    summary = await progress_service.course_summary(repos, user_id, course_id)
    return ProgressSummaryOut(
        course_id=str(summary.course_id),
        completed_lessons=summary.completed_lessons,
        total_lessons=summary.total_lessons,
        percent_complete=summary.percent_complete,
    )


@router.post(
    "/{course_id}/lessons/{lesson_id}/complete",
    response_model=ProgressOut,
)
async def complete_lesson(
    course_id: UUID,
    lesson_id: UUID,
    payload: CompleteLessonIn,
    principal: UserDep,
    repos: ReposDep,
) -> ProgressOut:
    try:
        progress = await progress_service.complete_lesson(
            repos, principal.user_id, course_id, lesson_id, payload.watch_time
        )
    except catalog_service.CourseNotFoundError:
        raise _course_not_found(course_id) from None
    except progress_service.LessonNotFoundError:
        logger.warning(
            "Lesson not found  course_id=%s lesson_id=%s", course_id, lesson_id
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found"
        ) from None
    return ProgressOut.from_progress(progress)
