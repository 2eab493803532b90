"""Purchases: entitlement checks, buying a course, the learner's library."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from marketplace.core.clock import now_ms
from marketplace.core.metrics import COURSE_PURCHASES
from marketplace.models.purchase import OwnedCourse, Purchase
from marketplace.repos.registry import Repos
from marketplace.services.catalog_service import CourseNotFoundError

logger = logging.getLogger(__name__)


class AlreadyPurchasedError(Exception):
    pass


@dataclass(frozen=True, slots=True)
class DashboardStats:
    courses_owned: int = 0
    total_lessons: int = 0
    total_invested: float = 0.0
    subjects: int = 0


async def has_access(repos: Repos, user_id: str | None, course_id: UUID) -> bool:
    if user_id is None:
        return False
    return await repos.purchases.get(user_id, course_id) is not None


async def purchase_course(
    repos: Repos,
    user_id: str,
    course_id: UUID,
    amount: float | None = None,
) -> Purchase:
    """Record that ``user_id`` bought ``course_id``.

    The existing-purchase lookup and the insert are two separate steps; the
    repository's uniqueness on (user, course) turns a lost race into the
    same AlreadyPurchasedError as the lookup.  ``amount`` defaults to the
    course's list price.
    """
    course = await repos.catalog.get_course(course_id)
    if course is None:
        raise CourseNotFoundError(str(course_id))

    if await repos.purchases.get(user_id, course_id) is not None:
        COURSE_PURCHASES.labels(result="duplicate").inc()
        logger.warning(
            "Duplicate purchase rejected user=%s course=%s",
            user_id,
            course_id,
            extra={"user_id": user_id, "course_id": str(course_id)},
        )
        raise AlreadyPurchasedError("Course already purchased")

    purchase = Purchase.new(
        user_id=user_id,
        course_id=course_id,
        purchased_at=now_ms(),
        amount=course.price if amount is None else amount,
    )
    try:
        await repos.purchases.add(purchase)
    except ValueError:
        COURSE_PURCHASES.labels(result="duplicate").inc()
        raise AlreadyPurchasedError("Course already purchased") from None

    repos.record_change("purchases", "insert")
    COURSE_PURCHASES.labels(result="created").inc()
    logger.info(
        "Course purchased user=%s course=%s amount=%.2f",
        user_id,
        course_id,
        purchase.amount,
        extra={"user_id": user_id, "course_id": str(course_id)},
    )
    return purchase


async def list_owned_courses(repos: Repos, user_id: str | None) -> list[OwnedCourse]:
    if user_id is None:
        return []

    purchases = await repos.purchases.list_by_user(user_id)
    course_ids = [p.course_id for p in purchases]
    courses = await repos.catalog.get_courses(course_ids)
    counts = await repos.catalog.lesson_counts(course_ids)
    return [
        OwnedCourse(
            purchase=p,
            course=courses.get(p.course_id),
            total_lessons=counts.get(p.course_id, 0),
        )
        for p in purchases
    ]


async def dashboard(repos: Repos, user_id: str | None) -> DashboardStats:
    owned = await list_owned_courses(repos, user_id)
    if not owned:
        return DashboardStats()

    return DashboardStats(
        courses_owned=len(owned),
        total_lessons=sum(o.total_lessons for o in owned),
        total_invested=round(sum(o.purchase.amount for o in owned), 2),
        subjects=len({o.course.subject for o in owned if o.course is not None}),
    )
