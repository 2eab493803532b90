"""The signed-in learner's library and dashboard stats.

Both answer with an empty result for anonymous callers.
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from marketplace.api.courses import CourseOut, PurchaseOut
from marketplace.api.dependencies import OptionalUserDep, ReposDep
from marketplace.services import enrollment_service

router = APIRouter(prefix="/v1/me", tags=["me"])


class OwnedCourseOut(BaseModel):
    purchase: PurchaseOut
    # None once a reseed has removed the purchased course.
    course: CourseOut | None


class DashboardOut(BaseModel):
    courses_owned: int
    total_lessons: int
    total_invested: float
    subjects: int


@router.get("/purchases", response_model=list[OwnedCourseOut])
async def list_purchases(
    repos: ReposDep, principal: OptionalUserDep
) -> list[OwnedCourseOut]:
    user_id = principal.user_id if principal is not None else None
    owned = await enrollment_service.list_owned_courses(repos, user_id)
    return [
        OwnedCourseOut(
            purchase=PurchaseOut.from_purchase(o.purchase),
            course=(
                CourseOut.build(o.course, o.total_lessons)
                if o.course is not None
                else None
            ),
        )
        for o in owned
    ]


@router.get("/dashboard", response_model=DashboardOut)
async def dashboard(repos: ReposDep, principal: OptionalUserDep) -> DashboardOut:
    user_id = principal.user_id if principal is not None else None
    stats = await enrollment_service.dashboard(repos, user_id)
    return DashboardOut(
        courses_owned=stats.courses_owned,
        total_lessons=stats.total_lessons,
        total_invested=stats.total_invested,
        subjects=stats.subjects,
    )
