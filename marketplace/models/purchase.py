from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4

from marketplace.models.course import Course


@dataclass(frozen=True, slots=True)
class Purchase:
    """Entitlement record: one per (user, course)."""

    id: UUID
    user_id: str
    course_id: UUID
    purchased_at: int  # epoch ms
    amount: float

    @staticmethod
    def new(
        *, user_id: str, course_id: UUID, purchased_at: int, amount: float
    ) -> Purchase:
        return Purchase(
            id=uuid4(),
            user_id=user_id,
            course_id=course_id,
            purchased_at=purchased_at,
            amount=amount,
        )


@dataclass(frozen=True, slots=True)
class OwnedCourse:
    """A purchase joined with its course.

    course is None when the catalog was reseeded after the purchase.
    """

    purchase: Purchase
    course: Course | None
    total_lessons: int = 0
