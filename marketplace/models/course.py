from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID, uuid4

Difficulty = Literal["beginner", "intermediate", "advanced"]


@dataclass(frozen=True, slots=True)
class Course:
    """A purchasable unit of content.

    The lesson count is not stored here; it is derived from the lessons
    that reference the course so the two can never disagree.
    """

    id: UUID
    title: str
    subject: str
    description: str
    price: float
    image_url: str
    difficulty: Difficulty
    age_range: str  # e.g. "8-10"
    featured: bool = False

    @staticmethod
    def new(
        *,
        title: str,
        subject: str,
        description: str,
        price: float,
        image_url: str,
        difficulty: Difficulty,
        age_range: str,
        featured: bool = False,
    ) -> Course:
        return Course(
            id=uuid4(),
            title=title,
            subject=subject,
            description=description,
            price=price,
            image_url=image_url,
            difficulty=difficulty,
            age_range=age_range,
            featured=featured,
        )


@dataclass(frozen=True, slots=True)
class Lesson:
    id: UUID
    course_id: UUID
    title: str
    description: str
    video_url: str
    duration: int  # seconds
    order: int  # 1-based, unique within the course
    thumbnail: str

    @staticmethod
    def new(
        *,
        course_id: UUID,
        title: str,
        description: str,
        video_url: str,
        duration: int,
        order: int,
        thumbnail: str,
    ) -> Lesson:
        return Lesson(
            id=uuid4(),
            course_id=course_id,
            title=title,
            description=description,
            video_url=video_url,
            duration=duration,
            order=order,
            thumbnail=thumbnail,
        )


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """A course as the catalog presents it, with its derived lesson count."""

    course: Course
    total_lessons: int
