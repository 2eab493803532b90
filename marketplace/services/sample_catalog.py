"""The fixed sample catalog written by a reseed.

Six courses.  The first two carry hand-written lessons; the rest get
generated "Part N" lessons, one per entry in ``lesson_count``.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from marketplace.models.course import Course, Difficulty, Lesson

_VIDEO_URL = "https://sample-videos.com/zip/10/mp4/SampleVideo_{n}.mp4"
_IMAGE_URL = "https://images.unsplash.com/photo-{photo}?w=400&h=300&fit=crop"
_THUMBNAIL_URL = "https://images.unsplash.com/photo-{photo}?w=300&h=200&fit=crop"
_THUMBNAIL_BASE = 1500000000000


@dataclass(frozen=True, slots=True)
class SampleLesson:
    title: str
    description: str
    duration: int


@dataclass(frozen=True, slots=True)
class SampleCourse:
    title: str
    subject: str
    description: str
    price: float
    image_url: str
    difficulty: Difficulty
    age_range: str
    featured: bool
    lesson_count: int
    lessons: tuple[SampleLesson, ...] = ()


SAMPLE_COURSES: tuple[SampleCourse, ...] = (
    SampleCourse(
        title="Fun with Numbers: Basic Math Adventures",
        subject="Math",
        description=(
            "Learn counting, addition, and subtraction through exciting games "
            "and colorful animations. Perfect for young learners!"
        ),
        price=29.99,
        image_url=_IMAGE_URL.format(photo="1596495578065-6e0763fa1178"),
        difficulty="beginner",
        age_range="6-8",
        featured=True,
        lesson_count=8,
        lessons=(
            SampleLesson(
                "Counting to 10", "Learn to count from 1 to 10 with fun animations", 300
            ),
            SampleLesson("Number Recognition", "Identify and write numbers", 420),
            SampleLesson("Simple Addition", "Adding numbers up to 10", 480),
            SampleLesson("Simple Subtraction", "Taking away numbers", 450),
            SampleLesson("Counting to 20", "Extend counting skills", 360),
            SampleLesson("Number Patterns", "Find patterns in numbers", 390),
            SampleLesson("Math Games", "Fun games to practice math", 540),
            SampleLesson("Review and Practice", "Put it all together", 600),
        ),
    ),
    SampleCourse(
        title="Amazing Physics for Kids",
        subject="Physics",
        description=(
            "Discover the wonders of physics through simple experiments and fun "
            "demonstrations. Learn about gravity, motion, and more!"
        ),
        price=34.99,
        image_url=_IMAGE_URL.format(photo="1635070041078-e363dbe005cb"),
        difficulty="beginner",
        age_range="8-10",
        featured=True,
        lesson_count=10,
        lessons=(
            SampleLesson(
                "What is Physics?", "Introduction to the world of physics", 240
            ),
            SampleLesson("Gravity Experiments", "Why things fall down", 360),
            SampleLesson("Push and Pull", "Understanding forces", 300),
            SampleLesson("Rolling Objects", "How things move", 420),
            SampleLesson("Floating and Sinking", "Why some things float", 480),
            SampleLesson("Magnets are Magic", "Exploring magnetism", 390),
            SampleLesson("Light and Shadows", "Playing with light", 450),
            SampleLesson("Sound Waves", "How we hear things", 360),
            SampleLesson("Simple Machines", "Tools that help us", 540),
            SampleLesson("Physics All Around", "Physics in everyday life", 300),
        ),
    ),
    SampleCourse(
        title="Multiplication Magic",
        subject="Math",
        description=(
            "Master multiplication tables with magical tricks and memorable "
            "songs. Make math fun and easy!"
        ),
        price=24.99,
        image_url=_IMAGE_URL.format(photo="1509228468518-180dd4864904"),
        difficulty="intermediate",
        age_range="8-10",
        featured=True,
        lesson_count=6,
    ),
    SampleCourse(
        title="Science Experiments at Home",
        subject="Science",
        description=(
            "Safe and exciting science experiments you can do at home with "
            "everyday materials. Spark curiosity and wonder!"
        ),
        price=39.99,
        image_url=_IMAGE_URL.format(photo="1532094349884-543bc11b234d"),
        difficulty="intermediate",
        age_range="8-12",
        featured=True,
        lesson_count=12,
    ),
    SampleCourse(
        title="Geometry Shapes & Patterns",
        subject="Math",
        description=(
            "Explore shapes, patterns, and spatial reasoning through interactive "
            "activities and visual learning."
        ),
        price=27.99,
        image_url=_IMAGE_URL.format(photo="1635070041409-e63e783d4d1e"),
        difficulty="intermediate",
        age_range="9-11",
        featured=True,
        lesson_count=7,
    ),
    SampleCourse(
        title="Forces and Motion Adventures",
        subject="Physics",
        description=(
            "Learn about pushes, pulls, friction, and motion through hands-on "
            "activities and real-world examples."
        ),
        price=32.99,
        image_url=_IMAGE_URL.format(photo="1581833971358-2c8b550f87b3"),
        difficulty="intermediate",
        age_range="9-12",
        featured=False,
        lesson_count=9,
    ),
)

SAMPLE_COURSE_COUNT = len(SAMPLE_COURSES)
SAMPLE_LESSON_COUNT = sum(c.lesson_count for c in SAMPLE_COURSES)


def build_course(sample: SampleCourse) -> Course:
    return Course.new(
        title=sample.title,
        subject=sample.subject,
        description=sample.description,
        price=sample.price,
        image_url=sample.image_url,
        difficulty=sample.difficulty,
        age_range=sample.age_range,
        featured=sample.featured,
    )


def build_lessons(sample: SampleCourse, course_id: UUID) -> list[Lesson]:
    """Lessons for one sample course, ordered from 1."""
    if sample.lessons:
        entries = list(sample.lessons)
    else:
        entries = [
            SampleLesson(
                title=f"Lesson {i + 1}: {sample.title} Part {i + 1}",
                description=f"Learn important concepts in {sample.subject.lower()}",
                duration=300 + i * 30,
            )
            for i in range(sample.lesson_count)
        ]

    return [
        Lesson.new(
            course_id=course_id,
            title=entry.title,
            description=entry.description,
            video_url=_VIDEO_URL.format(n=i + 1),
            duration=entry.duration,
            order=i + 1,
            thumbnail=_THUMBNAIL_URL.format(photo=_THUMBNAIL_BASE + i),
        )
        for i, entry in enumerate(entries)
    ]
