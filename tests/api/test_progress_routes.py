"""Lesson completion and per-course progress reads."""

from __future__ import annotations

import asyncio
import uuid
from datetime import timedelta

from fastapi.testclient import TestClient

from marketplace.models.course import Course
from marketplace.repos.registry import catalog_repo
from marketplace.services import token_service
from tests.conftest import auth, course_titled, mint_token


def _lessons(course: Course):
    return asyncio.run(catalog_repo.list_lessons(course.id))


def _complete_url(course_id, lesson_id) -> str:
    return f"/v1/courses/{course_id}/lessons/{lesson_id}/complete"


# ---- 401: unauthenticated ----


def test_complete_lesson_rejects_missing_token(
    client: TestClient, seeded: list[Course]
) -> None:
    lesson = _lessons(seeded[0])[0]
    resp = client.post(_complete_url(seeded[0].id, lesson.id), json={"watch_time": 1})
    assert resp.status_code == 401


def test_complete_lesson_rejects_expired_token(
    client: TestClient, seeded: list[Course]
) -> None:
    expired = token_service.create_access_token(
        sub="test-user", ttl=timedelta(seconds=-1)
    )
    lesson = _lessons(seeded[0])[0]
    resp = client.post(
        _complete_url(seeded[0].id, lesson.id),
        json={"watch_time": 1},
        headers=auth(expired),
    )
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token expired"


# ---- 200: completed ----


def test_complete_lesson_creates_record(
    client: TestClient, token: str, seeded: list[Course]
) -> None:
    course = seeded[0]
    lesson = _lessons(course)[2]
    resp = client.post(
        _complete_url(course.id, lesson.id),
        json={"watch_time": 120},
        headers=auth(token),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["completed"] is True
    assert body["watch_time"] == 120
    assert body["lesson_id"] == str(lesson.id)
    assert body["course_id"] == str(course.id)
    assert body["last_watched"] > 0


def test_repeated_completion_keeps_one_record_with_latest_watch_time(
    client: TestClient, token: str, seeded: list[Course]
) -> None:
    course = seeded[0]
    lesson = _lessons(course)[0]
    url = _complete_url(course.id, lesson.id)

    first = client.post(url, json={"watch_time": 300}, headers=auth(token))
    second = client.post(url, json={"watch_time": 45}, headers=auth(token))
    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]

    records = client.get(f"/v1/courses/{course.id}/progress", headers=auth(token))
    body = records.json()
    assert len(body) == 1
    assert body[0]["watch_time"] == 45


def test_complete_lesson_does_not_require_purchase(
    client: TestClient, token: str, seeded: list[Course]
) -> None:
    course = seeded[1]
    lesson = _lessons(course)[0]
    resp = client.post(
        _complete_url(course.id, lesson.id),
        json={"watch_time": 10},
        headers=auth(token),
    )
    assert resp.status_code == 200


def test_complete_lesson_negative_watch_time_rejected(
    client: TestClient, token: str, seeded: list[Course]
) -> None:
    lesson = _lessons(seeded[0])[0]
    resp = client.post(
        _complete_url(seeded[0].id, lesson.id),
        json={"watch_time": -5},
        headers=auth(token),
    )
    assert resp.status_code == 422


# ---- 404 ----


def test_complete_lesson_unknown_course(
    client: TestClient, token: str, seeded: list[Course]
) -> None:
    lesson = _lessons(seeded[0])[0]
    resp = client.post(
        _complete_url(uuid.uuid4(), lesson.id),
        json={"watch_time": 1},
        headers=auth(token),
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Course not found"


def test_complete_lesson_from_another_course(
    client: TestClient, token: str, seeded: list[Course]
) -> None:
    other_lesson = _lessons(seeded[1])[0]
    resp = client.post(
        _complete_url(seeded[0].id, other_lesson.id),
        json={"watch_time": 1},
        headers=auth(token),
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Lesson not found"


# ---- progress reads ----


def test_progress_empty_when_anonymous(
    client: TestClient, token: str, seeded: list[Course]
) -> None:
    course = seeded[0]
    lesson = _lessons(course)[0]
    client.post(
        _complete_url(course.id, lesson.id),
        json={"watch_time": 30},
        headers=auth(token),
    )

    resp = client.get(f"/v1/courses/{course.id}/progress")
    assert resp.status_code == 200
    assert resp.json() == []


def test_progress_is_per_user(
    client: TestClient, token: str, seeded: list[Course]
) -> None:
    course = seeded[0]
    lesson = _lessons(course)[0]
    client.post(
        _complete_url(course.id, lesson.id),
        json={"watch_time": 30},
        headers=auth(token),
    )

    resp = client.get(
        f"/v1/courses/{course.id}/progress", headers=auth(mint_token("other"))
    )
    assert resp.json() == []


def test_progress_summary(
    client: TestClient, token: str, seeded: list[Course]
) -> None:
    course = course_titled(seeded, "Fun with Numbers: Basic Math Adventures")
    for lesson in _lessons(course)[:3]:
        client.post(
            _complete_url(course.id, lesson.id),
            json={"watch_time": 60},
            headers=auth(token),
        )

    resp = client.get(
        f"/v1/courses/{course.id}/progress/summary", headers=auth(token)
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "course_id": str(course.id),
        "completed_lessons": 3,
        "total_lessons": 8,
        "percent_complete": 37.5,
    }


def test_progress_summary_anonymous(
    client: TestClient, seeded: list[Course]
) -> None:
    course = seeded[0]
    body = client.get(f"/v1/courses/{course.id}/progress/summary").json()
    assert body["completed_lessons"] == 0
    assert body["total_lessons"] == 8
    assert body["percent_complete"] == 0.0
