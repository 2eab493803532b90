"""Public catalog reads: listing, featured, subjects, search, course page."""

from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from marketplace.models.course import Course
from tests.conftest import course_titled

# ---- listing ----


def test_list_courses_empty_catalog(client: TestClient) -> None:
    resp = client.get("/v1/courses")
    assert resp.status_code == 200
    assert resp.json() == []


def test_list_courses_returns_sample_catalog(
    client: TestClient, seeded: list[Course]
) -> None:
    resp = client.get("/v1/courses")
    assert resp.status_code == 200
    body = resp.json()
    assert len(body) == 6
    assert {c["title"] for c in body} == {c.title for c in seeded}


def test_list_courses_carries_derived_lesson_count(
    client: TestClient, seeded: list[Course]
) -> None:
    body = client.get("/v1/courses").json()
    counts = {c["title"]: c["total_lessons"] for c in body}
    assert counts["Fun with Numbers: Basic Math Adventures"] == 8
    assert counts["Amazing Physics for Kids"] == 10
    assert counts["Science Experiments at Home"] == 12
    assert sum(counts.values()) == 52


def test_list_courses_filters_by_subject(
    client: TestClient, seeded: list[Course]
) -> None:
    resp = client.get("/v1/courses", params={"subject": "Physics"})
    assert resp.status_code == 200
    body = resp.json()
    assert len(body) == 2
    assert all(c["subject"] == "Physics" for c in body)


def test_list_featured_excludes_unfeatured(
    client: TestClient, seeded: list[Course]
) -> None:
    body = client.get("/v1/courses/featured").json()
    assert len(body) == 5
    assert all(c["featured"] for c in body)
    assert "Forces and Motion Adventures" not in {c["title"] for c in body}


def test_list_subjects_sorted_distinct(
    client: TestClient, seeded: list[Course]
) -> None:
    resp = client.get("/v1/courses/subjects")
    assert resp.status_code == 200
    assert resp.json() == ["Math", "Physics", "Science"]


# ---- search ----


def test_search_matches_title_substring(
    client: TestClient, seeded: list[Course]
) -> None:
    resp = client.get("/v1/courses/search", params={"q": "multiplication"})
    assert resp.status_code == 200
    assert [c["title"] for c in resp.json()] == ["Multiplication Magic"]


def test_search_is_case_insensitive_and_requires_every_term(
    client: TestClient, seeded: list[Course]
) -> None:
    body = client.get("/v1/courses/search", params={"q": "PHYSICS kids"}).json()
    assert [c["title"] for c in body] == ["Amazing Physics for Kids"]


def test_search_excludes_non_matching_subject(
    client: TestClient, seeded: list[Course]
) -> None:
    resp = client.get(
        "/v1/courses/search",
        params={"q": "Multiplication", "subject": "Physics"},
    )
    assert resp.status_code == 200
    assert resp.json() == []


def test_search_filters_by_difficulty(
    client: TestClient, seeded: list[Course]
) -> None:
    body = client.get(
        "/v1/courses/search", params={"q": "a", "difficulty": "beginner"}
    ).json()
    assert {c["title"] for c in body} == {
        "Fun with Numbers: Basic Math Adventures",
        "Amazing Physics for Kids",
    }


def test_search_blank_query_rejected(client: TestClient) -> None:
    resp = client.get("/v1/courses/search", params={"q": "   "})
    assert resp.status_code == 422


def test_search_missing_query_rejected(client: TestClient) -> None:
    resp = client.get("/v1/courses/search")
    assert resp.status_code == 422


def test_search_unknown_difficulty_rejected(client: TestClient) -> None:
    resp = client.get(
        "/v1/courses/search", params={"q": "math", "difficulty": "expert"}
    )
    assert resp.status_code == 422


# ---- course page ----


def test_get_course_by_id(client: TestClient, seeded: list[Course]) -> None:
    course = course_titled(seeded, "Multiplication Magic")
    resp = client.get(f"/v1/courses/{course.id}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == str(course.id)
    assert body["price"] == 24.99
    assert body["difficulty"] == "intermediate"
    assert body["age_range"] == "8-10"
    assert body["total_lessons"] == 6


def test_get_course_unknown_id_is_404(client: TestClient) -> None:
    resp = client.get(f"/v1/courses/{uuid.uuid4()}")
    assert resp.status_code == 404


def test_get_course_malformed_id_is_422(client: TestClient) -> None:
    resp = client.get("/v1/courses/not-a-uuid")
    assert resp.status_code == 422


def test_list_lessons_ordered(client: TestClient, seeded: list[Course]) -> None:
    course = course_titled(seeded, "Amazing Physics for Kids")
    resp = client.get(f"/v1/courses/{course.id}/lessons")
    assert resp.status_code == 200
    body = resp.json()
    assert [lesson["order"] for lesson in body] == list(range(1, 11))
    assert body[0]["title"] == "What is Physics?"
    assert body[0]["duration"] == 240
    assert all(lesson["course_id"] == str(course.id) for lesson in body)


def test_list_lessons_generated_titles(
    client: TestClient, seeded: list[Course]
) -> None:
    course = course_titled(seeded, "Multiplication Magic")
    body = client.get(f"/v1/courses/{course.id}/lessons").json()
    assert body[0]["title"] == "Lesson 1: Multiplication Magic Part 1"
    assert [lesson["duration"] for lesson in body] == [300, 330, 360, 390, 420, 450]


def test_list_lessons_unknown_course_is_404(client: TestClient) -> None:
    resp = client.get(f"/v1/courses/{uuid.uuid4()}/lessons")
    assert resp.status_code == 404
