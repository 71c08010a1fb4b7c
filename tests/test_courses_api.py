# tests/test_courses_api.py
import pytest
from fastapi.testclient import TestClient


def new_course_payload(slug: str) -> dict:
    return {
        "slug": slug,
        "title": "Generative AI for Marketers",
        "level": "expert",
        "difficulty": 2,
        "modules": [
            {
                "title": "Getting started",
                "lessons": [
                    {
                        "title": "Writing campaign briefs with AI",
                        "duration": 12,
                        "sections": {"hook": "Briefs in minutes.", "reflect": "What will you automate?"},
                        "skills": [{"dna_id": 201, "contribution": 1.0}],
                        "quiz": [
                            {"prompt": "Is a brief a prompt?", "options": ["Yes", "No"], "correct_option": 0}
                        ],
                    }
                ],
            }
        ],
    }


@pytest.mark.api
class TestCatalog:

    def test_list_courses(self, client: TestClient):
        response = client.get("/api/courses/")
        assert response.status_code == 200
        slugs = [course["slug"] for course in response.json()]
        assert slugs[:3] == ["ai-literacy", "python-for-ai", "ai-project-leadership"]

    def test_list_courses_by_level(self, client: TestClient):
        response = client.get("/api/courses/", params={"level": "intermediate"})
        assert response.status_code == 200
        assert [course["slug"] for course in response.json()] == ["python-for-ai"]

    def test_get_course_by_id_and_slug(self, client: TestClient):
        by_id = client.get("/api/courses/1")
        by_slug = client.get("/api/courses/ai-literacy")
        assert by_id.status_code == 200 and by_slug.status_code == 200
        assert by_id.json() == by_slug.json()
        assert by_id.json()["tags"] == ["ai", "basics"]

    def test_unknown_course_is_404(self, client: TestClient):
        assert client.get("/api/courses/no-such-course").status_code == 404
        assert client.get("/api/courses/9999").status_code == 404
        assert client.get("/api/courses/9999/outline").status_code == 404

    def test_outline_is_ordered(self, client: TestClient):
        response = client.get("/api/courses/1/outline")
        assert response.status_code == 200
        modules = response.json()["modules"]
        assert [module["title"] for module in modules] == ["Foundations", "Responsible AI"]
        assert [lesson["title"] for lesson in modules[0]["lessons"]] == ["What is AI?", "Prompting basics"]
        assert [lesson["title"] for lesson in modules[1]["lessons"]] == ["Bias and fairness"]

    def test_lesson_sections_follow_micro_lesson_order(self, client: TestClient):
        response = client.get("/api/lessons/1")
        assert response.status_code == 200
        lesson = response.json()
        assert [section["type"] for section in lesson["sections"]] == ["hook", "explain", "demo", "quick_try", "reflect"]
        assert lesson["has_quiz"] is True
        assert lesson["course_id"] == 1

    def test_lesson_with_missing_sections(self, client: TestClient):
        lesson = client.get("/api/lessons/2").json()
        assert [section["type"] for section in lesson["sections"]] == ["hook", "explain"]
        assert lesson["has_quiz"] is False

    def test_unknown_lesson_is_404(self, client: TestClient):
        assert client.get("/api/lessons/9999").status_code == 404


@pytest.mark.api
class TestCourseAdmin:

    def test_create_requires_login(self, client: TestClient):
        response = client.post("/api/courses/", json=new_course_payload("anon-course"))
        assert response.status_code == 401

    def test_create_requires_admin(self, client: TestClient, login):
        login()
        response = client.post("/api/courses/", json=new_course_payload("student-course"))
        assert response.status_code == 403

    def test_admin_creates_course(self, client: TestClient, admin):
        response = client.post("/api/courses/", json=new_course_payload("genai-marketing"))
        assert response.status_code == 201, response.text
        course = response.json()
        assert course["slug"] == "genai-marketing"

        outline = client.get(f"/api/courses/{course['id']}/outline").json()
        lesson_id = outline["modules"][0]["lessons"][0]["id"]
        lesson = client.get(f"/api/lessons/{lesson_id}").json()
        assert [section["type"] for section in lesson["sections"]] == ["hook", "reflect"]
        assert lesson["has_quiz"] is True

        duplicate = client.post("/api/courses/", json=new_course_payload("genai-marketing"))
        assert duplicate.status_code == 400

    def test_unknown_skill_is_rejected(self, client: TestClient, admin):
        payload = new_course_payload("bad-skill-course")
        payload["modules"][0]["lessons"][0]["skills"] = [{"dna_id": 9999, "contribution": 1.0}]
        response = client.post("/api/courses/", json=payload)
        assert response.status_code == 400

    def test_invalid_slug_is_rejected(self, client: TestClient, admin):
        response = client.post("/api/courses/", json=new_course_payload("Not A Slug"))
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request data"

    def test_numeric_slug_is_rejected(self, client: TestClient, admin):
        response = client.post("/api/courses/", json=new_course_payload("2024"))
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request data"

    def test_slug_with_digits_is_looked_up_by_slug(self, client: TestClient, admin):
        created = client.post("/api/courses/", json=new_course_payload("course-2025"))
        assert created.status_code == 201, created.text
        fetched = client.get("/api/courses/course-2025")
        assert fetched.status_code == 200
        assert fetched.json()["id"] == created.json()["id"]

        duplicate = client.post("/api/courses/", json=new_course_payload("course-2025"))
        assert duplicate.status_code == 400
        assert "already exists" in duplicate.json()["detail"]
