# tests/test_progress_api.py
import pytest
from fastapi.testclient import TestClient
from galaxion.services.progress_service import earned_xp_for_lesson
from galaxion.services.skills_dna_service import adjusted_gain
from galaxion.utils.numbers import round_half_up


def complete(client: TestClient, lesson_id: int) -> dict:
    response = client.post(f"/api/lessons/{lesson_id}/progress", json={"status": "completed"})
    assert response.status_code == 200, response.text
    return response.json()


class TestEarnedXp:

    def test_scales_with_duration(self):
        assert earned_xp_for_lesson(10) == 10
        assert earned_xp_for_lesson(20) == 20
        assert earned_xp_for_lesson(15) == 15

    def test_capped_at_three_times_base(self):
        assert earned_xp_for_lesson(30) == 30
        assert earned_xp_for_lesson(90) == 30

    def test_unknown_duration_earns_base(self):
        assert earned_xp_for_lesson(None) == 10
        assert earned_xp_for_lesson(0) == 10


class TestRounding:

    @pytest.mark.parametrize("value, expected", [(0.5, 1), (2.5, 3), (12.5, 13), (12.49, 12), (66.5, 67), (0, 0)])
    def test_halves_round_up(self, value, expected):
        assert round_half_up(value) == expected


class TestCompletionBonusGain:

    def test_gain_shrinks_with_level(self):
        assert adjusted_gain(6, 10, "awareness") == 6
        assert adjusted_gain(8, 50, "application") == 5
        assert adjusted_gain(8, 75, "mastery") == 4

    def test_high_progress_halves_gain_again(self):
        assert adjusted_gain(6, 88, "expertise") == 1
        assert adjusted_gain(10, 81, "mastery") == 2


@pytest.mark.api
class TestLessonProgress:

    def test_progress_requires_login(self, client: TestClient):
        response = client.post("/api/lessons/1/progress", json={"status": "completed"})
        assert response.status_code == 401

    def test_unknown_lesson_is_404(self, client: TestClient, login):
        login()
        response = client.post("/api/lessons/9999/progress", json={"status": "in_progress"})
        assert response.status_code == 404

    def test_invalid_status_is_400(self, client: TestClient, login):
        login()
        response = client.post("/api/lessons/1/progress", json={"status": "finished"})
        assert response.status_code == 400

    def test_completing_lessons_builds_skills_and_course_progress(self, client: TestClient, login):
        login()

        first = complete(client, 1)
        assert first["newly_completed"] is True
        assert first["earned_xp"] == 10
        assert first["skills_updated"] == [
            {"dna_id": 201, "progress": 2.0, "current_level": "awareness", "xp": 10}
        ]
        assert first["course_progress"]["progress"] == 33
        assert first["course_progress"]["completed_modules"] == 0
        assert first["completion_bonus"] == []

        second = complete(client, 2)
        assert second["earned_xp"] == 20
        skills = {skill["dna_id"]: skill for skill in second["skills_updated"]}
        assert skills[201]["progress"] == 5.0
        assert skills[201]["xp"] == 40
        assert skills[202]["progress"] == 1.0
        assert second["course_progress"]["progress"] == 67
        assert second["course_progress"]["completed_modules"] == 1
        assert second["course_progress"]["completed_at"] is None

        third = complete(client, 3)
        assert third["course_progress"]["progress"] == 100
        assert third["course_progress"]["completed_modules"] == 2
        assert third["course_progress"]["completed_at"] is not None
        # Finishing the course grants 20% of each outcome gain
        assert third["completion_bonus"] == [
            {"dna_id": 201, "progress": 13.0, "current_level": "awareness", "xp": 40},
            {"dna_id": 202, "progress": 9.0, "current_level": "awareness", "xp": 25},
        ]

    def test_completed_is_sticky(self, client: TestClient, login):
        login()
        complete(client, 1)

        again = complete(client, 1)
        assert again["newly_completed"] is False
        assert again["earned_xp"] == 0
        assert again["skills_updated"] == []

        lower = client.post("/api/lessons/1/progress", json={"status": "in_progress", "position": 42}).json()
        assert lower["status"] == "completed"
        assert lower["last_position"] == 42

    def test_in_progress_does_not_award_xp(self, client: TestClient, login):
        user = login()
        response = client.post("/api/lessons/4/progress", json={"status": "in_progress", "position": 3})
        data = response.json()
        assert data["status"] == "in_progress"
        assert data["earned_xp"] == 0
        assert data["course_progress"]["progress"] == 0

        dna = client.get(f"/api/diagnosis/progress/{user['id']}").json()
        assert dna == []


@pytest.mark.api
class TestCourseEnrollment:

    def test_start_and_list_courses(self, client: TestClient, login):
        login()
        assert client.get("/api/user/courses/2/progress").status_code == 404

        started = client.post("/api/user/courses/2/start")
        assert started.status_code == 200
        assert started.json()["progress"] == 0
        assert started.json()["current_lesson_id"] == 4

        mine = client.get("/api/user/courses").json()
        assert [row["course_id"] for row in mine] == [2]

        detail = client.get("/api/user/courses/2/progress").json()
        assert detail["lessons"] == [
            {"lesson_id": 4, "status": "not_started", "last_position": 0, "completed_at": None, "updated_at": None}
        ]

    def test_start_unknown_course_is_404(self, client: TestClient, login):
        login()
        assert client.post("/api/user/courses/9999/start").status_code == 404

    def test_lesson_statuses_in_course_progress(self, client: TestClient, login):
        login()
        complete(client, 1)
        detail = client.get("/api/user/courses/1/progress").json()
        statuses = [lesson["status"] for lesson in detail["lessons"]]
        assert statuses == ["completed", "not_started", "not_started"]
        assert detail["current_lesson_id"] == 1


def eight_lesson_course(slug: str) -> dict:
    lessons = [{"title": f"Part {number}"} for number in range(1, 9)]
    lessons[0]["skills"] = [{"dna_id": 201, "contribution": 0.25}]
    return {"slug": slug, "title": "Prompting in eight steps", "modules": [{"title": "Steps", "lessons": lessons}]}


@pytest.mark.api
class TestHalfValues:

    def test_half_values_round_up(self, client: TestClient, login):
        login("admin")
        course = client.post("/api/courses/", json=eight_lesson_course("prompting-eight-steps")).json()
        outline = client.get(f"/api/courses/{course['id']}/outline").json()
        first_lesson = outline["modules"][0]["lessons"][0]["id"]

        login()
        result = complete(client, first_lesson)
        # 1 of 8 lessons is 12.5%; contribution 0.25 gives a 0.5 delta and 2.5 XP
        assert result["course_progress"]["progress"] == 13
        assert result["skills_updated"] == [
            {"dna_id": 201, "progress": 1.0, "current_level": "awareness", "xp": 3}
        ]


@pytest.mark.api
class TestSkillsDnaHistory:

    def test_every_change_is_recorded(self, client: TestClient, login):
        user = login()
        for lesson_id in (1, 2, 3):
            complete(client, lesson_id)

        history = client.get(f"/api/skills-dna/history/{user['id']}", params={"dna_id": 201}).json()
        assert [(entry["source"], entry["source_id"]) for entry in history] == [
            ("course_completion", 1), ("lesson_completion", 2), ("lesson_completion", 1),
        ]
        assert [(entry["previous_progress"], entry["new_progress"]) for entry in history] == [
            (5.0, 13.0), (2.0, 5.0), (0.0, 2.0),
        ]
        assert history[0]["progress_change"] == 8.0

        everything = client.get(f"/api/skills-dna/history/{user['id']}").json()
        assert {entry["dna_id"] for entry in everything} == {201, 202}
        assert len(client.get(f"/api/skills-dna/history/{user['id']}", params={"limit": 2}).json()) == 2

    def test_diagnosis_is_recorded(self, client: TestClient, login):
        user = login()
        client.post("/api/diagnosis/results", json={"skills": {"Prompt Engineering": 40}})
        client.post("/api/diagnosis/results", json={"skills": {"Prompt Engineering": 30}})
        history = client.get(f"/api/skills-dna/history/{user['id']}").json()
        # The lower second assessment does not change progress
        assert len(history) == 1
        assert history[0]["source"] == "diagnosis:quick"
        assert history[0]["new_progress"] == 40.0

    def test_bonus_is_smaller_for_advanced_learners(self, client: TestClient, login):
        user = login()
        client.post("/api/diagnosis/results", json={"skills": {"Prompt Engineering": 70, "AI Ethics": 85}})
        for lesson_id in (1, 2, 3):
            result = complete(client, lesson_id)

        bonus = {skill["dna_id"]: skill for skill in result["completion_bonus"]}
        # 201 at 75 (mastery) gets 8 * 0.4; 202 at 88 (expertise, above 80) gets 6 * 0.2 * 0.5
        assert bonus[201]["progress"] == 79.0
        assert bonus[202]["progress"] == 89.0

    def test_history_access(self, client: TestClient, login):
        other = login()
        client.cookies.clear()
        assert client.get(f"/api/skills-dna/history/{other['id']}").status_code == 401
        login()
        assert client.get(f"/api/skills-dna/history/{other['id']}").status_code == 403
