# tests/test_notes_api.py
import pytest
from fastapi.testclient import TestClient


def save(client: TestClient, content: str, lesson_id: int = 1):
    return client.post(f"/api/lessons/{lesson_id}/notes", json={"content": content})


@pytest.mark.api
class TestLessonNotes:

    def test_notes_require_login(self, client: TestClient):
        assert client.get("/api/lessons/1/notes").status_code == 401
        assert save(client, "Remember this").status_code == 401
        assert client.get("/api/user/notes").status_code == 401

    def test_unknown_lesson_is_404(self, client: TestClient, login):
        login()
        assert client.get("/api/lessons/9999/notes").status_code == 404
        assert save(client, "Lost", lesson_id=9999).status_code == 404

    def test_empty_note_before_saving(self, client: TestClient, login):
        login()
        response = client.get("/api/lessons/1/notes")
        assert response.status_code == 200
        assert response.json() == {"lesson_id": 1, "content": ""}

    def test_save_update_and_list(self, client: TestClient, login):
        login()
        first = save(client, "  My note ")
        assert first.status_code == 200, first.text
        assert first.json()["content"] == "My note"

        second = save(client, "My better note").json()
        assert second["id"] == first.json()["id"]
        assert client.get("/api/lessons/1/notes").json()["content"] == "My better note"

        save(client, "Second lesson", lesson_id=2)
        notes = client.get("/api/user/notes").json()
        assert len(notes) == 2
        by_lesson = {note["lesson_id"]: note for note in notes}
        assert by_lesson[1]["lesson_title"] == "What is AI?"
        assert by_lesson[1]["content"] == "My better note"

    def test_blank_note_deletes(self, client: TestClient, login):
        login()
        save(client, "Temporary")
        response = save(client, "   ")
        assert response.status_code == 200
        assert response.json() == {"message": "Note deleted"}
        assert client.get("/api/lessons/1/notes").json()["content"] == ""

    def test_delete(self, client: TestClient, login):
        login()
        assert client.delete("/api/lessons/1/notes").status_code == 404
        save(client, "Short lived")
        response = client.delete("/api/lessons/1/notes")
        assert response.status_code == 200
        assert response.json() == {"message": "Note deleted successfully"}
        assert client.get("/api/user/notes").json() == []

    def test_notes_are_private(self, client: TestClient, login):
        login()
        save(client, "Mine only")
        client.cookies.clear()
        login()
        assert client.get("/api/lessons/1/notes").json()["content"] == ""
        assert client.get("/api/user/notes").json() == []

    def test_oversized_note_is_400(self, client: TestClient, login):
        login()
        response = save(client, "x" * 20001)
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request data"
