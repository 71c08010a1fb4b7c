# tests/test_events_api.py
import pytest
from fastapi.testclient import TestClient


@pytest.mark.api
class TestEvents:

    def test_anonymous_event_is_recorded(self, client: TestClient):
        response = client.post("/api/events/", json={
            "event_type": "lesson.view", "entity_type": "lesson", "entity_id": 1, "duration": 12.5,
        })
        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Event recorded"
        assert isinstance(data["id"], int)
        assert "timestamp" in data

    def test_event_is_attributed_to_logged_in_user(self, client: TestClient, login):
        user = login()
        client.post("/api/events/", json={"event_type": "course.open", "entity_type": "course", "entity_id": 2,
                                          "data": {"source": "catalog"}, "session_id": "abc"})
        events = client.get("/api/events/").json()
        assert len(events) == 1
        assert events[0]["user_id"] == user["id"]
        assert events[0]["event_type"] == "course.open"
        assert events[0]["data"] == {"source": "catalog"}

    def test_filters_and_limit(self, client: TestClient, login):
        login()
        for event_type in ["video.play", "video.pause", "video.play"]:
            client.post("/api/events/", json={"event_type": event_type})
        assert len(client.get("/api/events/", params={"event_type": "video.play"}).json()) == 2
        newest = client.get("/api/events/", params={"limit": 1}).json()
        assert [event["event_type"] for event in newest] == ["video.play"]

    def test_listing_rules(self, client: TestClient, login):
        client.cookies.clear()
        assert client.get("/api/events/").status_code == 401
        other = login()
        client.cookies.clear()
        login()
        assert client.get("/api/events/", params={"user_id": other["id"]}).status_code == 403

    def test_admin_sees_everyone(self, client: TestClient, login, admin):
        client.cookies.clear()
        user = login()
        client.post("/api/events/", json={"event_type": "admin.visible"})
        client.cookies.clear()
        login("admin")
        events = client.get("/api/events/", params={"event_type": "admin.visible"}).json()
        assert any(event["user_id"] == user["id"] for event in events)

    def test_missing_event_type_is_400(self, client: TestClient):
        assert client.post("/api/events/", json={"entity_type": "lesson"}).status_code == 400

    def test_stats(self, client: TestClient):
        for _ in range(3):
            client.post("/api/events/", json={"event_type": "stats.check"})
        stats = client.get("/api/events/stats").json()
        assert stats["total_events"] >= 3
        assert stats["recent_events"] >= 3
        assert len(stats["top_event_types"]) <= 5
        counts = [item["count"] for item in stats["top_event_types"]]
        assert counts == sorted(counts, reverse=True)
