# tests/test_auth_api.py
import pytest
from fastapi.testclient import TestClient


@pytest.mark.api
class TestAuth:

    def test_me_requires_login(self, client: TestClient):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_login_creates_user_and_session(self, client: TestClient, login):
        user = login("auth_new_user", display_name="New User")
        assert user["username"] == "auth_new_user"
        assert user["display_name"] == "New User"
        assert user["role"] == "student"

        response = client.get("/api/auth/me")
        assert response.status_code == 200
        assert response.json()["user"]["id"] == user["id"]

    def test_login_is_idempotent(self, client: TestClient, login):
        first = login("auth_repeat_user")
        client.cookies.clear()
        second = login("auth_repeat_user")
        assert first["id"] == second["id"]

    def test_admin_username_gets_admin_role(self, admin):
        assert admin["role"] == "admin"

    def test_logout_clears_session(self, client: TestClient, login):
        login()
        response = client.post("/api/auth/logout")
        assert response.status_code == 200
        assert client.get("/api/auth/me").status_code == 401

    def test_blank_username_is_rejected(self, client: TestClient):
        response = client.post("/api/auth/login", json={"username": "   "})
        assert response.status_code == 400
