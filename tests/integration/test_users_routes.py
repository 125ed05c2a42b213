"""
User session, onboarding and nickname endpoints against an in-memory DB.
"""
import pytest
from fastapi.testclient import TestClient

from miniapp.models.models import User


@pytest.mark.integration
class TestHealthRoutes:
    def test_root_returns_healthy(self, api_client: TestClient):
        response = api_client.get("/")
        assert response.status_code == 200
        assert "Healthy" in response.json()["message"]

    def test_request_id_is_echoed(self, api_client: TestClient):
        response = api_client.get("/", headers={"x-request-id": "req-123"})
        assert response.headers.get("x-request-id") == "req-123"


@pytest.mark.integration
class TestUserRoutes:
    def test_unknown_user_resolves_to_null(self, api_client: TestClient):
        response = api_client.get("/api/users", params={"telegram_id": "999"})
        assert response.status_code == 200
        assert response.json() == {"user": None}

    def test_malformed_telegram_id(self, api_client: TestClient):
        response = api_client.get("/api/users", params={"telegram_id": "not-a-number"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_create_then_refresh(self, api_client: TestClient, onboarded_user):
        assert onboarded_user["nickname"] == "learner_1"
        assert onboarded_user["telegram_id"] == 1001
        assert onboarded_user["total_xp"] == 0
        assert onboarded_user["theme"] == "dark"
        assert onboarded_user["is_onboarded"] is True

        response = api_client.post(
            "/api/users",
            json={"telegramId": 1001, "nickname": "learner_2", "avatar": "🐼", "level": "A2"},
        )
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["id"] == onboarded_user["id"]
        assert user["nickname"] == "learner_2"
        assert user["level"] == "A2"

    def test_get_existing_user(self, api_client: TestClient, onboarded_user):
        response = api_client.get("/api/users", params={"telegram_id": "1001"})
        assert response.status_code == 200
        assert response.json()["user"]["id"] == onboarded_user["id"]

    def test_create_rejects_bad_nickname(self, api_client: TestClient):
        response = api_client.post(
            "/api/users",
            json={"telegramId": 5, "nickname": "ab", "avatar": "🐻", "level": "A1"},
        )
        assert response.status_code == 400
        assert "between 3 and 20" in response.json()["detail"]

    def test_create_rejects_unknown_level(self, api_client: TestClient):
        response = api_client.post(
            "/api/users",
            json={"telegramId": 5, "nickname": "valid_name", "avatar": "🐻", "level": "D1"},
        )
        assert response.status_code == 422

    def test_update_profile(self, api_client: TestClient, onboarded_user):
        response = api_client.put("/api/users", json={"telegramId": 1001, "level": "B1", "theme": "light"})
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["level"] == "B1"
        assert user["theme"] == "light"
        assert user["nickname"] == "learner_1"

    def test_update_ignores_xp_fields(self, api_client: TestClient, onboarded_user):
        response = api_client.put("/api/users", json={"telegramId": 1001, "total_xp": 9999})
        assert response.status_code == 200
        assert response.json()["user"]["total_xp"] == 0

    def test_update_unknown_user(self, api_client: TestClient):
        response = api_client.put("/api/users", json={"telegramId": 31337, "level": "B1"})
        assert response.status_code == 404
        assert response.json() == {"detail": "User not found", "error": "not_found"}

    def test_legacy_row_is_normalized(self, api_client: TestClient, override_get_db):
        db = next(override_get_db())
        try:
            db.add(User(telegram_id=2002, username="vintage", first_name="V", xp=75, level="A1", total_xp=None))
            db.commit()
        finally:
            db.close()

        user = api_client.get("/api/users", params={"telegram_id": "2002"}).json()["user"]
        assert user["nickname"] == "vintage"
        assert user["avatar"] == "V"
        assert user["total_xp"] == 75


@pytest.mark.integration
class TestNicknameCheck:
    def test_too_short_is_unavailable_without_lookup(self, api_client: TestClient):
        response = api_client.get("/api/users/check-nickname", params={"nickname": "ab"})
        assert response.status_code == 200
        data = response.json()
        assert data["available"] is False
        assert data["error"] == "Nickname must be between 3 and 20 characters"

    def test_bad_characters(self, api_client: TestClient):
        data = api_client.get("/api/users/check-nickname", params={"nickname": "no spaces"}).json()
        assert data["available"] is False
        assert "letters, numbers" in data["error"]

    def test_free_nickname(self, api_client: TestClient):
        data = api_client.get("/api/users/check-nickname", params={"nickname": "fresh_name"}).json()
        assert data == {"available": True, "nickname": "fresh_name", "error": None}

    def test_taken_by_other_user(self, api_client: TestClient, onboarded_user):
        data = api_client.get("/api/users/check-nickname", params={"nickname": "learner_1"}).json()
        assert data["available"] is False
        assert data["error"] == "Nickname is already taken"

    def test_own_nickname_is_available_when_excluded(self, api_client: TestClient, onboarded_user):
        data = api_client.get(
            "/api/users/check-nickname",
            params={"nickname": "learner_1", "telegram_id": "1001"},
        ).json()
        assert data["available"] is True

    def test_taken_via_legacy_username(self, api_client: TestClient, override_get_db):
        db = next(override_get_db())
        try:
            db.add(User(telegram_id=3003, username="legacy_nick", level="A1"))
            db.commit()
        finally:
            db.close()

        data = api_client.get("/api/users/check-nickname", params={"nickname": "legacy_nick"}).json()
        assert data["available"] is False
