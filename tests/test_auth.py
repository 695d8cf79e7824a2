"""Тесты для аутентификации и авторизации"""

from habit_tracker import config
from habit_tracker.models import UserCreate


class TestAuthentication:
    """Тесты для регистрации и входа"""

    def test_register_new_user(self, test_client, test_user_credentials):
        """Регистрация нового пользователя"""
        response = test_client.post("/register", json=test_user_credentials)

        assert response.status_code == 201
        data = response.json()
        assert data["username"] == test_user_credentials["username"]
        assert data["is_active"] is True

    def test_register_response_has_no_extra_fields(self, test_client, test_user_credentials):
        """Email не хранится: его нет ни в схеме регистрации, ни в ответе"""
        assert "email" not in UserCreate.model_fields

        response = test_client.post(
            "/register", json={**test_user_credentials, "email": "someone@example.com"}
        )

        assert response.status_code == 201
        assert set(response.json()) == {"id", "username", "is_active"}

    def test_register_duplicate_user(self, test_client, test_user_credentials):
        """Регистрация дубликата пользователя"""
        test_client.post("/register", json=test_user_credentials)

        response = test_client.post("/register", json=test_user_credentials)

        assert response.status_code == 400
        assert "already exists" in response.json()["detail"].lower()

    def test_register_short_password(self, test_client, test_user_credentials):
        response = test_client.post(
            "/register", json={**test_user_credentials, "password": "short"}
        )
        assert response.status_code == 422

    def test_login_success(self, test_client, test_user_credentials):
        """Успешный вход"""
        test_client.post("/register", json=test_user_credentials)

        response = test_client.post(
            "/login",
            data={
                "username": test_user_credentials["username"],
                "password": test_user_credentials["password"],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"  # noqa: S105

    def test_login_wrong_password(self, test_client, test_user_credentials):
        """Вход с неправильным паролем"""
        test_client.post("/register", json=test_user_credentials)

        response = test_client.post(
            "/login",
            data={
                "username": test_user_credentials["username"],
                "password": "WrongPassword123!",
            },
        )

        assert response.status_code == 401

    def test_login_nonexistent_user(self, test_client):
        """Вход несуществующего пользователя"""
        response = test_client.post(
            "/login",
            data={"username": "nonexistent_user", "password": "SomePassword123!"},
        )

        assert response.status_code == 401

    def test_get_current_user(self, authenticated_client):
        """Получение информации о текущем пользователе"""
        response = authenticated_client.get("/me")

        assert response.status_code == 200
        data = response.json()
        assert "username" in data
        assert "id" in data
        assert data["is_active"] is True

    def test_get_current_user_unauthorized(self, test_client):
        """Получение информации без авторизации"""
        response = test_client.get("/me")

        assert response.status_code == 401


class TestAuthDisabled:
    """Режим без аутентификации: все запросы от имени локального пользователя"""

    def test_requests_without_token(self, test_client, monkeypatch):
        monkeypatch.setattr(config, "AUTH_ENABLED", False)

        created = test_client.post("/habits", json={"name": "Local habit"})
        listed = test_client.get("/habits")
        me = test_client.get("/me")

        assert created.status_code == 201
        assert created.json()["id"] in {h["id"] for h in listed.json()["habits"]}
        assert me.json()["username"] == "local_user"
