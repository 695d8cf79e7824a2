import os
import sys
import time
from datetime import datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# ВАЖНО: Установить переменные окружения ДО импорта модулей приложения
os.environ["RATE_LIMIT_ENABLED"] = "false"  # Отключаем rate limiting для тестов
os.environ["AUDIT_LOG_ENABLED"] = "false"  # Без файла audit.log в тестах
os.environ["AUTH_ENABLED"] = "true"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"  # Локальная файловая SQLite для тестов

ROOT = Path(__file__).resolve().parents[1]  # корень репозитория
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Чистая схема БД перед тестами
from habit_tracker import models  # noqa: E402, F401
from habit_tracker.database import Base, SessionLocal, engine  # noqa: E402
from habit_tracker.models import CompletionResponse, HabitResponse  # noqa: E402

Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)


@pytest.fixture(scope="session")
def test_client():
    """Создать тестовый клиент FastAPI"""
    from habit_tracker.main import app

    return TestClient(app)


@pytest.fixture(scope="function")
def db_session():
    """Сессия БД для тестов репозитория"""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def test_user_credentials():
    """Тестовые учетные данные пользователя (уникальные для каждого теста)"""
    timestamp = str(int(time.time() * 1000000))  # микросекунды для уникальности
    return {
        "username": f"testuser_{timestamp}",
        "password": "TestPassword123!",
    }


@pytest.fixture(scope="function")
def authenticated_client(test_client, test_user_credentials):
    """Аутентифицированный клиент с JWT токеном (новый пользователь на каждый тест)"""
    register_response = test_client.post("/register", json=test_user_credentials)
    if register_response.status_code not in [201, 400]:
        raise Exception(f"Registration failed: {register_response.json()}")

    login_response = test_client.post(
        "/login",
        data={  # OAuth2 требует form data, не JSON
            "username": test_user_credentials["username"],
            "password": test_user_credentials["password"],
        },
    )
    assert login_response.status_code == 200, f"Login failed: {login_response.json()}"

    token = login_response.json()["access_token"]
    test_client.headers = {
        **test_client.headers,
        "Authorization": f"Bearer {token}",
    }

    yield test_client

    if "Authorization" in test_client.headers:
        del test_client.headers["Authorization"]


@pytest.fixture
def make_habit():
    """Фабрика привычек для тестов чистых функций статистики"""

    def _make(habit_id: str, start_date: str, **overrides) -> HabitResponse:
        data = {
            "id": habit_id,
            "name": f"Habit {habit_id}",
            "frequency": "daily",
            "start_date": start_date,
            "created_at": datetime(2024, 1, 1, 8, 0, 0),
        }
        data.update(overrides)
        return HabitResponse(**data)

    return _make


@pytest.fixture
def make_completion():
    """Фабрика отметок выполнения"""

    def _make(habit_id: str, completed_date: str, count=None) -> CompletionResponse:
        return CompletionResponse(
            id=f"{habit_id}:{completed_date}",
            habit_id=habit_id,
            completed_date=completed_date,
            count=count,
        )

    return _make
