"""
Конфигурация Habit Tracker API
Все параметры читаются из переменных окружения при импорте модуля
"""

import os


def _env_bool(name: str, default: bool) -> bool:
    """Прочитать булев флаг из переменной окружения"""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Окружение (development, production)
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# База данных
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./habits.db")

# Аутентификация (JWT)
AUTH_ENABLED = _env_bool("AUTH_ENABLED", True)
AUTH_JWT_ALGORITHM = os.getenv("AUTH_JWT_ALGORITHM", "HS256")
AUTH_JWT_EXPIRATION_MINUTES = int(os.getenv("AUTH_JWT_EXPIRATION_MINUTES", "30"))

# Ограничение частоты запросов
RATE_LIMIT_ENABLED = _env_bool("RATE_LIMIT_ENABLED", True)
RATE_LIMIT_PER_MINUTE = int(os.getenv("RATE_LIMIT_PER_MINUTE", "100"))

# Аудит-логирование
AUDIT_LOG_ENABLED = _env_bool("AUDIT_LOG_ENABLED", True)
AUDIT_LOG_ACTIONS = [
    action.strip().upper()
    for action in os.getenv("AUDIT_LOG_ACTIONS", "CREATE,UPDATE,DELETE").split(",")
    if action.strip()
]

# Формат ошибок RFC 7807
USE_RFC7807_ERRORS = _env_bool("USE_RFC7807_ERRORS", True)
