"""
Модуль аудит-логирования для Habit Tracker API
Логирует изменения привычек, отметок и пользователей (CREATE, UPDATE, DELETE)
с user_id и correlation_id
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional, Union

from habit_tracker.config import AUDIT_LOG_ACTIONS, AUDIT_LOG_ENABLED

ResourceId = Optional[Union[int, str]]

# Настройка логгера для аудита
audit_logger = logging.getLogger("audit")
audit_logger.setLevel(logging.INFO)
audit_logger.propagate = False

# Формат логов: JSON для удобства парсинга
formatter = logging.Formatter(
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "message": %(message)s}'
)

if AUDIT_LOG_ENABLED and not audit_logger.handlers:
    # Хендлер для записи в файл (путь можно переопределить переменной окружения)
    _audit_log_path = os.getenv("AUDIT_LOG_PATH", "audit.log")
    _audit_dir = os.path.dirname(_audit_log_path)
    if _audit_dir:
        os.makedirs(_audit_dir, exist_ok=True)
    file_handler = logging.FileHandler(_audit_log_path)
    file_handler.setFormatter(formatter)
    audit_logger.addHandler(file_handler)

    # Консольный хендлер для разработки
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    audit_logger.addHandler(console_handler)


def log_audit_event(
    action: str,
    resource_type: str,
    resource_id: ResourceId,
    user_id: Optional[int],
    correlation_id: str,
    details: Optional[dict] = None,
    status: str = "success",
) -> None:
    """
    Логирование аудит-события

    Args:
        action: Тип действия (CREATE, UPDATE, DELETE)
        resource_type: Тип ресурса (habit, completion, user)
        resource_id: ID ресурса
        user_id: ID пользователя, выполнившего действие
        correlation_id: ID для корреляции запросов
        details: Дополнительные детали операции
        status: Статус операции (success, failure)
    """
    if not AUDIT_LOG_ENABLED:
        return

    if action not in AUDIT_LOG_ACTIONS:
        return

    audit_data = {
        "action": action,
        "resource_type": resource_type,
        "resource_id": resource_id,
        "user_id": user_id,
        "correlation_id": correlation_id,
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    if details:
        audit_data["details"] = details

    audit_logger.info(json.dumps(audit_data, default=str))


def log_create(
    resource_type: str,
    resource_id: ResourceId,
    user_id: int,
    correlation_id: str,
    details: Optional[dict] = None,
) -> None:
    """Логирование создания ресурса"""
    log_audit_event("CREATE", resource_type, resource_id, user_id, correlation_id, details)


def log_update(
    resource_type: str,
    resource_id: ResourceId,
    user_id: int,
    correlation_id: str,
    details: Optional[dict] = None,
) -> None:
    """Логирование обновления ресурса"""
    log_audit_event("UPDATE", resource_type, resource_id, user_id, correlation_id, details)


def log_delete(
    resource_type: str,
    resource_id: ResourceId,
    user_id: int,
    correlation_id: str,
    details: Optional[dict] = None,
) -> None:
    """Логирование удаления ресурса"""
    log_audit_event("DELETE", resource_type, resource_id, user_id, correlation_id, details)
