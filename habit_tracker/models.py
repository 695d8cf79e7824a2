"""
Модели данных Habit Tracker API
ORM-таблицы (SQLAlchemy) и схемы запросов/ответов с валидацией (Pydantic)
"""

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from habit_tracker.database import Base

# Символы, запрещенные в пользовательском тексте (защита от XSS)
DANGEROUS_CHARS = ["<", ">", "&", '"', "'", "`"]


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _reject_dangerous_chars(value: str, label: str) -> str:
    for char in DANGEROUS_CHARS:
        if char in value:
            raise ValueError(f"{label} содержит недопустимый символ: {char}")
    return value


def _normalize_weekly_days(days: Optional[list[int]]) -> Optional[list[int]]:
    """Дни недели в диапазоне 0-6, без повторов, по возрастанию"""
    if days is None:
        return days
    for day in days:
        if day < 0 or day > 6:
            raise ValueError(f"День недели вне диапазона 0-6: {day}")
    return sorted(set(days))


# === ORM ===


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True)
    hashed_password = Column(String)
    is_active = Column(Boolean, default=True)

    habits = relationship("Habit", back_populates="owner", cascade="all, delete-orphan")


class Habit(Base):
    __tablename__ = "habits"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    name = Column(String, index=True, nullable=False)
    description = Column(String, default="")
    frequency = Column(String, default="daily", nullable=False)
    weekly_days = Column(JSON, nullable=True)
    start_date = Column(Date, nullable=False)
    reminder_time = Column(String(5), nullable=True)
    track_count = Column(Boolean, default=False, nullable=False)
    count_goal = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    owner = relationship("User", back_populates="habits")
    completions = relationship(
        "Completion", back_populates="habit", cascade="all, delete-orphan"
    )


class Completion(Base):
    __tablename__ = "habit_completions"
    __table_args__ = (
        # Не более одной отметки на (привычка, дата)
        UniqueConstraint("habit_id", "completed_date", name="uq_completion_habit_date"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    habit_id = Column(String(36), ForeignKey("habits.id"), index=True, nullable=False)
    completed_date = Column(Date, nullable=False)
    count = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    habit = relationship("Habit", back_populates="completions")


# === Схемы Pydantic ===


class FrequencyType(str, Enum):
    """Частота выполнения привычки"""

    DAILY = "daily"
    WEEKLY = "weekly"


REMINDER_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class HabitCreate(BaseModel):
    """Модель для создания новой привычки с валидацией"""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Название привычки (1-100 символов)",
    )
    description: str = Field(
        default="",
        max_length=500,
        description="Описание привычки (максимум 500 символов)",
    )
    frequency: FrequencyType = Field(
        default=FrequencyType.DAILY, description="Частота выполнения привычки"
    )
    weekly_days: Optional[list[int]] = Field(
        default=None, description="Дни недели для weekly (0 - воскресенье, 6 - суббота)"
    )
    start_date: date = Field(default_factory=date.today, description="Дата начала")
    reminder_time: Optional[str] = Field(
        default=None, pattern=REMINDER_TIME_PATTERN, description="Время напоминания HH:MM"
    )
    track_count: bool = Field(default=False, description="Отслеживать количество")
    count_goal: Optional[int] = Field(
        default=None, ge=1, le=100000, description="Цель по количеству в день"
    )

    @field_validator("name")
    @classmethod
    def validate_name_content(cls, v: str) -> str:
        """Проверка содержимого имени (запрет опасных символов)"""
        return _reject_dangerous_chars(v, "Название").strip()

    @field_validator("description")
    @classmethod
    def validate_description_content(cls, v: str) -> str:
        if not v:
            return ""
        return _reject_dangerous_chars(v, "Описание").strip()

    @field_validator("weekly_days")
    @classmethod
    def validate_weekly_days(cls, v: Optional[list[int]]) -> Optional[list[int]]:
        return _normalize_weekly_days(v)

    @model_validator(mode="after")
    def drop_irrelevant_fields(self):
        """weekly_days имеет смысл только для weekly, count_goal - только при track_count"""
        if self.frequency != FrequencyType.WEEKLY:
            self.weekly_days = None
        if not self.track_count:
            self.count_goal = None
        return self


class HabitUpdate(BaseModel):
    """Модель для обновления привычки (все поля опциональны)"""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    frequency: Optional[FrequencyType] = None
    weekly_days: Optional[list[int]] = None
    start_date: Optional[date] = None
    reminder_time: Optional[str] = Field(None, pattern=REMINDER_TIME_PATTERN)
    track_count: Optional[bool] = None
    count_goal: Optional[int] = Field(None, ge=1, le=100000)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Название не может быть пустым")
        return _reject_dangerous_chars(v, "Название")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _reject_dangerous_chars(v, "Описание").strip()

    @field_validator("weekly_days")
    @classmethod
    def validate_weekly_days(cls, v: Optional[list[int]]) -> Optional[list[int]]:
        return _normalize_weekly_days(v)


class HabitResponse(BaseModel):
    """Модель ответа с информацией о привычке"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = ""
    frequency: str
    weekly_days: Optional[list[int]] = None
    start_date: date
    reminder_time: Optional[str] = None
    track_count: bool = False
    count_goal: Optional[int] = None
    created_at: datetime


class CompletionToggle(BaseModel):
    """Переключение отметки выполнения привычки на дату"""

    completed_date: date = Field(default_factory=date.today, description="Дата выполнения")
    count: Optional[int] = Field(
        default=None, ge=0, le=100000, description="Количество (для привычек со счетчиком)"
    )


class CompletionResponse(BaseModel):
    """Запись о выполнении привычки"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    habit_id: str
    completed_date: date
    count: Optional[int] = None


class HabitWithStats(HabitResponse):
    """Привычка со статистикой (вычисляется при каждом чтении, не хранится)"""

    current_streak: int = 0
    longest_streak: int = 0
    completed_today: bool = False
    completions: list[CompletionResponse] = Field(default_factory=list)
    completion_rate: int = 0


class GlobalStats(BaseModel):
    """Глобальная статистика по всем привычкам пользователя"""

    global_current_streak: int = 0
    global_longest_streak: int = 0
    total_complete_days: int = 0


class Achievement(BaseModel):
    """Состояние достижения (бейджа)"""

    id: str
    name: str
    description: str
    unlocked: bool
    progress: Optional[int] = None
    max_progress: Optional[int] = None


class ChartPoint(BaseModel):
    """Точка графика выполнения за день"""

    day: date
    completed: int
    total: int
    percentage: int


class DayStatus(str, Enum):
    """Состояние дня в календаре привычки"""

    COMPLETED = "completed"
    MISSED = "missed"
    FUTURE = "future"
    BEFORE_START = "before_start"


class CalendarDay(BaseModel):
    day: date
    status: DayStatus
    is_today: bool = False


class GoalProgress(BaseModel):
    """Прогресс по цели для привычки со счетчиком"""

    habit_id: str
    goal: int
    today_count: int
    today_percentage: int
    week_start: date
    week_end: date
    week_total: int
    week_goal: int
    week_percentage: int


class UserCreate(BaseModel):
    """Данные для регистрации пользователя"""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    password: str = Field(..., min_length=8, max_length=128)


class UserResponse(BaseModel):
    id: int
    username: str
    is_active: bool


class ErrorDetail(BaseModel):
    """Детали ошибки (RFC 7807 Problem Details)"""

    type: str = Field(..., description="URI идентификатор типа проблемы")
    title: str = Field(..., description="Краткое описание проблемы")
    status: int = Field(..., description="HTTP статус код")
    detail: str = Field(..., description="Детальное объяснение проблемы")
    instance: str = Field(
        ..., description="URI идентифицирующий конкретный случай проблемы"
    )
    correlation_id: Optional[str] = Field(None, description="ID для корреляции в логах")


class HealthResponse(BaseModel):
    """Ответ health-check endpoint"""

    status: str
