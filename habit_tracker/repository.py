"""
Доступ к данным привычек и отметок (SQLAlchemy)
Все операции ограничены владельцем: пользователь видит только свои строки
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from habit_tracker.models import Completion, Habit, HabitCreate, HabitUpdate

logger = logging.getLogger(__name__)


def list_habits(db: Session, user_id: int) -> list[Habit]:
    """Привычки пользователя, новые первыми"""
    return (
        db.query(Habit)
        .filter(Habit.owner_id == user_id)
        .order_by(Habit.created_at.desc(), Habit.id)
        .all()
    )


def count_habits(db: Session, user_id: int) -> int:
    return db.query(Habit).filter(Habit.owner_id == user_id).count()


def get_habit(db: Session, habit_id: str, user_id: int) -> Optional[Habit]:
    """Привычка по ID с проверкой владельца"""
    return db.query(Habit).filter(Habit.id == habit_id, Habit.owner_id == user_id).first()


def list_completions(db: Session, user_id: int) -> list[Completion]:
    """Все отметки пользователя по всем привычкам"""
    return (
        db.query(Completion)
        .join(Habit, Completion.habit_id == Habit.id)
        .filter(Habit.owner_id == user_id)
        .order_by(Completion.completed_date)
        .all()
    )


def list_habit_completions(db: Session, habit_id: str) -> list[Completion]:
    return (
        db.query(Completion)
        .filter(Completion.habit_id == habit_id)
        .order_by(Completion.completed_date)
        .all()
    )


def create_habit(db: Session, user_id: int, data: HabitCreate) -> Habit:
    habit = Habit(
        owner_id=user_id,
        name=data.name,
        description=data.description,
        frequency=data.frequency.value,
        weekly_days=data.weekly_days,
        start_date=data.start_date,
        reminder_time=data.reminder_time,
        track_count=data.track_count,
        count_goal=data.count_goal,
    )
    db.add(habit)
    db.commit()
    db.refresh(habit)
    return habit


def update_habit(db: Session, habit: Habit, data: HabitUpdate) -> list[str]:
    """
    Применить изменения к привычке

    Returns:
        Список обновленных полей (пустой, если изменять нечего)
    """
    changes = data.model_dump(exclude_unset=True)
    updated_fields = []

    for field, value in changes.items():
        if field in ("name", "frequency", "start_date", "track_count") and value is None:
            continue
        if field == "frequency":
            value = value.value if hasattr(value, "value") else value
        setattr(habit, field, value)
        updated_fields.append(field)

    # weekly_days имеет смысл только для weekly, count_goal - только при track_count
    if habit.frequency != "weekly" and habit.weekly_days is not None:
        habit.weekly_days = None
    if not habit.track_count and habit.count_goal is not None:
        habit.count_goal = None

    if updated_fields:
        db.commit()
        db.refresh(habit)
    return updated_fields


def delete_habit(db: Session, habit: Habit) -> None:
    """Удалить привычку вместе со всеми ее отметками"""
    db.delete(habit)
    db.commit()


def _completion_query(db: Session, habit_id: str, completed_date: date):
    return db.query(Completion).filter(
        Completion.habit_id == habit_id,
        Completion.completed_date == completed_date,
    )


def toggle_completion(
    db: Session, habit_id: str, completed_date: date, count: Optional[int] = None
) -> bool:
    """
    Переключить отметку выполнения привычки на дату

    Удаляет отметку, если она есть, иначе создает - в одной транзакции.
    Уникальный индекс (habit_id, completed_date) не дает двум конкурентным
    переключениям создать две строки: проигравшая вставка удаляет строку
    победителя, и пара переключений в сумме ничего не меняет.

    Returns:
        True, если отметка создана; False, если удалена
    """
    deleted = _completion_query(db, habit_id, completed_date).delete(
        synchronize_session=False
    )
    if deleted:
        db.commit()
        return False

    db.add(Completion(habit_id=habit_id, completed_date=completed_date, count=count))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(
            "Concurrent toggle for habit %s on %s, removing the existing completion",
            habit_id,
            completed_date.isoformat(),
        )
        _completion_query(db, habit_id, completed_date).delete(synchronize_session=False)
        db.commit()
        return False

    return True
