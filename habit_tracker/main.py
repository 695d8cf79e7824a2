import logging
import uuid
from datetime import date
from typing import Literal, Optional

from fastapi import Depends, FastAPI, Response
from fastapi.exceptions import RequestValidationError
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import ValidationError
from sqlalchemy.orm import Session

from habit_tracker import repository
from habit_tracker.achievements import evaluate_achievements

# Аудит-логирование
from habit_tracker.audit import log_create, log_delete, log_update

# Аутентификация
from habit_tracker.auth import (
    authenticate_user,
    create_access_token,
    create_user,
    get_current_active_user,
    get_user_by_username,
)
from habit_tracker.config import LOG_LEVEL, RATE_LIMIT_ENABLED, RATE_LIMIT_PER_MINUTE
from habit_tracker.database import get_db
from habit_tracker.dates import InvalidDateError, parse_month, resolve_today

# Обработчики ошибок RFC 7807
from habit_tracker.errors import (
    ApiError,
    NotFoundError,
    api_error_handler,
    generic_exception_handler,
    invalid_date_handler,
    validation_error_handler,
)

# Prometheus метрики
from habit_tracker.metrics import (
    PrometheusMiddleware,
    metrics_endpoint,
    track_auth_failure,
    track_auth_request,
    track_completion_toggled,
    track_habit_created,
    track_habit_deleted,
    track_user_registered,
)
from habit_tracker.models import (
    CompletionResponse,
    CompletionToggle,
    ErrorDetail,
    Habit,
    HabitCreate,
    HabitResponse,
    HabitUpdate,
    HabitWithStats,
    HealthResponse,
    User,
    UserCreate,
    UserResponse,
)
from habit_tracker.pipeline import decorate_habits
from habit_tracker.progress import (
    ChartWindow,
    average_completion,
    completion_chart,
    goal_progress,
    month_calendar,
    progress_summary,
    sort_by_reminder_time,
)
from habit_tracker.security import (
    MAX_HABITS_PER_USER,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
    validate_resource_quota,
)

logging.basicConfig(
    level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = FastAPI(
    title="Habit Tracker API",
    version="0.2.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Регистрация обработчиков ошибок (RFC 7807)
app.add_exception_handler(ApiError, api_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(ValidationError, validation_error_handler)
app.add_exception_handler(InvalidDateError, invalid_date_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Middleware безопасности
if RATE_LIMIT_ENABLED:
    app.add_middleware(RateLimitMiddleware, requests_per_minute=RATE_LIMIT_PER_MINUTE)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(PrometheusMiddleware)

NOT_FOUND_RESPONSE = {404: {"model": ErrorDetail}}


@app.get("/health", response_model=HealthResponse)
def health():
    """Health check endpoint"""
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    """Prometheus metrics endpoint"""
    return metrics_endpoint()


# === Authentication Endpoints ===


@app.post("/register", response_model=UserResponse, status_code=201)
def register(user_data: UserCreate, db: Session = Depends(get_db)):  # noqa: B008
    """
    Регистрация нового пользователя

    Args:
        user_data: Данные пользователя (username, password)
        db: Сессия базы данных

    Returns:
        Созданный пользователь
    """
    if get_user_by_username(db, user_data.username):
        track_auth_failure("user_exists")
        track_auth_request("register", False)
        raise ApiError(
            code="user_exists",
            message="User with this username already exists",
            status_code=400,
        )

    user = create_user(db, user_data.username, user_data.password)

    track_user_registered()
    track_auth_request("register", True)
    log_create(
        resource_type="user",
        resource_id=user.id,
        user_id=user.id,
        correlation_id=str(uuid.uuid4()),
        details={"username": user.username},
    )

    return UserResponse(id=user.id, username=user.username, is_active=user.is_active)


@app.post("/login")
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
):
    """Вход пользователя и получение JWT токена"""
    user = authenticate_user(db, form_data.username, form_data.password)
    if not user:
        track_auth_failure("invalid_credentials")
        track_auth_request("login", False)
        raise ApiError(
            code="invalid_credentials",
            message="Incorrect username or password",
            status_code=401,
        )

    track_auth_request("login", True)
    access_token = create_access_token(data={"sub": user.username})

    return {"access_token": access_token, "token_type": "bearer"}


@app.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_active_user),  # noqa: B008
):
    """Информация о текущем пользователе"""
    return UserResponse(
        id=current_user.id,
        username=current_user.username,
        is_active=current_user.is_active,
    )


# === Habits ===


def _find_habit_or_404(db: Session, habit_id: str, user_id: int) -> Habit:
    habit = repository.get_habit(db, habit_id, user_id)
    if not habit:
        raise NotFoundError("Habit not found")
    return habit


def _load_stats(db: Session, user_id: int, today: date):
    """Перечитать привычки и отметки пользователя и пересчитать статистику"""
    habits = [HabitResponse.model_validate(h) for h in repository.list_habits(db, user_id)]
    completions = [
        CompletionResponse.model_validate(c) for c in repository.list_completions(db, user_id)
    ]
    return decorate_habits(habits, completions, today)


def _decorated_habit(db: Session, habit_id: str, user_id: int, today: date) -> HabitWithStats:
    decorated, _ = _load_stats(db, user_id, today)
    for habit in decorated:
        if habit.id == habit_id:
            return habit
    raise NotFoundError("Habit not found")


@app.get("/habits")
def get_habits(
    today: Optional[date] = None,
    sort: Literal["created", "reminder"] = "created",
    db: Session = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_active_user),  # noqa: B008
):
    """
    Привычки пользователя со статистикой и глобальная статистика

    Args:
        today: Локальная дата клиента (yyyy-MM-dd), по умолчанию - дата сервера
        sort: created - новые первыми, reminder - по времени напоминания
        db: Сессия базы данных
        current_user: Текущий пользователь

    Returns:
        Привычки со статистикой, глобальная статистика и количество
    """
    decorated, global_stats = _load_stats(db, current_user.id, resolve_today(today))
    if sort == "reminder":
        decorated = sort_by_reminder_time(decorated)

    return {"habits": decorated, "global_stats": global_stats, "total": len(decorated)}


@app.post("/habits", status_code=201, response_model=HabitWithStats)
def create_habit(
    habit: HabitCreate,
    today: Optional[date] = None,
    db: Session = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_active_user),  # noqa: B008
):
    """Создать новую привычку (start_date по умолчанию - today клиента)"""
    validate_resource_quota(
        repository.count_habits(db, current_user.id), MAX_HABITS_PER_USER, "habits"
    )

    anchor = resolve_today(today)
    if "start_date" not in habit.model_fields_set:
        habit.start_date = anchor

    new_habit = repository.create_habit(db, current_user.id, habit)

    track_habit_created()
    log_create(
        resource_type="habit",
        resource_id=new_habit.id,
        user_id=current_user.id,
        correlation_id=str(uuid.uuid4()),
        details={"name": new_habit.name, "frequency": new_habit.frequency},
    )

    return _decorated_habit(db, new_habit.id, current_user.id, anchor)


@app.get("/habits/{habit_id}", response_model=HabitWithStats, responses=NOT_FOUND_RESPONSE)
def get_habit(
    habit_id: str,
    today: Optional[date] = None,
    db: Session = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_active_user),  # noqa: B008
):
    """Привычка со статистикой"""
    _find_habit_or_404(db, habit_id, current_user.id)
    return _decorated_habit(db, habit_id, current_user.id, resolve_today(today))


@app.put("/habits/{habit_id}", responses=NOT_FOUND_RESPONSE)
def update_habit(
    habit_id: str,
    update_data: HabitUpdate,
    today: Optional[date] = None,
    db: Session = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_active_user),  # noqa: B008
):
    """
    Обновить привычку

    Returns:
        Сообщение со списком обновленных полей и привычка со статистикой
    """
    habit = _find_habit_or_404(db, habit_id, current_user.id)
    updated_fields = repository.update_habit(db, habit, update_data)

    if not updated_fields:
        message = "No fields to update"
    else:
        message = f"Habit updated successfully. Updated fields: {', '.join(updated_fields)}"
        log_update(
            resource_type="habit",
            resource_id=habit_id,
            user_id=current_user.id,
            correlation_id=str(uuid.uuid4()),
            details={"updated_fields": updated_fields},
        )

    return {
        "message": message,
        "habit": _decorated_habit(db, habit_id, current_user.id, resolve_today(today)),
    }


@app.delete("/habits/{habit_id}", status_code=204, responses=NOT_FOUND_RESPONSE)
def delete_habit(
    habit_id: str,
    db: Session = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_active_user),  # noqa: B008
):
    """Удалить привычку вместе с ее отметками"""
    habit = _find_habit_or_404(db, habit_id, current_user.id)
    name = habit.name
    repository.delete_habit(db, habit)

    track_habit_deleted()
    log_delete(
        resource_type="habit",
        resource_id=habit_id,
        user_id=current_user.id,
        correlation_id=str(uuid.uuid4()),
        details={"name": name},
    )
    return Response(status_code=204)


@app.post("/habits/{habit_id}/toggle", responses=NOT_FOUND_RESPONSE)
def toggle_completion(
    habit_id: str,
    toggle: CompletionToggle,
    today: Optional[date] = None,
    db: Session = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_active_user),  # noqa: B008
):
    """
    Переключить отметку выполнения привычки на дату

    Если отметка на эту дату есть - она удаляется, иначе создается.

    Returns:
        completed - состояние после переключения, habit - привычка со статистикой
    """
    anchor = resolve_today(today)
    habit = _find_habit_or_404(db, habit_id, current_user.id)

    if toggle.completed_date > anchor:
        raise ApiError(
            code="validation_error",
            message="Completion date cannot be in the future",
            status_code=422,
        )

    count = toggle.count if habit.track_count else None
    completed = repository.toggle_completion(db, habit_id, toggle.completed_date, count)

    track_completion_toggled(completed)
    audit = log_create if completed else log_delete
    audit(
        resource_type="completion",
        resource_id=habit_id,
        user_id=current_user.id,
        correlation_id=str(uuid.uuid4()),
        details={"habit_id": habit_id, "date": toggle.completed_date.isoformat()},
    )

    return {
        "completed": completed,
        "habit": _decorated_habit(db, habit_id, current_user.id, anchor),
    }


@app.get("/habits/{habit_id}/goal-progress", responses=NOT_FOUND_RESPONSE)
def get_goal_progress(
    habit_id: str,
    today: Optional[date] = None,
    db: Session = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_active_user),  # noqa: B008
):
    """Прогресс по цели-счетчику за сегодня и за текущую неделю"""
    anchor = resolve_today(today)
    _find_habit_or_404(db, habit_id, current_user.id)
    habit = _decorated_habit(db, habit_id, current_user.id, anchor)
    return {"habit_id": habit_id, "progress": goal_progress(habit, anchor)}


@app.get("/habits/{habit_id}/calendar", responses=NOT_FOUND_RESPONSE)
def get_habit_calendar(
    habit_id: str,
    month: Optional[str] = None,
    today: Optional[date] = None,
    db: Session = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_active_user),  # noqa: B008
):
    """
    Календарь привычки за месяц

    Args:
        month: Месяц yyyy-MM, по умолчанию - месяц today

    Returns:
        Дни месяца со статусом completed / missed / future / before_start
    """
    anchor = resolve_today(today)
    first_day = parse_month(month) if month is not None else anchor.replace(day=1)
    habit = _find_habit_or_404(db, habit_id, current_user.id)
    completions = repository.list_habit_completions(db, habit_id)

    days = month_calendar(
        habit.start_date, [c.completed_date for c in completions], first_day, anchor
    )
    return {"habit_id": habit_id, "month": first_day.strftime("%Y-%m"), "days": days}


# === Statistics ===


@app.get("/stats/global")
def get_global_stats(
    today: Optional[date] = None,
    db: Session = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_active_user),  # noqa: B008
):
    """Глобальная статистика идеальных дней"""
    _, global_stats = _load_stats(db, current_user.id, resolve_today(today))
    return global_stats


@app.get("/achievements")
def get_achievements(
    today: Optional[date] = None,
    db: Session = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_active_user),  # noqa: B008
):
    """Достижения пользователя"""
    decorated, global_stats = _load_stats(db, current_user.id, resolve_today(today))
    achievements = evaluate_achievements(decorated, global_stats)
    return {
        "achievements": achievements,
        "unlocked": sum(1 for a in achievements if a.unlocked),
        "total": len(achievements),
    }


@app.get("/progress/chart")
def get_progress_chart(
    window: ChartWindow = ChartWindow.LAST_7_DAYS,
    today: Optional[date] = None,
    db: Session = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_active_user),  # noqa: B008
):
    """Данные графика выполнения по дням"""
    anchor = resolve_today(today)
    decorated, _ = _load_stats(db, current_user.id, anchor)
    points = completion_chart(decorated, window, anchor)
    return {
        "window": window.value,
        "points": points,
        "average_completion": average_completion(points),
    }


@app.get("/progress/summary")
def get_progress_summary(
    today: Optional[date] = None,
    db: Session = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_active_user),  # noqa: B008
):
    """Сводка прогресса: количество привычек, выполнено сегодня, средний процент"""
    decorated, global_stats = _load_stats(db, current_user.id, resolve_today(today))
    return progress_summary(decorated, global_stats)
