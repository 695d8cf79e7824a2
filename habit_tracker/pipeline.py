"""
Сборка представления привычек со статистикой

Статистика пересчитывается с нуля при каждом вызове: состояние между
вызовами не хранится, кэширование - ответственность вызывающей стороны.
"""

import logging
import time
from collections import defaultdict

from habit_tracker.dates import DateLike
from habit_tracker.global_stats import compute_global_stats
from habit_tracker.metrics import track_stats_computed
from habit_tracker.models import (
    CompletionResponse,
    GlobalStats,
    HabitResponse,
    HabitWithStats,
)
from habit_tracker.streaks import compute_habit_stats

logger = logging.getLogger(__name__)


def decorate_habit(
    habit: HabitResponse, completions: list[CompletionResponse], today: DateLike
) -> HabitWithStats:
    """Привычка + ее статистика; completions - только отметки этой привычки"""
    stats = compute_habit_stats(habit, completions, today)
    return HabitWithStats(
        **habit.model_dump(include=set(HabitResponse.model_fields)),
        current_streak=stats.current_streak,
        longest_streak=stats.longest_streak,
        completed_today=stats.completed_today,
        completions=list(completions),
        completion_rate=stats.completion_rate,
    )


def decorate_habits(
    habits: list[HabitResponse], completions: list[CompletionResponse], today: DateLike
) -> tuple[list[HabitWithStats], GlobalStats]:
    """
    Вычислить статистику для всех привычек и глобальную статистику

    Args:
        habits: Все привычки пользователя
        completions: Все отметки пользователя (по всем привычкам)
        today: Локальная дата вызывающей стороны

    Returns:
        (список привычек со статистикой в исходном порядке, глобальная статистика)
    """
    started = time.perf_counter()

    by_habit: dict[str, list[CompletionResponse]] = defaultdict(list)
    for completion in completions:
        by_habit[completion.habit_id].append(completion)

    decorated = [decorate_habit(habit, by_habit.get(habit.id, []), today) for habit in habits]
    global_stats = compute_global_stats(habits, completions, today)

    duration = time.perf_counter() - started
    track_stats_computed(duration)
    logger.debug(
        "Decorated %d habits (%d completions) in %.2fms",
        len(habits),
        len(completions),
        duration * 1000,
    )

    return decorated, global_stats
