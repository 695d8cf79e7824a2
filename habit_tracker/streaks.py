"""
Статистика по одной привычке: серии (streaks) и процент выполнения

Чистые функции без I/O. compute_streak - общий примитив серий, его же
использует глобальная статистика (global_stats.py).
"""

from dataclasses import dataclass
from typing import Iterable

from habit_tracker.dates import (
    DateLike,
    days_between,
    is_same_day,
    parse_iso_date,
    to_iso,
    yesterday,
)
from habit_tracker.models import CompletionResponse, HabitResponse


@dataclass(frozen=True)
class StreakResult:
    """Текущая и самая длинная серия"""

    current: int
    longest: int


@dataclass(frozen=True)
class HabitStats:
    current_streak: int
    longest_streak: int
    completion_rate: int
    completed_today: bool


def round_half_up(numerator: int, denominator: int) -> int:
    """Округление numerator/denominator до целого, половины - вверх"""
    return (2 * numerator + denominator) // (2 * denominator)


def longest_run(dates: Iterable[DateLike]) -> int:
    """
    Самая длинная серия подряд идущих дней в наборе дат

    Дубликаты схлопываются. Для пустого набора - 0, для непустого - минимум 1.
    """
    unique_days = sorted({parse_iso_date(d) for d in dates})
    if not unique_days:
        return 0

    longest = 1
    current = 1
    for prev, curr in zip(unique_days, unique_days[1:]):
        if (curr - prev).days == 1:
            current += 1
            longest = max(longest, current)
        else:
            current = 1

    return longest


def compute_streak(dates: Iterable[DateLike], today: DateLike) -> StreakResult:
    """
    Вычислить текущую и самую длинную серию

    Текущая серия считается "живой", если день отмечен сегодня или вчера:
    сегодняшний день еще не закончился. Если нет ни сегодня, ни вчера,
    текущая серия равна 0, а самая длинная берется из истории.

    Args:
        dates: Даты выполнения (yyyy-MM-dd или date), порядок и повторы не важны
        today: День-якорь (локальная дата вызывающей стороны)

    Returns:
        StreakResult(current, longest)

    Raises:
        InvalidDateError: Если какая-либо дата не в формате yyyy-MM-dd
    """
    day_set = {to_iso(d) for d in dates}
    if not day_set:
        return StreakResult(current=0, longest=0)

    anchor = parse_iso_date(today)
    if to_iso(anchor) in day_set:
        cursor = yesterday(anchor)
    elif to_iso(yesterday(anchor)) in day_set:
        cursor = yesterday(yesterday(anchor))
    else:
        return StreakResult(current=0, longest=longest_run(day_set))

    current = 1
    while to_iso(cursor) in day_set:
        current += 1
        cursor = yesterday(cursor)

    return StreakResult(current=current, longest=max(current, longest_run(day_set)))


def completion_rate(start_date: DateLike, completed_count: int, today: DateLike) -> int:
    """
    Процент выполнения с даты начала по сегодня включительно

    Знаменатель - календарные дни с start_date, независимо от частоты привычки.
    Результат ограничен диапазоном 0-100.
    """
    total_days = max(1, days_between(today, start_date) + 1)
    return min(100, round_half_up(100 * completed_count, total_days))


def compute_habit_stats(
    habit: HabitResponse, completions: list[CompletionResponse], today: DateLike
) -> HabitStats:
    """Статистика одной привычки по ее собственным отметкам"""
    today_iso = to_iso(today)
    dates = [c.completed_date for c in completions]
    streak = compute_streak(dates, today_iso)

    return HabitStats(
        current_streak=streak.current,
        longest_streak=streak.longest,
        completion_rate=completion_rate(habit.start_date, len(completions), today_iso),
        completed_today=any(is_same_day(d, today_iso) for d in dates),
    )
