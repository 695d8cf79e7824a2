"""
Глобальная статистика: "идеальные дни" по всем привычкам пользователя
"""

from collections import defaultdict

from habit_tracker.dates import DateLike, to_iso
from habit_tracker.models import CompletionResponse, GlobalStats, HabitResponse
from habit_tracker.streaks import compute_streak


def complete_days(
    habits: list[HabitResponse], completions: list[CompletionResponse]
) -> list[str]:
    """
    Даты (yyyy-MM-dd, по возрастанию), в которые выполнены все привычки,
    существовавшие на эту дату

    Привычки с start_date позже даты в требование не входят.
    """
    completed_on: dict[str, set[str]] = defaultdict(set)
    for completion in completions:
        completed_on[to_iso(completion.completed_date)].add(completion.habit_id)

    starts = [(habit.id, to_iso(habit.start_date)) for habit in habits]

    result = []
    for day in sorted(completed_on):
        existing = [habit_id for habit_id, start in starts if start <= day]
        if existing and all(habit_id in completed_on[day] for habit_id in existing):
            result.append(day)
    return result


def compute_global_stats(
    habits: list[HabitResponse], completions: list[CompletionResponse], today: DateLike
) -> GlobalStats:
    """Глобальные серии по идеальным дням (тот же алгоритм, что и для одной привычки)"""
    if not habits:
        return GlobalStats()

    days = complete_days(habits, completions)
    streak = compute_streak(days, today)

    return GlobalStats(
        global_current_streak=streak.current,
        global_longest_streak=streak.longest,
        total_complete_days=len(days),
    )
