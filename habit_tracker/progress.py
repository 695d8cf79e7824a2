"""
Прогресс: данные графика выполнения, календарь месяца, сводка и прогресс
по целям-счетчикам
"""

from datetime import date
from enum import Enum
from typing import Iterable, Optional

from habit_tracker.dates import (
    DateLike,
    date_range,
    is_same_day,
    month_bounds,
    parse_iso_date,
    shift_days,
    to_iso,
    week_bounds,
)
from habit_tracker.models import (
    CalendarDay,
    ChartPoint,
    DayStatus,
    GlobalStats,
    GoalProgress,
    HabitWithStats,
)
from habit_tracker.streaks import round_half_up


class ChartWindow(str, Enum):
    """Окно графика выполнения"""

    LAST_7_DAYS = "7days"
    LAST_30_DAYS = "30days"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"


def window_days(window: ChartWindow, today: DateLike) -> list[date]:
    """Дни окна графика (неделя начинается с понедельника)"""
    if window == ChartWindow.LAST_7_DAYS:
        return date_range(shift_days(today, -6), today)
    if window == ChartWindow.LAST_30_DAYS:
        return date_range(shift_days(today, -29), today)
    if window == ChartWindow.THIS_WEEK:
        return date_range(*week_bounds(today))
    return date_range(*month_bounds(today))


def _percentage(part: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(100 * part, total)


def completion_chart(
    habits: list[HabitWithStats], window: ChartWindow, today: DateLike
) -> list[ChartPoint]:
    """Сколько привычек выполнено в каждый день окна"""
    completed_sets = [{to_iso(c.completed_date) for c in h.completions} for h in habits]

    points = []
    for day in window_days(window, today):
        day_iso = to_iso(day)
        completed = sum(1 for dates in completed_sets if day_iso in dates)
        points.append(
            ChartPoint(
                day=day,
                completed=completed,
                total=len(habits),
                percentage=_percentage(completed, len(habits)),
            )
        )
    return points


def average_completion(points: list[ChartPoint]) -> int:
    """Средний процент по точкам графика"""
    if not points:
        return 0
    return round_half_up(sum(p.percentage for p in points), len(points))


def progress_summary(habits: list[HabitWithStats], global_stats: GlobalStats) -> dict:
    """Сводка для страницы прогресса"""
    average_rate = 0
    if habits:
        average_rate = round_half_up(sum(h.completion_rate for h in habits), len(habits))

    return {
        "total_habits": len(habits),
        "completed_today": sum(1 for h in habits if h.completed_today),
        "average_completion_rate": average_rate,
        "global_stats": global_stats,
    }


def _count_on(habit: HabitWithStats, day_iso: str) -> int:
    for completion in habit.completions:
        if to_iso(completion.completed_date) == day_iso:
            return completion.count or 0
    return 0


def goal_progress(habit: HabitWithStats, today: DateLike) -> Optional[GoalProgress]:
    """
    Прогресс по цели для привычки со счетчиком

    Сегодня: count / goal. Неделя (пн-вс, содержащая today): сумма count / (goal * 7).
    Проценты ограничены 100. None, если привычка не считает количество или цели нет.
    """
    if not habit.track_count or not habit.count_goal:
        return None

    goal = habit.count_goal
    today_iso = to_iso(today)
    today_count = _count_on(habit, today_iso)

    week_start, week_end = week_bounds(today)
    week_days = date_range(week_start, week_end)
    week_total = sum(_count_on(habit, to_iso(day)) for day in week_days)
    week_goal = goal * len(week_days)

    return GoalProgress(
        habit_id=habit.id,
        goal=goal,
        today_count=today_count,
        today_percentage=min(100, _percentage(today_count, goal)),
        week_start=week_start,
        week_end=week_end,
        week_total=week_total,
        week_goal=week_goal,
        week_percentage=min(100, _percentage(week_total, week_goal)),
    )


def sort_by_reminder_time(habits: list[HabitWithStats]) -> list[HabitWithStats]:
    """Сортировка по времени напоминания, привычки без напоминания - в конце"""
    return sorted(habits, key=lambda h: (h.reminder_time is None, h.reminder_time or ""))



def month_calendar(
    start_date: DateLike,
    completed_dates: Iterable[DateLike],
    month: DateLike,
    today: DateLike,
) -> list[CalendarDay]:
    """
    Состояние каждого дня месяца для одной привычки

    Отметка важнее всего остального: день с отметкой - completed, даже если он
    раньше start_date. Иначе дни после today - future, дни до start_date -
    before_start, остальные - missed.

    Args:
        start_date: Дата начала привычки
        completed_dates: Даты отметок привычки
        month: Любой день нужного месяца
        today: Локальная дата вызывающей стороны
    """
    completed = {to_iso(d) for d in completed_dates}
    start = parse_iso_date(start_date)
    anchor = parse_iso_date(today)

    days = []
    for day in date_range(*month_bounds(month)):
        if to_iso(day) in completed:
            status = DayStatus.COMPLETED
        elif day > anchor:
            status = DayStatus.FUTURE
        elif day < start:
            status = DayStatus.BEFORE_START
        else:
            status = DayStatus.MISSED
        days.append(CalendarDay(day=day, status=status, is_today=is_same_day(day, anchor)))
    return days
