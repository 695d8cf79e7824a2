"""
Достижения (бейджи)
Статическая таблица правил и их вычисление по глобальной статистике.
Иконки и оформление - задача клиента, здесь только данные.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from habit_tracker.models import Achievement, GlobalStats, HabitWithStats


class Metric(str, Enum):
    """Счетчики, по которым открываются достижения"""

    HABIT_COUNT = "habit_count"
    CURRENT_STREAK = "global_current_streak"
    LONGEST_STREAK = "global_longest_streak"
    COMPLETE_DAYS = "total_complete_days"
    ALL_DONE_TODAY = "all_habits_completed_today"


@dataclass(frozen=True)
class BadgeRule:
    """
    Правило достижения

    unlock_on: счетчики, любой из которых >= threshold открывает бейдж
    progress_on: счетчик прогресса (None - бейдж без прогресса)
    """

    id: str
    name: str
    description: str
    threshold: int
    unlock_on: tuple[Metric, ...]
    progress_on: Optional[Metric] = None


BADGES: tuple[BadgeRule, ...] = (
    BadgeRule("first-habit", "First Step", "Create your first habit", 1, (Metric.HABIT_COUNT,)),
    BadgeRule(
        "habit-collector",
        "Habit Collector",
        "Create 5 habits",
        5,
        (Metric.HABIT_COUNT,),
        Metric.HABIT_COUNT,
    ),
    BadgeRule(
        "perfect-day",
        "Perfect Day",
        "Complete all habits in a day",
        1,
        (Metric.ALL_DONE_TODAY, Metric.COMPLETE_DAYS),
    ),
    BadgeRule(
        "streak-starter",
        "Streak Starter",
        "Achieve a 3-day streak",
        3,
        (Metric.LONGEST_STREAK,),
        Metric.CURRENT_STREAK,
    ),
    BadgeRule(
        "week-warrior",
        "Week Warrior",
        "Complete a 7-day streak",
        7,
        (Metric.LONGEST_STREAK,),
        Metric.CURRENT_STREAK,
    ),
    BadgeRule(
        "fortnight-force",
        "Fortnight Force",
        "Complete a 14-day streak",
        14,
        (Metric.LONGEST_STREAK,),
        Metric.CURRENT_STREAK,
    ),
    BadgeRule(
        "monthly-master",
        "Monthly Master",
        "Complete a 30-day streak",
        30,
        (Metric.LONGEST_STREAK,),
        Metric.CURRENT_STREAK,
    ),
    BadgeRule(
        "committed",
        "Committed",
        "Complete 50 perfect days total",
        50,
        (Metric.COMPLETE_DAYS,),
        Metric.COMPLETE_DAYS,
    ),
    BadgeRule(
        "centurion",
        "Centurion",
        "Complete a 100-day streak",
        100,
        (Metric.LONGEST_STREAK,),
        Metric.CURRENT_STREAK,
    ),
    BadgeRule(
        "legendary",
        "Legendary",
        "Complete a 365-day streak",
        365,
        (Metric.LONGEST_STREAK,),
        Metric.CURRENT_STREAK,
    ),
)


def evaluate_counters(
    habit_count: int,
    global_current_streak: int,
    global_longest_streak: int,
    total_complete_days: int,
    all_habits_completed_today: bool,
) -> list[Achievement]:
    """Состояние всех бейджей в порядке таблицы BADGES"""
    counters = {
        Metric.HABIT_COUNT: habit_count,
        Metric.CURRENT_STREAK: global_current_streak,
        Metric.LONGEST_STREAK: global_longest_streak,
        Metric.COMPLETE_DAYS: total_complete_days,
        Metric.ALL_DONE_TODAY: int(all_habits_completed_today),
    }

    achievements = []
    for rule in BADGES:
        unlocked = any(counters[metric] >= rule.threshold for metric in rule.unlock_on)
        progress = None
        max_progress = None
        if rule.progress_on is not None:
            progress = min(counters[rule.progress_on], rule.threshold)
            max_progress = rule.threshold

        achievements.append(
            Achievement(
                id=rule.id,
                name=rule.name,
                description=rule.description,
                unlocked=unlocked,
                progress=progress,
                max_progress=max_progress,
            )
        )
    return achievements


def evaluate_achievements(
    habits: list[HabitWithStats], global_stats: GlobalStats
) -> list[Achievement]:
    """Достижения по привычкам со статистикой и глобальной статистике"""
    all_done_today = bool(habits) and all(h.completed_today for h in habits)
    return evaluate_counters(
        habit_count=len(habits),
        global_current_streak=global_stats.global_current_streak,
        global_longest_streak=global_stats.global_longest_streak,
        total_complete_days=global_stats.total_complete_days,
        all_habits_completed_today=all_done_today,
    )
