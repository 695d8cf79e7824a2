"""Тесты достижений"""

from habit_tracker.achievements import BADGES, evaluate_achievements, evaluate_counters
from habit_tracker.models import GlobalStats, HabitWithStats


def _by_id(achievements):
    return {a.id: a for a in achievements}


class TestBadgeTable:
    def test_ten_badges_in_order(self):
        assert [b.name for b in BADGES] == [
            "First Step",
            "Habit Collector",
            "Perfect Day",
            "Streak Starter",
            "Week Warrior",
            "Fortnight Force",
            "Monthly Master",
            "Committed",
            "Centurion",
            "Legendary",
        ]


class TestEvaluateCounters:
    def test_nothing_unlocked_for_new_user(self):
        achievements = evaluate_counters(0, 0, 0, 0, False)

        assert len(achievements) == 10
        assert not any(a.unlocked for a in achievements)

    def test_week_warrior_by_longest_streak(self):
        """Сценарий E: открыт при longest = 7 даже при current = 0"""
        badges = _by_id(evaluate_counters(1, 0, 7, 7, False))

        assert badges["week-warrior"].unlocked is True
        assert badges["week-warrior"].progress == 0
        assert badges["week-warrior"].max_progress == 7
        assert badges["fortnight-force"].unlocked is False

    def test_progress_capped_at_target(self):
        badges = _by_id(evaluate_counters(8, 20, 20, 60, False))

        assert badges["habit-collector"].progress == 5
        assert badges["streak-starter"].progress == 3
        assert badges["monthly-master"].progress == 20
        assert badges["committed"].progress == 50
        assert badges["committed"].unlocked is True

    def test_badges_without_progress(self):
        badges = _by_id(evaluate_counters(1, 0, 0, 0, False))

        assert badges["first-habit"].unlocked is True
        assert badges["first-habit"].progress is None
        assert badges["perfect-day"].max_progress is None

    def test_perfect_day_by_today(self):
        badges = _by_id(evaluate_counters(2, 0, 0, 0, True))
        assert badges["perfect-day"].unlocked is True

    def test_perfect_day_by_history(self):
        badges = _by_id(evaluate_counters(2, 0, 1, 1, False))
        assert badges["perfect-day"].unlocked is True

    def test_legendary(self):
        badges = _by_id(evaluate_counters(5, 365, 365, 365, True))

        assert badges["legendary"].unlocked is True
        assert all(a.unlocked for a in badges.values())

    def test_legendary_one_day_short(self):
        badges = _by_id(evaluate_counters(5, 200, 364, 364, True))

        assert badges["legendary"].unlocked is False
        assert badges["legendary"].progress == 200
        assert badges["legendary"].max_progress == 365
        assert badges["centurion"].unlocked is True


class TestEvaluateAchievements:
    def test_all_done_today_requires_habits(self):
        badges = _by_id(evaluate_achievements([], GlobalStats()))
        assert badges["perfect-day"].unlocked is False

    def test_all_done_today_from_decorated_habits(self, make_habit):
        habits = [
            HabitWithStats(**make_habit(h, "2024-01-01").model_dump(), completed_today=True)
            for h in ("a", "b")
        ]

        badges = _by_id(evaluate_achievements(habits, GlobalStats()))

        assert badges["perfect-day"].unlocked is True
        assert badges["habit-collector"].progress == 2
