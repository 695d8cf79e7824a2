"""Тесты сборки привычек со статистикой"""

from datetime import date

from habit_tracker.pipeline import decorate_habit, decorate_habits


class TestDecorateHabits:
    def test_empty(self):
        habits, global_stats = decorate_habits([], [], "2024-01-03")
        assert habits == []
        assert global_stats.total_complete_days == 0

    def test_completions_routed_to_their_habit(self, make_habit, make_completion):
        habits = [make_habit("a", "2024-01-01"), make_habit("b", "2024-01-01")]
        completions = [
            make_completion("a", "2024-01-02"),
            make_completion("b", "2024-01-03"),
            make_completion("a", "2024-01-03"),
        ]

        decorated, global_stats = decorate_habits(habits, completions, "2024-01-03")

        assert [h.id for h in decorated] == ["a", "b"]
        a, b = decorated
        assert {c.completed_date for c in a.completions} == {date(2024, 1, 2), date(2024, 1, 3)}
        assert [c.completed_date for c in b.completions] == [date(2024, 1, 3)]
        assert a.current_streak == 2
        assert b.current_streak == 1
        assert a.completed_today and b.completed_today
        assert a.completion_rate == 67
        assert b.completion_rate == 33
        assert global_stats.total_complete_days == 1
        assert global_stats.global_current_streak == 1

    def test_habit_without_completions(self, make_habit):
        decorated, _ = decorate_habits([make_habit("a", "2024-01-01")], [], "2024-01-03")

        habit = decorated[0]
        assert habit.current_streak == 0
        assert habit.longest_streak == 0
        assert habit.completed_today is False
        assert habit.completions == []
        assert habit.completion_rate == 0

    def test_idempotent(self, make_habit, make_completion):
        habits = [make_habit("a", "2024-01-01"), make_habit("b", "2024-01-02")]
        completions = [make_completion("a", "2024-01-02"), make_completion("b", "2024-01-02")]

        first = decorate_habits(habits, completions, "2024-01-03")
        second = decorate_habits(habits, completions, "2024-01-03")

        assert first == second

    def test_decorating_already_decorated_habit(self, make_habit, make_completion):
        completions = [make_completion("a", "2024-01-03")]
        decorated = decorate_habit(make_habit("a", "2024-01-01"), completions, "2024-01-03")

        again = decorate_habit(decorated, completions, "2024-01-03")

        assert again == decorated
