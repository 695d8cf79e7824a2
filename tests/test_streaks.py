"""Тесты серий (streaks) и процента выполнения одной привычки"""

import pytest

from habit_tracker.dates import InvalidDateError, date_range, to_iso
from habit_tracker.streaks import (
    StreakResult,
    completion_rate,
    compute_habit_stats,
    compute_streak,
    longest_run,
    round_half_up,
)


def _days(start: str, end: str) -> list[str]:
    return [to_iso(d) for d in date_range(start, end)]


class TestLongestRun:
    def test_empty(self):
        assert longest_run([]) == 0

    def test_single_date(self):
        assert longest_run(["2024-01-01"]) == 1

    def test_duplicates_collapsed(self):
        assert longest_run(["2024-01-01", "2024-01-01", "2024-01-02"]) == 2

    def test_unsorted_input(self):
        dates = ["2024-01-10", "2024-01-02", "2024-01-11", "2024-01-01", "2024-01-12"]
        assert longest_run(dates) == 3

    def test_run_across_month_boundary(self):
        assert longest_run(["2024-01-30", "2024-01-31", "2024-02-01"]) == 3


class TestComputeStreak:
    def test_empty_set(self):
        assert compute_streak([], "2024-01-03") == StreakResult(current=0, longest=0)

    def test_consecutive_ending_today(self):
        """Сценарий A: 01..03, сегодня 03"""
        result = compute_streak(_days("2024-01-01", "2024-01-03"), "2024-01-03")
        assert result == StreakResult(current=3, longest=3)

    def test_gap_of_two_days_breaks_current(self):
        """Сценарий B: 01..03, сегодня 05"""
        result = compute_streak(_days("2024-01-01", "2024-01-03"), "2024-01-05")
        assert result == StreakResult(current=0, longest=3)

    def test_yesterday_keeps_streak_alive(self):
        result = compute_streak(_days("2024-01-01", "2024-01-03"), "2024-01-04")
        assert result == StreakResult(current=3, longest=3)

    def test_today_only(self):
        assert compute_streak(["2024-01-05"], "2024-01-05") == StreakResult(1, 1)

    def test_longest_from_history(self):
        dates = _days("2024-01-01", "2024-01-07") + ["2024-01-09", "2024-01-10"]
        assert compute_streak(dates, "2024-01-10") == StreakResult(current=2, longest=7)

    def test_future_dates_do_not_extend_current(self):
        dates = ["2024-01-04", "2024-01-05", "2024-01-06"]
        result = compute_streak(dates, "2024-01-04")
        assert result.current == 1
        assert result.longest == 3

    def test_accepts_date_objects(self):
        result = compute_streak(date_range("2024-01-01", "2024-01-03"), "2024-01-03")
        assert result == StreakResult(3, 3)

    def test_malformed_date_rejected(self):
        with pytest.raises(InvalidDateError):
            compute_streak(["2024-01-01", "01/02/2024"], "2024-01-03")

    @pytest.mark.parametrize(
        "dates",
        [
            ["2024-01-03"],
            ["2024-01-02"],
            ["2023-12-25", "2023-12-26", "2024-01-02", "2024-01-03"],
            ["2023-12-01", "2023-12-02", "2023-12-03", "2023-12-04"],
        ],
    )
    def test_longest_never_less_than_current(self, dates):
        result = compute_streak(dates, "2024-01-03")
        assert result.longest >= result.current
        if "2024-01-03" in dates:
            assert result.current >= 1
        if "2024-01-03" not in dates and "2024-01-02" not in dates:
            assert result.current == 0


class TestCompletionRate:
    def test_round_half_up(self):
        assert round_half_up(1, 2) == 1
        assert round_half_up(5, 2) == 3
        assert round_half_up(1, 3) == 0

    def test_half_of_ten_days(self):
        """Сценарий D: 10 дней с начала (включительно), 5 отметок"""
        assert completion_rate("2024-01-01", 5, "2024-01-10") == 50

    def test_rounds_half_up(self):
        # 1/8 = 12.5%
        assert completion_rate("2024-01-01", 1, "2024-01-08") == 13

    def test_start_today(self):
        assert completion_rate("2024-01-10", 1, "2024-01-10") == 100
        assert completion_rate("2024-01-10", 0, "2024-01-10") == 0

    def test_start_in_future_uses_one_day(self):
        assert completion_rate("2024-02-01", 0, "2024-01-10") == 0

    def test_capped_at_100(self):
        assert completion_rate("2024-01-10", 3, "2024-01-10") == 100


class TestHabitStats:
    def test_habit_stats(self, make_habit, make_completion):
        habit = make_habit("h1", "2024-01-01")
        completions = [make_completion("h1", d) for d in _days("2024-01-08", "2024-01-10")]

        stats = compute_habit_stats(habit, completions, "2024-01-10")

        assert stats.current_streak == 3
        assert stats.longest_streak == 3
        assert stats.completed_today is True
        assert stats.completion_rate == 30

    def test_weekly_habit_uses_calendar_days(self, make_habit, make_completion):
        habit = make_habit("w1", "2024-01-01", frequency="weekly", weekly_days=[1])
        completions = [make_completion("w1", "2024-01-01"), make_completion("w1", "2024-01-08")]

        stats = compute_habit_stats(habit, completions, "2024-01-10")

        assert stats.completion_rate == 20
        assert stats.completed_today is False
        assert stats.current_streak == 0
