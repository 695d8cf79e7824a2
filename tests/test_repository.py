"""Тесты слоя доступа к данным (переключение отметок)"""

from datetime import date

import pytest

from habit_tracker import repository
from habit_tracker.auth import create_user
from habit_tracker.models import Completion, HabitCreate


@pytest.fixture
def habit(db_session, test_user_credentials):
    user = create_user(db_session, test_user_credentials["username"], "RepoPassword1!")
    return repository.create_habit(
        db_session, user.id, HabitCreate(name="Repo habit", start_date=date(2024, 1, 1))
    )


def _rows(db_session, habit_id):
    return repository.list_habit_completions(db_session, habit_id)


class TestToggleCompletion:
    def test_insert_then_delete(self, db_session, habit):
        assert repository.toggle_completion(db_session, habit.id, date(2024, 1, 2), 3) is True
        rows = _rows(db_session, habit.id)
        assert [(r.completed_date, r.count) for r in rows] == [(date(2024, 1, 2), 3)]

        assert repository.toggle_completion(db_session, habit.id, date(2024, 1, 2)) is False
        assert _rows(db_session, habit.id) == []

    def test_dates_are_independent(self, db_session, habit):
        repository.toggle_completion(db_session, habit.id, date(2024, 1, 2))
        repository.toggle_completion(db_session, habit.id, date(2024, 1, 3))
        repository.toggle_completion(db_session, habit.id, date(2024, 1, 2))

        assert [r.completed_date for r in _rows(db_session, habit.id)] == [date(2024, 1, 3)]

    def test_concurrent_insert_resolves_to_no_completion(self, db_session, habit, monkeypatch):
        """Вставка проиграла гонку: строка победителя удаляется, дубликата нет"""
        db_session.add(Completion(habit_id=habit.id, completed_date=date(2024, 1, 2)))
        db_session.commit()

        real_query = repository._completion_query
        calls = []

        def stale_query(db, habit_id, completed_date):
            calls.append(completed_date)
            if len(calls) == 1:
                # Первая проверка не видит строку, вставленную "параллельно"
                return db.query(Completion).filter(Completion.id == "missing")
            return real_query(db, habit_id, completed_date)

        monkeypatch.setattr(repository, "_completion_query", stale_query)

        assert repository.toggle_completion(db_session, habit.id, date(2024, 1, 2)) is False
        assert _rows(db_session, habit.id) == []

    def test_list_completions_scoped_to_owner(self, db_session, habit):
        repository.toggle_completion(db_session, habit.id, date(2024, 1, 2))

        own = repository.list_completions(db_session, habit.owner_id)
        other = repository.list_completions(db_session, habit.owner_id + 1000)

        assert [c.habit_id for c in own] == [habit.id]
        assert other == []

    def test_delete_habit_removes_completions(self, db_session, habit):
        habit_id = habit.id
        repository.toggle_completion(db_session, habit_id, date(2024, 1, 2))

        repository.delete_habit(db_session, habit)

        assert _rows(db_session, habit_id) == []
