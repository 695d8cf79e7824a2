"""
Утилиты для работы с календарными датами
Все даты на границах системы передаются в формате yyyy-MM-dd
"""

import re
from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Optional, Union

ISO_DATE_FORMAT = "%Y-%m-%d"

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateLike = Union[date, str]


class InvalidDateError(ValueError):
    """Дата не в формате yyyy-MM-dd или не существует в календаре"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid calendar date: {value!r} (expected yyyy-MM-dd)")


def parse_iso_date(value: DateLike) -> date:
    """
    Разбор даты в строгом формате yyyy-MM-dd

    Args:
        value: Строка yyyy-MM-dd или объект date (datetime усекается до дня)

    Returns:
        Объект date

    Raises:
        InvalidDateError: Если строка не соответствует формату
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        raise InvalidDateError(value)
    try:
        return datetime.strptime(value, ISO_DATE_FORMAT).date()
    except ValueError as e:
        raise InvalidDateError(value) from e


def resolve_today(today: Optional[DateLike] = None) -> date:
    """Локальный день вызывающей стороны или, если не передан, серверная дата"""
    return parse_iso_date(today) if today is not None else date.today()


def to_iso(value: DateLike) -> str:
    """Нормализовать дату к строке yyyy-MM-dd"""
    return parse_iso_date(value).strftime(ISO_DATE_FORMAT)


def days_between(later: DateLike, earlier: DateLike) -> int:
    """Разница в календарных днях (later - earlier), может быть отрицательной"""
    return (parse_iso_date(later) - parse_iso_date(earlier)).days


def shift_days(day: DateLike, days: int) -> date:
    """Сдвинуть дату на days дней (отрицательное значение - назад)"""
    return parse_iso_date(day) + timedelta(days=days)


def yesterday(today: DateLike) -> date:
    return shift_days(today, -1)


def is_same_day(a: DateLike, b: DateLike) -> bool:
    return parse_iso_date(a) == parse_iso_date(b)


def date_range(start: DateLike, end: DateLike) -> list[date]:
    """Все дни от start до end включительно (пустой список, если start > end)"""
    first = parse_iso_date(start)
    total = days_between(end, first)
    return [first + timedelta(days=offset) for offset in range(total + 1)]


def week_bounds(day: DateLike) -> tuple[date, date]:
    """Понедельник и воскресенье недели, содержащей day"""
    current = parse_iso_date(day)
    monday = current - timedelta(days=current.weekday())
    return monday, monday + timedelta(days=6)


def month_bounds(day: DateLike) -> tuple[date, date]:
    """Первый и последний день месяца, содержащего day"""
    current = parse_iso_date(day)
    last_day = monthrange(current.year, current.month)[1]
    return current.replace(day=1), current.replace(day=last_day)


_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")


def parse_month(value: str) -> date:
    """
    Первый день месяца из строки yyyy-MM

    Raises:
        InvalidDateError: Если строка не соответствует формату
    """
    if not isinstance(value, str) or not _MONTH_RE.match(value):
        raise InvalidDateError(value)
    return parse_iso_date(f"{value}-01")
