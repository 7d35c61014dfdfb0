"""
CALENDAR GRID

A month is laid out as a Sunday-anchored 7-column grid. Spatial moves are
computed from the (week, weekday) cell of a day, then mapped back to a date,
rolling into the neighbouring month when the cell falls outside this one.
"""
import calendar
from datetime import date
from typing import List

UP, DOWN, LEFT, RIGHT = "up", "down", "left", "right"
DIRECTIONS = (UP, DOWN, LEFT, RIGHT)

_CAL = calendar.Calendar(calendar.SUNDAY)


def first_weekday(year: int, month: int) -> int:
    """Column of day 1 in a Sunday-first week (0 = Sunday)."""
    return (calendar.monthrange(year, month)[0] + 1) % 7


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def grid_position(day: date):
    offset = first_weekday(day.year, day.month)
    return divmod(day.day - 1 + offset, 7)


def _previous_month(year: int, month: int):
    return (year - 1, 12) if month == 1 else (year, month - 1)


def _next_month(year: int, month: int):
    return (year + 1, 1) if month == 12 else (year, month + 1)


def get_spatial_date(current: date, direction: str) -> date:
    year, month = current.year, current.month
    offset = first_weekday(year, month)
    week, weekday = grid_position(current)

    if direction == UP:
        week -= 1
    elif direction == DOWN:
        week += 1
    elif direction == LEFT:
        weekday -= 1
        if weekday < 0:
            week, weekday = week - 1, 6
    elif direction == RIGHT:
        weekday += 1
        if weekday > 6:
            week, weekday = week + 1, 0
    else:
        return current

    day = week * 7 + weekday - offset + 1
    if day < 1:
        year, month = _previous_month(year, month)
        day += days_in_month(year, month)
    elif day > days_in_month(year, month):
        day -= days_in_month(year, month)
        year, month = _next_month(year, month)
    return date(year, month, day)


def month_grid(year: int, month: int) -> List[List[int]]:
    """Weeks of the month, Sunday first, with 0 for cells outside it."""
    return _CAL.monthdayscalendar(year, month)
