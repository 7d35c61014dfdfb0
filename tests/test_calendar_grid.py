"""
Tests for spatial calendar navigation.
"""
from datetime import date, timedelta

import pytest

from stak.calendar_grid import DOWN, LEFT, RIGHT, UP, first_weekday, get_spatial_date, month_grid


def test_down_moves_one_week():
    assert get_spatial_date(date(2024, 3, 15), DOWN) == date(2024, 3, 22)


def test_left_from_first_rolls_into_previous_month():
    assert get_spatial_date(date(2024, 3, 1), LEFT) == date(2024, 2, 29)


def test_right_from_last_rolls_into_next_month():
    assert get_spatial_date(date(2024, 2, 29), RIGHT) == date(2024, 3, 1)


def test_year_boundaries():
    assert get_spatial_date(date(2024, 1, 1), LEFT) == date(2023, 12, 31)
    assert get_spatial_date(date(2023, 12, 31), RIGHT) == date(2024, 1, 1)
    assert get_spatial_date(date(2023, 12, 28), DOWN) == date(2024, 1, 4)
    assert get_spatial_date(date(2024, 1, 4), UP) == date(2023, 12, 28)


def test_unknown_direction_is_a_no_op():
    assert get_spatial_date(date(2024, 3, 15), "sideways") == date(2024, 3, 15)


@pytest.mark.parametrize("start", [date(2024, 3, 1) + timedelta(days=n) for n in range(0, 366, 11)])
def test_seven_rights_equal_one_down(start):
    d = start
    for _ in range(7):
        d = get_spatial_date(d, RIGHT)
    assert d == get_spatial_date(start, DOWN) == start + timedelta(days=7)


@pytest.mark.parametrize("start", [date(2023, 1, 1) + timedelta(days=n) for n in range(0, 730, 13)])
def test_moves_invert(start):
    assert get_spatial_date(get_spatial_date(start, RIGHT), LEFT) == start
    assert get_spatial_date(get_spatial_date(start, DOWN), UP) == start


def test_first_weekday_is_sunday_based():
    assert first_weekday(2024, 3) == 5  # Friday
    assert first_weekday(2024, 9) == 0  # Sunday


def test_month_grid_is_sunday_first():
    weeks = month_grid(2024, 3)
    assert weeks[0] == [0, 0, 0, 0, 0, 1, 2]
    assert weeks[-1][0] == 31
