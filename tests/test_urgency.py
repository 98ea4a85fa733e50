"""Unit tests for the deadline urgency brackets."""

from datetime import date

import pytest

from groupgrade.services.urgency import days_until, task_pressure_score, urgency_factor


@pytest.mark.parametrize(
    "days, expected",
    [
        (-5, 3.5),
        (-1, 3.5),
        (0, 3.0),
        (1, 3.0),
        (2, 2.0),
        (3, 2.0),
        (4, 1.5),
        (7, 1.5),
        (8, 1.0),
        (30, 1.0),
    ],
)
def test_urgency_factor_brackets(days, expected):
    assert urgency_factor(days) == expected


def test_task_pressure_score_multiplies_difficulty_by_urgency():
    assert task_pressure_score(3, 2.0) == 6.0
    assert task_pressure_score(2, 3.5) == 7.0


def test_days_until_is_negative_after_deadline():
    today = date(2026, 3, 10)
    assert days_until(date(2026, 3, 10), today) == 0
    assert days_until(date(2026, 3, 13), today) == 3
    assert days_until(date(2026, 3, 8), today) == -2
