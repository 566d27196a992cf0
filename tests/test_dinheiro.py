from datetime import date, datetime

import pytest

from financas.dinheiro import (
    add_months,
    days_late,
    due_date_for_month,
    is_past,
    month_key,
    round_money,
    to_date,
    to_money,
)


@pytest.mark.parametrize("value, expected", [
    (2500, 2500.0),
    ("3500.50", 3500.5),
    (" 10 ", 10.0),
    (-20, -20.0),
    (None, 0.0),
    ("", 0.0),
    ("abc", 0.0),
    (float("nan"), 0.0),
    (float("inf"), 0.0),
    ([1, 2], 0.0),
    (True, 0.0),
])
def test_to_money(value, expected):
    assert to_money(value) == expected


def test_round_money():
    assert round_money("1000.129") == 1000.13
    assert round_money(350.0000001) == 350.0


def test_to_date_accepts_common_shapes():
    assert to_date("2025-01-10") == date(2025, 1, 10)
    assert to_date("2025-01-10 08:30:00") == date(2025, 1, 10)
    assert to_date(datetime(2025, 1, 10, 9, 0)) == date(2025, 1, 10)
    assert to_date("2025-03") == date(2025, 3, 1)
    assert to_date("") is None
    assert to_date(None) is None


def test_month_key():
    assert month_key(date(2025, 1, 31)) == "2025-01"
    assert month_key("2025-11-05") == "2025-11"
    assert month_key("2025-11") == "2025-11"
    with pytest.raises(ValueError):
        month_key("")
    with pytest.raises(ValueError):
        month_key("2025-13")


def test_add_months_crosses_year():
    assert add_months("2025-11", 3) == "2026-02"
    assert add_months("2025-01", -1) == "2024-12"


def test_due_date_for_month_clamps_to_month_end():
    assert due_date_for_month("2025-02") == date(2025, 2, 10)
    assert due_date_for_month("2025-02", day=31) == date(2025, 2, 28)


def test_is_past_and_days_late():
    due = date(2025, 1, 10)
    assert not is_past(due, date(2025, 1, 10))
    assert is_past(due, date(2025, 1, 11))
    assert days_late(due, date(2025, 1, 5)) == 0
    assert days_late(due, date(2025, 1, 10)) == 0
    assert days_late(due, "2025-02-05") == 26
