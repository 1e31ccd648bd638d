from __future__ import annotations

import datetime as dt

from src.tracker.expenses.filters import (
    ExpenseFilter,
    month_bounds,
    parse_day,
    parse_month,
    resolve_category,
    shift_month,
)

TODAY = dt.date(2025, 3, 15)


def test_resolve_category_ignores_unknown_values():
    assert resolve_category("Groceries") == "Groceries"
    assert resolve_category("groceries") is None
    assert resolve_category("") is None
    assert resolve_category(None) is None
    assert resolve_category(["Groceries"]) is None


def test_parse_day_falls_back_to_today():
    assert parse_day("2025-01-02", today=TODAY) == dt.date(2025, 1, 2)
    assert parse_day("", today=TODAY) == TODAY
    assert parse_day("not-a-date", today=TODAY) == TODAY


def test_parse_month():
    assert parse_month("2024-02", today=TODAY) == dt.date(2024, 2, 1)
    assert parse_month("2024-2", today=TODAY) == dt.date(2024, 2, 1)
    assert parse_month("2024-13", today=TODAY) == dt.date(2025, 3, 1)
    assert parse_month("garbage", today=TODAY) == dt.date(2025, 3, 1)
    assert parse_month(None, today=TODAY) == dt.date(2025, 3, 1)


def test_month_bounds_handles_leap_years_and_december():
    assert month_bounds(dt.date(2024, 2, 10)) == (dt.date(2024, 2, 1), dt.date(2024, 2, 29))
    assert month_bounds(dt.date(2023, 2, 1)) == (dt.date(2023, 2, 1), dt.date(2023, 2, 28))
    assert month_bounds(dt.date(2024, 12, 31)) == (dt.date(2024, 12, 1), dt.date(2024, 12, 31))


def test_shift_month_crosses_years():
    assert shift_month(dt.date(2025, 1, 1), -1) == dt.date(2024, 12, 1)
    assert shift_month(dt.date(2024, 12, 1), 1) == dt.date(2025, 1, 1)


def test_repository_filters_by_category_and_range(repo, make_expense):
    make_expense(description="Feb food", category="Groceries", date=dt.date(2025, 2, 28))
    make_expense(description="Mar food", category="Groceries", date=dt.date(2025, 3, 1))
    make_expense(description="Mar bus", category="Transport", date=dt.date(2025, 3, 31))
    make_expense(description="Apr bus", category="Transport", date=dt.date(2025, 4, 1))

    march = repo.list(ExpenseFilter.for_month(dt.date(2025, 3, 1)))
    assert [e.description for e in march] == ["Mar bus", "Mar food"]

    march_food = repo.list(ExpenseFilter.for_month(dt.date(2025, 3, 1), "Groceries"))
    assert [e.description for e in march_food] == ["Mar food"]

    one_day = repo.list(ExpenseFilter.for_day(dt.date(2025, 2, 28)))
    assert [e.description for e in one_day] == ["Feb food"]

    assert repo.count(ExpenseFilter(category="Transport")) == 2


def test_out_of_range_days_and_months_fall_back_to_today():
    assert parse_day("9999-12-31", today=TODAY) == TODAY
    assert parse_day("0001-01-01", today=TODAY) == TODAY
    assert parse_day(dt.date(9999, 12, 31), today=TODAY) == TODAY
    assert parse_day("0002-01-01", today=TODAY) == dt.date(2, 1, 1)
    assert parse_month("9999-12", today=TODAY) == dt.date(2025, 3, 1)
    assert parse_month("0001-01", today=TODAY) == dt.date(2025, 3, 1)
    assert parse_month("9998-12", today=TODAY) == dt.date(9998, 12, 1)


def test_month_helpers_at_the_calendar_edges():
    assert month_bounds(dt.date(9999, 12, 5)) == (dt.date(9999, 12, 1), dt.date(9999, 12, 31))
    assert shift_month(dt.date(1, 1, 1), -1) == dt.date(1, 1, 1)
    assert shift_month(dt.date(9999, 12, 1), 1) == dt.date(9999, 12, 1)
