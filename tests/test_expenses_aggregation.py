from __future__ import annotations

import datetime as dt
from decimal import Decimal

from src.tracker.expenses.aggregation import (
    category_breakdown,
    daily_breakdown,
    daily_report,
    monthly_report,
    percentage_of,
    total,
)


def test_percentage_rounds_half_up_and_handles_zero():
    assert percentage_of(Decimal("1"), Decimal("3")) == Decimal("33.3")
    assert percentage_of(Decimal("1"), Decimal("8")) == Decimal("12.5")
    assert percentage_of(Decimal("1"), Decimal("16")) == Decimal("6.3")
    assert percentage_of(Decimal("5"), Decimal("0")) == Decimal("0")


def test_category_breakdown_is_sparse_and_sorted(make_expense):
    a = make_expense(amount="10.00", category="Groceries")
    b = make_expense(amount="20.00", category="Transport")
    c = make_expense(amount="10.00", category="Transport")

    rows = category_breakdown([a, b, c])
    assert [r.category for r in rows] == ["Transport", "Groceries"]
    assert rows[0].total == Decimal("30.00")
    assert rows[0].count == 2
    assert rows[0].percentage == Decimal("75.0")
    assert rows[1].percentage == Decimal("25.0")
    assert category_breakdown([]) == []


def test_daily_breakdown_newest_first(make_expense):
    d1 = make_expense(amount="1.10", date=dt.date(2025, 3, 1))
    d2 = make_expense(amount="2.20", date=dt.date(2025, 3, 5))
    d3 = make_expense(amount="3.30", date=dt.date(2025, 3, 5))
    rows = daily_breakdown([d1, d2, d3])
    assert [(r.date, r.total, r.count) for r in rows] == [
        (dt.date(2025, 3, 5), Decimal("5.50"), 2),
        (dt.date(2025, 3, 1), Decimal("1.10"), 1),
    ]


def test_total_keeps_cents_exact(make_expense):
    rows = [make_expense(amount="0.10") for _ in range(3)]
    assert total(rows) == Decimal("0.30")
    assert total([]) == Decimal("0.00")


def test_monthly_report_excludes_other_months_and_trash(repo, make_expense):
    make_expense(description="In", amount="10.00", date=dt.date(2025, 3, 2))
    make_expense(description="Also in", amount="5.25", category="Groceries", date=dt.date(2025, 3, 31))
    make_expense(description="Out", amount="99.00", date=dt.date(2025, 4, 1))
    gone = make_expense(description="Deleted", amount="50.00", date=dt.date(2025, 3, 3))
    repo.soft_delete(gone.id)

    report = monthly_report(repo, month=dt.date(2025, 3, 1))
    assert report.start == dt.date(2025, 3, 1)
    assert report.end == dt.date(2025, 3, 31)
    assert report.total == Decimal("15.25")
    assert report.count == 2
    assert [e.description for e in report.expenses] == ["Also in", "In"]
    assert sum(r.total for r in report.category_breakdown) == report.total


def test_monthly_report_with_category_filter(repo, make_expense):
    make_expense(amount="10.00", category="Groceries", date=dt.date(2025, 3, 2))
    make_expense(amount="30.00", category="Transport", date=dt.date(2025, 3, 2))

    report = monthly_report(repo, month=dt.date(2025, 3, 1), category="Groceries")
    assert report.total == Decimal("10.00")
    assert [r.category for r in report.category_breakdown] == ["Groceries"]
    assert report.category_breakdown[0].percentage == Decimal("100.0")


def test_daily_report_lists_latest_created_first(repo, make_expense):
    make_expense(description="first", date=dt.date(2025, 3, 10))
    make_expense(description="second", date=dt.date(2025, 3, 10))
    make_expense(description="other day", date=dt.date(2025, 3, 11))

    report = daily_report(repo, day=dt.date(2025, 3, 10))
    assert [e.description for e in report.expenses] == ["second", "first"]
    assert report.total == Decimal("9.00")


def test_empty_reports():
    class _EmptyRepo:
        def list(self, flt, ordering):
            return []

    report = daily_report(_EmptyRepo(), day=dt.date(2025, 3, 10))
    assert report.total == Decimal("0.00")
    assert report.count == 0
    assert report.category_breakdown == []


def test_sixty_forty_day(repo, make_expense):
    make_expense(amount="60.00", category="Groceries", date=dt.date(2025, 3, 10))
    make_expense(amount="40.00", category="Transport", date=dt.date(2025, 3, 10))

    report = daily_report(repo, day=dt.date(2025, 3, 10))
    assert report.total == Decimal("100.00")
    assert [(r.category, r.total, r.percentage) for r in report.category_breakdown] == [
        ("Groceries", Decimal("60.00"), Decimal("60.0")),
        ("Transport", Decimal("40.00"), Decimal("40.0")),
    ]


def test_percentages_sum_to_100_within_rounding(make_expense):
    rows = [
        make_expense(amount="1.00", category="Groceries"),
        make_expense(amount="1.00", category="Transport"),
        make_expense(amount="1.00", category="Entertainment"),
    ]
    breakdown = category_breakdown(rows)
    assert [r.percentage for r in breakdown] == [Decimal("33.3")] * 3
    assert abs(sum(r.percentage for r in breakdown) - 100) <= Decimal("0.1") * len(breakdown)

    uneven = category_breakdown(
        rows
        + [
            make_expense(amount="2.35", category="Housing and Utilities"),
            make_expense(amount="0.07", category="Health and Medicine"),
        ]
    )
    assert abs(sum(r.percentage for r in uneven) - 100) <= Decimal("0.1") * len(uneven)


def test_single_category_set_is_one_hundred_percent(repo, make_expense):
    make_expense(amount="3.33", category="Groceries", date=dt.date(2025, 3, 2))
    make_expense(amount="6.67", category="Groceries", date=dt.date(2025, 3, 9))
    make_expense(amount="5.00", category="Transport", date=dt.date(2025, 3, 9))

    report = monthly_report(repo, month=dt.date(2025, 3, 1), category="Groceries")
    assert [(r.category, r.percentage) for r in report.category_breakdown] == [("Groceries", Decimal("100.0"))]
