from __future__ import annotations

import datetime as dt
from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from src.tracker.expenses.filters import ExpenseFilter, Ordering
from src.tracker.expenses.models import (
    CategoryBreakdownRow,
    DailyBreakdownRow,
    DailyReport,
    Expense,
    MonthlyReport,
)
from src.tracker.expenses.repository import ExpenseRepository
from src.utils.money import money_2dp, round_half_up


def total(expenses: Iterable[Expense]) -> Decimal:
    return money_2dp(sum((e.amount for e in expenses), Decimal("0")))


def percentage_of(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= 0:
        return Decimal("0")
    return round_half_up(part / whole * 100, 1)


def category_breakdown(expenses: Sequence[Expense]) -> list[CategoryBreakdownRow]:
    """
    Sparse per-category totals; percentages are relative to the total of the
    sequence passed in (i.e. the already-filtered set).
    """
    overall = total(expenses)
    totals: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    counts: dict[str, int] = defaultdict(int)
    for e in expenses:
        totals[e.category] += e.amount
        counts[e.category] += 1
    rows = [
        CategoryBreakdownRow(
            category=cat,
            total=money_2dp(amt),
            count=counts[cat],
            percentage=percentage_of(amt, overall),
        )
        for cat, amt in totals.items()
    ]
    # Largest first; name keeps ties deterministic.
    rows.sort(key=lambda r: (-r.total, r.category))
    return rows


def daily_breakdown(expenses: Iterable[Expense]) -> list[DailyBreakdownRow]:
    totals: dict[dt.date, Decimal] = defaultdict(lambda: Decimal("0"))
    counts: dict[dt.date, int] = defaultdict(int)
    for e in expenses:
        totals[e.date] += e.amount
        counts[e.date] += 1
    return [
        DailyBreakdownRow(date=d, total=money_2dp(totals[d]), count=counts[d])
        for d in sorted(totals, reverse=True)
    ]


def daily_report(repo: ExpenseRepository, *, day: dt.date, category: Optional[str] = None) -> DailyReport:
    expenses = repo.list(ExpenseFilter.for_day(day, category), Ordering.CREATED_DESC)
    return DailyReport(
        date=day,
        category=category,
        expenses=expenses,
        total=total(expenses),
        category_breakdown=category_breakdown(expenses),
    )


def monthly_report(repo: ExpenseRepository, *, month: dt.date, category: Optional[str] = None) -> MonthlyReport:
    flt = ExpenseFilter.for_month(month, category)
    expenses = repo.list(flt, Ordering.DATE_DESC)
    return MonthlyReport(
        month=flt.start,
        start=flt.start,
        end=flt.end,
        category=category,
        expenses=expenses,
        total=total(expenses),
        category_breakdown=category_breakdown(expenses),
        daily_breakdown=daily_breakdown(expenses),
    )
