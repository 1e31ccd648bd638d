from __future__ import annotations

import calendar
import datetime as dt
import enum
import re
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import Select

from src.db.models import ExpenseRow
from src.tracker.expenses.categories import is_category


class Ordering(str, enum.Enum):
    # List, monthly and export views: same-day entries show most recently created first.
    DATE_DESC = "date_desc"
    # Daily detail list.
    CREATED_DESC = "created_desc"


@dataclass(frozen=True)
class ExpenseFilter:
    category: Optional[str] = None
    start: Optional[dt.date] = None
    end: Optional[dt.date] = None
    with_trashed: bool = False
    only_trashed: bool = False

    @classmethod
    def for_day(cls, day: dt.date, category: Optional[str] = None) -> "ExpenseFilter":
        return cls(category=category, start=day, end=day)

    @classmethod
    def for_month(cls, month: dt.date, category: Optional[str] = None) -> "ExpenseFilter":
        start, end = month_bounds(month)
        return cls(category=category, start=start, end=end)


def resolve_category(raw: Any) -> Optional[str]:
    """
    Read-path category selection: anything that is not exactly one of the fixed
    categories means "no category constraint".
    """
    if isinstance(raw, str) and is_category(raw):
        return raw
    return None


# Selectable range for views; both neighbours (day or month) must be representable.
MIN_YEAR = 2
MAX_YEAR = 9998


def _in_range(d: dt.date) -> bool:
    return MIN_YEAR <= d.year <= MAX_YEAR


def parse_day(raw: Any, *, today: dt.date) -> dt.date:
    if isinstance(raw, dt.date):
        return raw if _in_range(raw) else today
    s = str(raw or "").strip()
    if not s:
        return today
    try:
        day = dt.date.fromisoformat(s)
    except ValueError:
        return today
    return day if _in_range(day) else today


_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")


def parse_month(raw: Any, *, today: dt.date) -> dt.date:
    """
    Parses "YYYY-MM" into the first day of that month; anything else falls back
    to the current month.
    """
    if isinstance(raw, dt.date):
        return raw.replace(day=1) if _in_range(raw) else today.replace(day=1)
    m = _MONTH_RE.match(str(raw or "").strip())
    if m:
        year, month = int(m.group(1)), int(m.group(2))
        if MIN_YEAR <= year <= MAX_YEAR and 1 <= month <= 12:
            return dt.date(year, month, 1)
    return today.replace(day=1)


def month_bounds(month: dt.date) -> tuple[dt.date, dt.date]:
    start = month.replace(day=1)
    last_day = calendar.monthrange(start.year, start.month)[1]
    return start, start.replace(day=last_day)


def shift_month(month: dt.date, delta: int) -> dt.date:
    """Moves by `delta` months, pinned to the first and last representable months."""
    idx = month.year * 12 + (month.month - 1) + int(delta)
    idx = min(max(idx, dt.MINYEAR * 12), dt.MAXYEAR * 12 + 11)
    return dt.date(idx // 12, idx % 12 + 1, 1)


def apply_filter(stmt: Select, flt: ExpenseFilter) -> Select:
    if flt.only_trashed:
        stmt = stmt.where(ExpenseRow.deleted_at.is_not(None))
    elif not flt.with_trashed:
        stmt = stmt.where(ExpenseRow.deleted_at.is_(None))
    if flt.category:
        stmt = stmt.where(ExpenseRow.category == flt.category)
    if flt.start is not None:
        stmt = stmt.where(ExpenseRow.date >= flt.start)
    if flt.end is not None:
        stmt = stmt.where(ExpenseRow.date <= flt.end)
    return stmt


def apply_order(stmt: Select, ordering: Ordering) -> Select:
    if ordering is Ordering.CREATED_DESC:
        return stmt.order_by(ExpenseRow.created_at.desc(), ExpenseRow.id.desc())
    return stmt.order_by(ExpenseRow.date.desc(), ExpenseRow.created_at.desc(), ExpenseRow.id.desc())
