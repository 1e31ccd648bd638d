from __future__ import annotations

import csv
import datetime as dt
import io
from typing import Iterable, Optional

from src.tracker.expenses.categories import category_slug
from src.tracker.expenses.models import Expense


CSV_HEADER = ["Description", "Amount", "Category", "Date"]
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def render_csv(expenses: Iterable[Expense]) -> str:
    buf = io.StringIO()
    w = csv.writer(buf)
    w.writerow(CSV_HEADER)
    for e in expenses:
        w.writerow([e.description, f"{e.amount:.2f}", e.category, e.date.isoformat()])
    return buf.getvalue()


def export_filename(month: dt.date, category: Optional[str] = None) -> str:
    name = f"monthly_expenses_{month.year:04d}_{month.month:02d}"
    if category:
        name += "_" + category_slug(category, sep="_")
    return name + ".csv"


def content_disposition(filename: str) -> str:
    return f'attachment; filename="{filename}"'
