from __future__ import annotations

import datetime as dt
from decimal import Decimal

from starlette.requests import Request

from src.app.main import templates
from src.tracker.expenses.models import Expense
from src.utils.time import UTC, format_local, format_long_date


def _request(path: str = "/expenses/1") -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": [],
        "query_string": b"",
    }
    return Request(scope)


def test_format_local_converts_utc_to_newyork():
    # 2025-01-01 05:00 UTC == 2025-01-01 00:00 in America/New_York (EST)
    d = dt.datetime(2025, 1, 1, 5, 0, 0, tzinfo=UTC)
    assert format_local(d, tz_name="America/New_York") == "2025-01-01 00:00"


def test_format_long_date():
    assert format_long_date(dt.date(2025, 3, 10)) == "Monday, March 10, 2025"
    assert format_long_date(None) == "—"


def test_show_page_renders_timestamps_in_ui_timezone(monkeypatch):
    monkeypatch.setenv("UI_TIMEZONE", "America/New_York")
    created = dt.datetime(2025, 1, 1, 5, 0, 0, tzinfo=UTC)
    expense = Expense(
        id=1,
        description="Lunch",
        amount=Decimal("9.99"),
        category="Restaurants and Cafes",
        date=dt.date(2024, 12, 31),
        created_at=created,
        updated_at=created,
    )
    html = templates.get_template("expenses_show.html").render(
        {
            "request": _request(),
            "actor": "tester",
            "auth_banner": None,
            "categories": [],
            "today": dt.date(2025, 1, 1),
            "expense": expense,
        }
    )
    assert "2025-01-01 00:00" in html
    assert "$9.99" in html
    assert "badge-restaurants-and-cafes" in html
