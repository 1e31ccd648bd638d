from __future__ import annotations

import datetime as dt
import os
from functools import lru_cache
from typing import Any
from zoneinfo import ZoneInfo

UTC = dt.timezone.utc


def utcnow() -> dt.datetime:
    return dt.datetime.now(UTC)


@lru_cache(maxsize=32)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def ui_timezone_name() -> str | None:
    name = os.environ.get("UI_TIMEZONE", "").strip()
    return name or None


def local_today() -> dt.date:
    """
    "Today" for validation and default date/month selection.

    Uses UI_TIMEZONE when set, otherwise the server's local date.
    """
    tz_name = ui_timezone_name()
    if tz_name is None:
        return dt.date.today()
    return utcnow().astimezone(_zone(tz_name)).date()


def ensure_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_datetime(value: Any) -> dt.datetime | None:
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        # Support "Z" suffix.
        s = s.replace("Z", "+00:00")
        try:
            return dt.datetime.fromisoformat(s)
        except ValueError:
            return None
    return None


def to_local(value: Any, *, tz_name: str | None = None) -> dt.datetime | None:
    d = parse_datetime(value)
    if d is None:
        return None
    name = tz_name or ui_timezone_name()
    if name is None:
        return ensure_utc(d).astimezone()
    return ensure_utc(d).astimezone(_zone(name))


def format_local(value: Any, fmt: str = "%Y-%m-%d %H:%M", tz_name: str | None = None) -> str:
    if value is None:
        return "—"
    if isinstance(value, dt.date) and not isinstance(value, dt.datetime):
        return value.isoformat()
    d = to_local(value, tz_name=tz_name)
    if d is None:
        return str(value)
    return d.strftime(fmt)


def format_long_date(value: Any) -> str:
    # "Friday, October 17, 2026"
    if isinstance(value, dt.datetime):
        value = value.date()
    if not isinstance(value, dt.date):
        return str(value) if value is not None else "—"
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"
