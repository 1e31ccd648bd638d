from __future__ import annotations

import datetime as dt

from sqlalchemy.types import DateTime, TypeDecorator

from src.utils.time import ensure_utc


class UTCDateTime(TypeDecorator):
    """
    Timestamp column (created_at / updated_at / deleted_at) stored as naive UTC.

    SQLite keeps no offset, so values are normalised to UTC on write and come
    back tz-aware UTC on read.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: dt.datetime | None, dialect):
        if value is None:
            return None
        return ensure_utc(value).replace(tzinfo=None)

    def process_result_value(self, value: dt.datetime | None, dialect):
        if value is None:
            return None
        return ensure_utc(value)
