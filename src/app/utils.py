from __future__ import annotations

import dataclasses
import datetime as dt
from decimal import Decimal
from typing import Any
from urllib.parse import urlencode

from pydantic import BaseModel


def jsonable(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Decimal):
        # Money stays exact on the wire: "12.50", not 12.5.
        return f"{value:f}"
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    if isinstance(value, BaseModel):
        return jsonable(value.model_dump())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {str(k): jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    return str(value)


def url_with(path: str, **params: Any) -> str:
    """Builds `path?query`, dropping empty parameters."""
    clean = {k: v for k, v in params.items() if v not in (None, "")}
    if not clean:
        return path
    return f"{path}?{urlencode(clean)}"


def wants_json(request) -> bool:
    return "application/json" in (request.headers.get("accept") or "").lower()
