from __future__ import annotations

import re
from typing import Optional


CATEGORIES: tuple[str, ...] = (
    "Groceries",
    "Transport",
    "Housing and Utilities",
    "Restaurants and Cafes",
    "Health and Medicine",
    "Clothing & Footwear",
    "Entertainment",
)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def is_category(value: Optional[str]) -> bool:
    # Exact, case-sensitive match.
    return isinstance(value, str) and value in CATEGORIES


def category_slug(value: str, sep: str = "-") -> str:
    """
    "Clothing & Footwear" -> "clothing-footwear" (used for CSS badges and export file names).
    """
    return _SLUG_RE.sub(sep, (value or "").strip().lower()).strip(sep)
