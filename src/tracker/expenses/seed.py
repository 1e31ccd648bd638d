from __future__ import annotations

import datetime as dt
import random
from decimal import Decimal
from typing import Optional

from src.tracker.expenses.categories import CATEGORIES
from src.tracker.expenses.models import ExpenseInput
from src.tracker.expenses.repository import ExpenseRepository
from src.utils.money import money_2dp


SAMPLE_DESCRIPTIONS: dict[str, list[str]] = {
    "Groceries": ["Weekly groceries", "Fruits and vegetables", "Milk and bread", "Organic produce", "Snacks and drinks", "Meat and fish"],
    "Transport": ["Gas station", "Bus ticket", "Uber ride", "Parking fee", "Metro pass", "Taxi fare"],
    "Housing and Utilities": ["Electric bill", "Water bill", "Internet service", "Monthly rent", "Gas bill", "Phone bill"],
    "Restaurants and Cafes": ["Lunch at cafe", "Dinner with friends", "Morning coffee", "Business lunch", "Weekend brunch", "Pizza delivery"],
    "Health and Medicine": ["Pharmacy", "Doctor visit", "Vitamins and supplements", "Dental checkup", "Eye exam", "Prescription medicine"],
    "Clothing & Footwear": ["New shoes", "Winter jacket", "T-shirts", "Jeans", "Sports wear", "Work clothes"],
    "Entertainment": ["Movie tickets", "Netflix subscription", "Concert tickets", "Video game", "Books", "Museum visit"],
}

AMOUNT_RANGES: dict[str, tuple[Decimal, Decimal]] = {
    "Groceries": (Decimal("15.00"), Decimal("150.00")),
    "Transport": (Decimal("2.00"), Decimal("80.00")),
    "Housing and Utilities": (Decimal("50.00"), Decimal("500.00")),
    "Restaurants and Cafes": (Decimal("5.00"), Decimal("100.00")),
    "Health and Medicine": (Decimal("10.00"), Decimal("200.00")),
    "Clothing & Footwear": (Decimal("20.00"), Decimal("250.00")),
    "Entertainment": (Decimal("5.00"), Decimal("150.00")),
}


def random_amount(rng: random.Random, category: str) -> Decimal:
    lo, hi = AMOUNT_RANGES.get(category, (Decimal("1.00"), Decimal("100.00")))
    cents = rng.randint(int(lo * 100), int(hi * 100))
    return money_2dp(Decimal(cents) / 100)


def sample_expenses(
    *,
    today: dt.date,
    per_category: int = 7,
    days_back: int = 90,
    rng: Optional[random.Random] = None,
) -> list[ExpenseInput]:
    rng = rng or random.Random()
    out: list[ExpenseInput] = []
    for category in CATEGORIES:
        for _ in range(per_category):
            out.append(
                ExpenseInput(
                    description=rng.choice(SAMPLE_DESCRIPTIONS[category]),
                    amount=random_amount(rng, category),
                    category=category,
                    date=today - dt.timedelta(days=rng.randint(0, days_back)),
                )
            )
    rng.shuffle(out)
    return out


def seed_expenses(
    repo: ExpenseRepository,
    *,
    today: dt.date,
    per_category: int = 7,
    days_back: int = 90,
    rng: Optional[random.Random] = None,
) -> int:
    """
    Replaces all expenses (hard delete, trashed rows included) with sample data.
    Returns the number of rows inserted.
    """
    repo.force_delete_all()
    rows = sample_expenses(today=today, per_category=per_category, days_back=days_back, rng=rng)
    for data in rows:
        repo.create(data)
    return len(rows)
