from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class ExpenseInput:
    description: str
    amount: Decimal  # always 2dp, positive
    category: str
    date: dt.date


@dataclass(frozen=True)
class Expense:
    id: int
    description: str
    amount: Decimal
    category: str
    date: dt.date
    created_at: dt.datetime
    updated_at: dt.datetime
    deleted_at: Optional[dt.datetime] = None

    @property
    def is_trashed(self) -> bool:
        return self.deleted_at is not None

    def as_input(self) -> ExpenseInput:
        return ExpenseInput(
            description=self.description,
            amount=self.amount,
            category=self.category,
            date=self.date,
        )


@dataclass(frozen=True)
class Page:
    items: list[Expense]
    total: int
    page: int
    per_page: int

    @property
    def last_page(self) -> int:
        if self.total <= 0:
            return 1
        return (self.total + self.per_page - 1) // self.per_page

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.last_page

    @property
    def first_index(self) -> int:
        return 0 if not self.items else (self.page - 1) * self.per_page + 1

    @property
    def last_index(self) -> int:
        return 0 if not self.items else self.first_index + len(self.items) - 1


class CategoryBreakdownRow(BaseModel):
    category: str
    total: Decimal
    count: int
    percentage: Decimal = Decimal("0")


class DailyBreakdownRow(BaseModel):
    date: dt.date
    total: Decimal
    count: int


class DailyReport(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    date: dt.date
    category: Optional[str] = None
    expenses: list[Expense] = Field(default_factory=list)
    total: Decimal = Decimal("0.00")
    category_breakdown: list[CategoryBreakdownRow] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.expenses)


class MonthlyReport(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    month: dt.date  # first day of the month
    start: dt.date
    end: dt.date
    category: Optional[str] = None
    expenses: list[Expense] = Field(default_factory=list)
    total: Decimal = Decimal("0.00")
    category_breakdown: list[CategoryBreakdownRow] = Field(default_factory=list)
    daily_breakdown: list[DailyBreakdownRow] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.expenses)
