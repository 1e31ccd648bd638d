from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from src.tracker.expenses.validation import FieldError


class ExpenseError(Exception):
    pass


class ExpenseNotFound(ExpenseError, LookupError):
    """Raised for unknown ids and for soft-deleted rows on default reads."""

    def __init__(self, expense_id: int) -> None:
        super().__init__(f"Expense {expense_id} not found")
        self.expense_id = expense_id


class ExpenseValidationError(ExpenseError, ValueError):
    def __init__(self, errors: dict[str, "FieldError"]) -> None:
        fields = ", ".join(sorted(errors))
        super().__init__(f"Invalid expense input: {fields}")
        self.errors = errors

    def messages(self) -> dict[str, list[str]]:
        return {field: [err.message] for field, err in self.errors.items()}
