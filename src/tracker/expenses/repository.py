from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from src.db.models import ExpenseRow
from src.tracker.expenses.errors import ExpenseNotFound
from src.tracker.expenses.filters import ExpenseFilter, Ordering, apply_filter, apply_order
from src.tracker.expenses.models import Expense, ExpenseInput, Page
from src.utils.money import money_2dp
from src.utils.time import utcnow


log = logging.getLogger(__name__)


def _to_money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return money_2dp(Decimal(str(value)))


def to_expense(row: ExpenseRow) -> Expense:
    return Expense(
        id=int(row.id),
        description=row.description,
        amount=_to_money(row.amount),
        category=row.category,
        date=row.date,
        created_at=row.created_at,
        updated_at=row.updated_at,
        deleted_at=row.deleted_at,
    )


class ExpenseRepository:
    """
    The only place expense rows are read or mutated.

    Callers get immutable `Expense` records back; every write commits before
    returning. Updates are last-write-wins (no version column).
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    # Reads

    def _row(self, expense_id: int, *, with_trashed: bool = False, only_trashed: bool = False) -> Optional[ExpenseRow]:
        stmt = select(ExpenseRow).where(ExpenseRow.id == int(expense_id))
        stmt = apply_filter(stmt, ExpenseFilter(with_trashed=with_trashed, only_trashed=only_trashed))
        return self.session.execute(stmt).scalar_one_or_none()

    def find(self, expense_id: int) -> Optional[Expense]:
        row = self._row(expense_id)
        return to_expense(row) if row is not None else None

    def find_with_trashed(self, expense_id: int) -> Optional[Expense]:
        row = self._row(expense_id, with_trashed=True)
        return to_expense(row) if row is not None else None

    def get(self, expense_id: int) -> Expense:
        found = self.find(expense_id)
        if found is None:
            raise ExpenseNotFound(expense_id)
        return found

    def list(self, flt: ExpenseFilter | None = None, ordering: Ordering = Ordering.DATE_DESC) -> list[Expense]:
        stmt = apply_order(apply_filter(select(ExpenseRow), flt or ExpenseFilter()), ordering)
        return [to_expense(r) for r in self.session.execute(stmt).scalars()]

    def list_with_trashed(self, flt: ExpenseFilter | None = None) -> list[Expense]:
        base = flt or ExpenseFilter()
        return self.list(
            ExpenseFilter(category=base.category, start=base.start, end=base.end, with_trashed=True)
        )

    def list_trashed(self) -> list[Expense]:
        stmt = select(ExpenseRow).where(ExpenseRow.deleted_at.is_not(None))
        stmt = stmt.order_by(ExpenseRow.deleted_at.desc(), ExpenseRow.id.desc())
        return [to_expense(r) for r in self.session.execute(stmt).scalars()]

    def count(self, flt: ExpenseFilter | None = None) -> int:
        stmt = apply_filter(select(func.count(ExpenseRow.id)), flt or ExpenseFilter())
        return int(self.session.execute(stmt).scalar() or 0)

    def total(self, flt: ExpenseFilter | None = None) -> Decimal:
        stmt = apply_filter(select(func.coalesce(func.sum(ExpenseRow.amount), 0)), flt or ExpenseFilter())
        return _to_money(self.session.execute(stmt).scalar())

    def paginate(self, flt: ExpenseFilter | None = None, *, page: int = 1, per_page: int = 15) -> Page:
        flt = flt or ExpenseFilter()
        page = max(1, int(page))
        per_page = max(1, int(per_page))
        result = Page(items=[], total=self.count(flt), page=page, per_page=per_page)
        # Past the last page there is nothing to fetch; the OFFSET could also overflow SQLite's INTEGER.
        if page > result.last_page:
            return result
        stmt = apply_order(apply_filter(select(ExpenseRow), flt), Ordering.DATE_DESC)
        stmt = stmt.offset((page - 1) * per_page).limit(per_page)
        items = [to_expense(r) for r in self.session.execute(stmt).scalars()]
        return Page(items=items, total=result.total, page=page, per_page=per_page)

    # Writes

    def create(self, data: ExpenseInput) -> Expense:
        now = utcnow()
        row = ExpenseRow(
            description=data.description,
            amount=money_2dp(data.amount),
            category=data.category,
            date=data.date,
            created_at=now,
            updated_at=now,
        )
        self.session.add(row)
        self.session.commit()
        log.info("Created expense id=%s category=%s", row.id, row.category)
        return to_expense(row)

    def update(self, expense_id: int, data: ExpenseInput) -> Expense:
        row = self._row(expense_id)
        if row is None:
            raise ExpenseNotFound(expense_id)
        row.description = data.description
        row.amount = money_2dp(data.amount)
        row.category = data.category
        row.date = data.date
        row.updated_at = utcnow()
        self.session.commit()
        log.info("Updated expense id=%s category=%s", row.id, row.category)
        return to_expense(row)

    def soft_delete(self, expense_id: int) -> None:
        row = self._row(expense_id)
        if row is None:
            raise ExpenseNotFound(expense_id)
        now = utcnow()
        row.deleted_at = now
        row.updated_at = now
        self.session.commit()
        log.info("Soft-deleted expense id=%s", expense_id)

    def restore(self, expense_id: int) -> Expense:
        row = self._row(expense_id, only_trashed=True)
        if row is None:
            raise ExpenseNotFound(expense_id)
        row.deleted_at = None
        row.updated_at = utcnow()
        self.session.commit()
        log.info("Restored expense id=%s", expense_id)
        return to_expense(row)

    def force_delete(self, expense_id: int) -> None:
        deleted = self.session.execute(delete(ExpenseRow).where(ExpenseRow.id == int(expense_id))).rowcount
        self.session.commit()
        if not deleted:
            raise ExpenseNotFound(expense_id)

    def force_delete_all(self) -> int:
        deleted = self.session.execute(delete(ExpenseRow)).rowcount
        self.session.commit()
        return int(deleted or 0)
