from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from src.db.session import get_session
from src.tracker.expenses.config import ExpensesConfig
from src.tracker.expenses.repository import ExpenseRepository


def db_session() -> Generator[Session, None, None]:
    session = get_session()
    try:
        yield session
    finally:
        session.close()


def expense_repository(session: Session = Depends(db_session)) -> ExpenseRepository:
    return ExpenseRepository(session)


def app_config(request: Request) -> ExpensesConfig:
    return request.app.state.config
