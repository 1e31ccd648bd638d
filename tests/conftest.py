from __future__ import annotations

import datetime as dt
import sys
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.db.models import Base
from src.tracker.expenses.models import ExpenseInput
from src.tracker.expenses.repository import ExpenseRepository


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def engine():
    # One shared connection so the TestClient's worker thread sees the same in-memory DB.
    eng = create_engine(
        "sqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session(engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)
    with SessionLocal() as s:
        yield s


@pytest.fixture()
def repo(session) -> ExpenseRepository:
    return ExpenseRepository(session)


@pytest.fixture()
def make_expense(repo):
    def _make(
        description: str = "Coffee",
        amount: str = "4.50",
        category: str = "Restaurants and Cafes",
        date: dt.date = dt.date(2025, 3, 10),
    ):
        return repo.create(
            ExpenseInput(description=description, amount=Decimal(amount), category=category, date=date)
        )

    return _make


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def app_factory(engine, clock, monkeypatch):
    from src.app.db import db_session
    from src.app.main import create_app
    from src.tracker.expenses.config import ExpensesConfig
    from src.utils.rate_limit import AttemptLimiter

    monkeypatch.delenv("AUTH_USERNAME", raising=False)
    monkeypatch.delenv("PASSWORD_HASH", raising=False)
    monkeypatch.delenv("UI_TIMEZONE", raising=False)
    SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)

    def _override_session():
        s = SessionLocal()
        try:
            yield s
        finally:
            s.close()

    def _make(config: ExpensesConfig | None = None):
        app = create_app(
            config=config or ExpensesConfig(),
            limiter=AttemptLimiter(clock=clock),
            init_database=False,
        )
        app.dependency_overrides[db_session] = _override_session
        return app

    return _make


@pytest.fixture()
def client(app_factory):
    from fastapi.testclient import TestClient

    with TestClient(app_factory()) as c:
        yield c
