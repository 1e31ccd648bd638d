from __future__ import annotations

from sqlalchemy import create_engine, text

from src.db.sqlite_migrations import ensure_sqlite_schema


def test_legacy_expenses_table_gets_new_columns_and_indexes(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'legacy.db'}", future=True)
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TABLE expenses ("
                "id INTEGER PRIMARY KEY, description VARCHAR(255) NOT NULL, amount NUMERIC(10, 2) NOT NULL, "
                "category VARCHAR(100) NOT NULL, date DATE NOT NULL, created_at DATETIME)"
            )
        )
        conn.execute(
            text(
                "INSERT INTO expenses (description, amount, category, date, created_at) "
                "VALUES ('Milk', 2.5, 'Groceries', '2025-03-01', '2025-03-01 10:00:00')"
            )
        )

    ensure_sqlite_schema(engine)
    ensure_sqlite_schema(engine)

    with engine.connect() as conn:
        cols = {r[1] for r in conn.execute(text("PRAGMA table_info(expenses)"))}
        indexes = {r[1] for r in conn.execute(text("PRAGMA index_list(expenses)"))}
        row = conn.execute(text("SELECT updated_at, deleted_at FROM expenses")).one()

    assert {"updated_at", "deleted_at"} <= cols
    assert {"ix_expenses_date", "ix_expenses_category", "ix_expenses_date_category"} <= indexes
    assert row[0] == "2025-03-01 10:00:00"
    assert row[1] is None


def test_missing_table_is_left_alone(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}", future=True)
    ensure_sqlite_schema(engine)
    with engine.connect() as conn:
        tables = conn.execute(text("SELECT name FROM sqlite_master WHERE type='table'")).fetchall()
    assert tables == []
