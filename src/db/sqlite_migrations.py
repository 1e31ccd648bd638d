from __future__ import annotations

import re

from sqlalchemy import text
from sqlalchemy.engine import Engine


def _table_columns(engine: Engine, table: str) -> set[str]:
    with engine.connect() as conn:
        rows = conn.execute(text(f"PRAGMA table_info({table})")).fetchall()
    # row: (cid, name, type, notnull, dflt_value, pk)
    return {str(r[1]) for r in rows}


def _table_indexes(engine: Engine, table: str) -> set[str]:
    with engine.connect() as conn:
        rows = conn.execute(text(f"PRAGMA index_list({table})")).fetchall()
    # row: (seq, name, unique, origin, partial)
    return {str(r[1]) for r in rows}


_COL_NAME_RE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\b")


def _add_column(engine: Engine, table: str, column_ddl: str) -> None:
    m = _COL_NAME_RE.match(column_ddl)
    col_name = m.group(1) if m else None
    if col_name and col_name in _table_columns(engine, table):
        return
    try:
        with engine.begin() as conn:
            conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column_ddl}"))
    except Exception as e:
        # SQLite raises OperationalError("duplicate column name: X") for ADD COLUMN on existing columns.
        if "duplicate column name" in str(e).lower():
            return
        raise


_EXPENSE_INDEXES = {
    "ix_expenses_date": "date",
    "ix_expenses_category": "category",
    "ix_expenses_date_category": "date, category",
}


def ensure_sqlite_schema(engine: Engine) -> None:
    """
    Minimal SQLite "migrations" (no Alembic).
    Safe to call on every startup: only adds missing columns/indexes.
    """
    if engine.url.get_backend_name() != "sqlite":
        return

    with engine.connect() as conn:
        existing_tables = {r[0] for r in conn.execute(text("SELECT name FROM sqlite_master WHERE type='table'")).fetchall()}

    if "expenses" not in existing_tables:
        return

    cols = _table_columns(engine, "expenses")
    # Tables created before soft deletes / update tracking existed.
    for name, ddl in [
        ("updated_at", "updated_at DATETIME"),
        ("deleted_at", "deleted_at DATETIME"),
    ]:
        if name not in cols:
            _add_column(engine, "expenses", ddl)
            cols.add(name)
    with engine.begin() as conn:
        conn.execute(text("UPDATE expenses SET updated_at = created_at WHERE updated_at IS NULL"))

    indexes = _table_indexes(engine, "expenses")
    for name, columns in _EXPENSE_INDEXES.items():
        if name not in indexes:
            with engine.begin() as conn:
                conn.execute(text(f"CREATE INDEX IF NOT EXISTS {name} ON expenses ({columns})"))
