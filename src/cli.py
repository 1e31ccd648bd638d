from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

app = typer.Typer(help="Expense Tracker CLI")


def _check_runtime() -> None:
    try:
        import sqlalchemy  # noqa: F401
    except ImportError as e:
        typer.echo(
            "Runtime dependency error: SQLAlchemy failed to import.\n"
            "Create a venv and install the project:\n"
            "  python -m venv .venv\n"
            "  source .venv/bin/activate\n"
            "  pip install -e .\n\n"
            f"Original error: {type(e).__name__}: {e}",
            err=True,
        )
        raise typer.Exit(code=1)


def _setup(verbose: bool = False) -> None:
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _check_runtime()


@app.command("init-db")
def init_db_cmd(verbose: bool = typer.Option(False, "--verbose", "-v")):
    _setup(verbose)
    from src.db.init_db import init_db
    from src.db.session import get_database_url

    init_db()
    typer.echo(f"Database ready: {get_database_url()}")


@app.command("seed")
def seed_cmd(
    per_category: int = typer.Option(7, min=1, help="Expenses generated per category"),
    days_back: int = typer.Option(90, min=0, help="Spread dates over the last N days"),
    seed: Optional[int] = typer.Option(None, help="Random seed for reproducible data"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Replaces every expense (trash included) with random sample data."""
    _setup()
    import random

    from src.db.init_db import init_db
    from src.db.session import get_session
    from src.tracker.expenses.repository import ExpenseRepository
    from src.tracker.expenses.seed import seed_expenses
    from src.utils.time import local_today

    if not yes:
        typer.confirm("This permanently deletes all existing expenses. Continue?", abort=True)

    init_db()
    with get_session() as session:
        repo = ExpenseRepository(session)
        n = seed_expenses(
            repo,
            today=local_today(),
            per_category=per_category,
            days_back=days_back,
            rng=random.Random(seed) if seed is not None else None,
        )
        session.commit()
    typer.echo(f"Seeded {n} expenses")


@app.command("hash-password")
def hash_password_cmd(
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Prints a PASSWORD_HASH value for the .env file."""
    from werkzeug.security import generate_password_hash

    typer.echo(generate_password_hash(password))


@app.command("export-csv")
def export_csv_cmd(
    month: str = typer.Option("", help="YYYY-MM (defaults to the current month)"),
    category: str = typer.Option("", help="Restrict to one category"),
    out: Path = typer.Option(Path("data/exports"), help="Output directory"),
):
    _setup()
    from src.db.init_db import init_db
    from src.db.session import get_session
    from src.tracker.expenses.categories import CATEGORIES
    from src.tracker.expenses.export import export_filename, render_csv
    from src.tracker.expenses.filters import ExpenseFilter, Ordering, parse_month, resolve_category
    from src.tracker.expenses.repository import ExpenseRepository
    from src.utils.time import local_today

    selected = resolve_category(category)
    if category and selected is None:
        typer.echo(f"Unknown category {category!r}; expected one of: {', '.join(CATEGORIES)}", err=True)
        raise typer.Exit(code=2)

    month_d = parse_month(month, today=local_today())
    init_db()
    with get_session() as session:
        expenses = ExpenseRepository(session).list(ExpenseFilter.for_month(month_d, selected), Ordering.DATE_DESC)

    out.mkdir(parents=True, exist_ok=True)
    path = out / export_filename(month_d, selected)
    path.write_text(render_csv(expenses), encoding="utf-8")
    typer.echo(f"Wrote {path} ({len(expenses)} rows)")


if __name__ == "__main__":
    app()
