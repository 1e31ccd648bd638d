from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from src.app.auth import SESSION_INTENDED, LoginRequired, auth_banner_message, auth_enabled, require_login
from src.app.db import expense_repository
from src.app.routes.expenses import router as expenses_router
from src.app.routes.login import router as login_router
from src.app.utils import wants_json
from src.db.init_db import init_db
from src.tracker.expenses.categories import category_slug
from src.tracker.expenses.config import ExpensesConfig, load_expenses_config
from src.tracker.expenses.errors import ExpenseNotFound
from src.tracker.expenses.repository import ExpenseRepository
from src.utils.money import format_percent, format_usd
from src.utils.rate_limit import AttemptLimiter
from src.utils.time import format_local, format_long_date


load_dotenv()

log = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
templates.env.filters["local_dt"] = format_local
templates.env.filters["long_date"] = format_long_date
templates.env.filters["usd"] = format_usd
templates.env.filters["pct"] = format_percent
templates.env.filters["slug"] = category_slug

_DEV_SESSION_SECRET = "dev-only-session-secret"


def _session_secret() -> str:
    secret = os.environ.get("SESSION_SECRET", "").strip()
    if not secret:
        log.warning("SESSION_SECRET is not set; using the development default")
        return _DEV_SESSION_SECRET
    return secret


@asynccontextmanager
async def _lifespan(app: FastAPI):
    init_db()
    if not auth_enabled():
        log.warning(auth_banner_message())
    yield


def create_app(
    *,
    config: Optional[ExpensesConfig] = None,
    limiter: Optional[AttemptLimiter] = None,
    init_database: bool = True,
) -> FastAPI:
    app = FastAPI(title="Expense Tracker", version="0.1.0", lifespan=_lifespan if init_database else None)
    if config is None:
        config, cfg_path = load_expenses_config()
        if cfg_path:
            log.info("Using config: %s", cfg_path)
    app.state.config = config
    app.state.login_limiter = limiter or AttemptLimiter()

    app.add_middleware(SessionMiddleware, secret_key=_session_secret(), same_site="lax")

    static_dir = BASE_DIR / "static"
    css_path = static_dir / "app.css"
    try:
        templates.env.globals["static_version"] = str(int(css_path.stat().st_mtime))
    except OSError:
        templates.env.globals["static_version"] = "0"
    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    @app.exception_handler(LoginRequired)
    async def _login_required(request: Request, exc: LoginRequired):
        if wants_json(request):
            return JSONResponse({"detail": "Authentication required"}, status_code=401)
        if exc.next_url:
            request.session[SESSION_INTENDED] = exc.next_url
        return RedirectResponse(url="/login", status_code=303)

    @app.exception_handler(ExpenseNotFound)
    async def _expense_not_found(request: Request, exc: ExpenseNotFound):
        if wants_json(request):
            return JSONResponse({"detail": str(exc)}, status_code=404)
        return templates.TemplateResponse(
            request,
            "not_found.html",
            {"auth_banner": auth_banner_message(), "message": str(exc)},
            status_code=404,
        )

    @app.get("/")
    def home(actor: str = Depends(require_login)):
        return RedirectResponse(url="/expenses", status_code=303)

    @app.get("/status")
    def status(repo: ExpenseRepository = Depends(expense_repository)):
        return {"status": "ok", "auth_enabled": auth_enabled(), "expenses": repo.count()}

    app.include_router(login_router)
    app.include_router(expenses_router)
    return app


app = create_app()
