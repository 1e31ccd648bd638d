from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from src.app.auth import (
    LoginThrottled,
    attempt_login,
    auth_enabled,
    client_ip,
    end_session,
    get_login_limiter,
    is_authenticated,
    load_credentials,
    start_session,
)
from src.app.db import app_config
from src.tracker.expenses.config import ExpensesConfig
from src.utils.rate_limit import AttemptLimiter


router = APIRouter(tags=["auth"])

_FIELD_MAX = 255


def _render_login(
    request: Request,
    *,
    username: str = "",
    errors: Optional[dict[str, str]] = None,
    status_code: int = 200,
):
    from src.app.main import templates

    return templates.TemplateResponse(
        request,
        "login.html",
        {
            "username": username,
            "errors": errors or {},
            "ok": request.query_params.get("ok"),
        },
        status_code=status_code,
    )


@router.get("/login")
def login_form(request: Request):
    if not auth_enabled() or is_authenticated(request):
        return RedirectResponse(url="/expenses", status_code=303)
    return _render_login(request)


@router.post("/login")
def login_submit(
    request: Request,
    username: str = Form(default=""),
    password: str = Form(default=""),
    cfg: ExpensesConfig = Depends(app_config),
    limiter: AttemptLimiter = Depends(get_login_limiter),
):
    credentials = load_credentials()
    if credentials is None:
        return RedirectResponse(url="/expenses", status_code=303)

    username = username.strip()
    errors: dict[str, str] = {}
    if not username:
        errors["username"] = "Username is required."
    elif len(username) > _FIELD_MAX:
        errors["username"] = f"Username cannot exceed {_FIELD_MAX} characters."
    if not password:
        errors["password"] = "Password is required."
    elif len(password) > _FIELD_MAX:
        errors["password"] = f"Password cannot exceed {_FIELD_MAX} characters."
    if errors:
        return _render_login(request, username=username, errors=errors, status_code=422)

    try:
        ok = attempt_login(
            username,
            password,
            client_ip(request),
            credentials=credentials,
            limiter=limiter,
            config=cfg.login,
        )
    except LoginThrottled as e:
        resp = _render_login(request, username=username, errors={"username": str(e)}, status_code=429)
        resp.headers["Retry-After"] = str(e.retry_after)
        return resp

    if not ok:
        return _render_login(
            request,
            username=username,
            errors={"username": "Invalid username or password."},
            status_code=401,
        )
    return RedirectResponse(url=start_session(request, username), status_code=303)


@router.post("/logout")
def logout(request: Request):
    end_session(request)
    return RedirectResponse(url="/login?ok=You%20have%20been%20logged%20out.", status_code=303)
