from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

from src.app.auth import auth_banner_message, require_login
from src.app.db import app_config, expense_repository
from src.app.utils import jsonable, url_with, wants_json
from src.tracker.expenses.aggregation import daily_report, monthly_report
from src.tracker.expenses.categories import CATEGORIES
from src.tracker.expenses.config import ExpensesConfig
from src.tracker.expenses.errors import ExpenseValidationError
from src.tracker.expenses.export import CSV_MEDIA_TYPE, content_disposition, export_filename, render_csv
from src.tracker.expenses.filters import (
    ExpenseFilter,
    Ordering,
    parse_day,
    parse_month,
    resolve_category,
    shift_month,
)
from src.tracker.expenses.models import Expense
from src.tracker.expenses.repository import ExpenseRepository
from src.tracker.expenses.validation import old_input, validate_expense
from src.utils.time import local_today


router = APIRouter(prefix="/expenses", tags=["expenses"])


def _parse_int(raw: str) -> int | None:
    s = (raw or "").strip()
    if not s:
        return None
    try:
        return int(s)
    except ValueError:
        return None


def _base_context(request: Request, actor: str) -> dict[str, Any]:
    return {
        "actor": actor,
        "auth_banner": auth_banner_message(),
        "categories": CATEGORIES,
        "ok": request.query_params.get("ok"),
        "error": request.query_params.get("error"),
        "today": local_today(),
    }


def _render(request: Request, name: str, actor: str, status_code: int = 200, **context: Any):
    from src.app.main import templates

    return templates.TemplateResponse(
        request,
        name,
        {**_base_context(request, actor), **context},
        status_code=status_code,
    )


def _form_payload(description: str, amount: str, category: str, date: str) -> dict[str, str]:
    return {"description": description, "amount": amount, "category": category, "date": date}


def _render_invalid_form(
    request: Request,
    actor: str,
    *,
    err: ExpenseValidationError,
    payload: dict[str, str],
    expense: Optional[Expense] = None,
):
    if wants_json(request):
        return JSONResponse({"errors": err.messages()}, status_code=422)
    return _render(
        request,
        "expenses_form.html",
        actor,
        status_code=422,
        expense=expense,
        values=old_input(payload),
        errors={field: fe.message for field, fe in err.errors.items()},
    )


@router.get("")
def expenses_index(
    request: Request,
    repo: ExpenseRepository = Depends(expense_repository),
    cfg: ExpensesConfig = Depends(app_config),
    actor: str = Depends(require_login),
    category: str = "",
    page: str = "1",
):
    selected = resolve_category(category)
    flt = ExpenseFilter(category=selected)
    page_i = max(1, _parse_int(page) or 1)
    result = repo.paginate(flt, page=page_i, per_page=cfg.page_size)
    if result.page > result.last_page:
        result = repo.paginate(flt, page=result.last_page, per_page=cfg.page_size)
    return _render(
        request,
        "expenses_index.html",
        actor,
        page=result,
        selected_category=selected,
        total=repo.total(flt),
        page_url=lambda n: url_with("/expenses", category=selected, page=n),
    )


@router.get("/daily")
def expenses_daily(
    request: Request,
    repo: ExpenseRepository = Depends(expense_repository),
    actor: str = Depends(require_login),
    date: str = "",
    category: str = "",
):
    today = local_today()
    day = parse_day(date, today=today)
    selected = resolve_category(category)
    report = daily_report(repo, day=day, category=selected)
    return _render(
        request,
        "expenses_daily.html",
        actor,
        report=report,
        selected_category=selected,
        previous_day=day - dt.timedelta(days=1),
        next_day=day + dt.timedelta(days=1),
        is_today=(day == today),
        day_url=lambda d, cat=selected: url_with("/expenses/daily", date=d.isoformat(), category=cat),
        monthly_url=url_with("/expenses/monthly", month=f"{day:%Y-%m}", category=selected),
    )


@router.get("/monthly")
def expenses_monthly(
    request: Request,
    repo: ExpenseRepository = Depends(expense_repository),
    actor: str = Depends(require_login),
    month: str = "",
    category: str = "",
):
    today = local_today()
    month_d = parse_month(month, today=today)
    selected = resolve_category(category)
    report = monthly_report(repo, month=month_d, category=selected)
    return _render(
        request,
        "expenses_monthly.html",
        actor,
        report=report,
        selected_category=selected,
        previous_month=shift_month(month_d, -1),
        next_month=shift_month(month_d, 1),
        is_current_month=(month_d == today.replace(day=1)),
        month_url=lambda m, cat=selected: url_with("/expenses/monthly", month=f"{m:%Y-%m}", category=cat),
        export_url=url_with("/expenses/export/monthly-csv", month=f"{month_d:%Y-%m}", category=selected),
    )


@router.get("/export/monthly-csv")
def expenses_export_monthly_csv(
    repo: ExpenseRepository = Depends(expense_repository),
    actor: str = Depends(require_login),
    month: str = "",
    category: str = "",
):
    month_d = parse_month(month, today=local_today())
    selected = resolve_category(category)
    expenses = repo.list(ExpenseFilter.for_month(month_d, selected), Ordering.DATE_DESC)
    return Response(
        content=render_csv(expenses),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(export_filename(month_d, selected))},
    )


@router.get("/create")
def expenses_create_form(request: Request, actor: str = Depends(require_login)):
    return _render(
        request,
        "expenses_form.html",
        actor,
        expense=None,
        values=old_input({"date": local_today().isoformat()}),
        errors={},
    )


@router.post("")
def expenses_store(
    request: Request,
    repo: ExpenseRepository = Depends(expense_repository),
    cfg: ExpensesConfig = Depends(app_config),
    actor: str = Depends(require_login),
    description: str = Form(default=""),
    amount: str = Form(default=""),
    category: str = Form(default=""),
    date: str = Form(default=""),
):
    payload = _form_payload(description, amount, category, date)
    try:
        data = validate_expense(payload, cfg=cfg, today=local_today())
    except ExpenseValidationError as e:
        return _render_invalid_form(request, actor, err=e, payload=payload)
    expense = repo.create(data)
    if wants_json(request):
        return JSONResponse(jsonable(expense), status_code=201)
    return RedirectResponse(url=url_with("/expenses", ok="Expense created successfully."), status_code=303)


@router.get("/trash")
def expenses_trash(
    request: Request,
    repo: ExpenseRepository = Depends(expense_repository),
    actor: str = Depends(require_login),
):
    return _render(request, "expenses_trash.html", actor, expenses=repo.list_trashed())


@router.get("/{expense_id}")
def expenses_show(
    request: Request,
    expense_id: int,
    repo: ExpenseRepository = Depends(expense_repository),
    actor: str = Depends(require_login),
):
    expense = repo.get(expense_id)
    if wants_json(request):
        return JSONResponse(jsonable(expense))
    return _render(request, "expenses_show.html", actor, expense=expense)


@router.get("/{expense_id}/edit")
def expenses_edit_form(
    request: Request,
    expense_id: int,
    repo: ExpenseRepository = Depends(expense_repository),
    actor: str = Depends(require_login),
):
    expense = repo.get(expense_id)
    values = {
        "description": expense.description,
        "amount": f"{expense.amount:.2f}",
        "category": expense.category,
        "date": expense.date.isoformat(),
    }
    return _render(request, "expenses_form.html", actor, expense=expense, values=values, errors={})


def _update(
    request: Request,
    expense_id: int,
    *,
    repo: ExpenseRepository,
    cfg: ExpensesConfig,
    actor: str,
    payload: dict[str, str],
):
    current = repo.get(expense_id)
    try:
        data = validate_expense(payload, cfg=cfg, today=local_today())
    except ExpenseValidationError as e:
        return _render_invalid_form(request, actor, err=e, payload=payload, expense=current)
    expense = repo.update(expense_id, data)
    if wants_json(request):
        return JSONResponse(jsonable(expense))
    return RedirectResponse(url=url_with("/expenses", ok="Expense updated successfully."), status_code=303)


def _destroy(request: Request, expense_id: int, *, repo: ExpenseRepository):
    repo.soft_delete(expense_id)
    if wants_json(request):
        return Response(status_code=204)
    return RedirectResponse(url=url_with("/expenses", ok="Expense deleted successfully."), status_code=303)


@router.put("/{expense_id}")
def expenses_update(
    request: Request,
    expense_id: int,
    repo: ExpenseRepository = Depends(expense_repository),
    cfg: ExpensesConfig = Depends(app_config),
    actor: str = Depends(require_login),
    description: str = Form(default=""),
    amount: str = Form(default=""),
    category: str = Form(default=""),
    date: str = Form(default=""),
):
    payload = _form_payload(description, amount, category, date)
    return _update(request, expense_id, repo=repo, cfg=cfg, actor=actor, payload=payload)


@router.delete("/{expense_id}")
def expenses_destroy(
    request: Request,
    expense_id: int,
    repo: ExpenseRepository = Depends(expense_repository),
    actor: str = Depends(require_login),
):
    return _destroy(request, expense_id, repo=repo)


@router.post("/{expense_id}")
def expenses_method_override(
    request: Request,
    expense_id: int,
    repo: ExpenseRepository = Depends(expense_repository),
    cfg: ExpensesConfig = Depends(app_config),
    actor: str = Depends(require_login),
    method: str = Form(default="", alias="_method"),
    description: str = Form(default=""),
    amount: str = Form(default=""),
    category: str = Form(default=""),
    date: str = Form(default=""),
):
    # HTML forms can only GET/POST; `_method` selects PUT or DELETE.
    verb = method.strip().upper()
    if verb == "PUT":
        payload = _form_payload(description, amount, category, date)
        return _update(request, expense_id, repo=repo, cfg=cfg, actor=actor, payload=payload)
    if verb == "DELETE":
        return _destroy(request, expense_id, repo=repo)
    return JSONResponse({"detail": "Method Not Allowed"}, status_code=405)


@router.post("/{expense_id}/restore")
def expenses_restore(
    request: Request,
    expense_id: int,
    repo: ExpenseRepository = Depends(expense_repository),
    actor: str = Depends(require_login),
):
    expense = repo.restore(expense_id)
    if wants_json(request):
        return JSONResponse(jsonable(expense))
    return RedirectResponse(url=url_with("/expenses/trash", ok="Expense restored successfully."), status_code=303)
