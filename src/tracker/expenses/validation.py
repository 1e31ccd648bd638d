from __future__ import annotations

import datetime as dt
import enum
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from src.tracker.expenses.categories import CATEGORIES
from src.tracker.expenses.config import ExpensesConfig
from src.tracker.expenses.errors import ExpenseValidationError
from src.tracker.expenses.models import ExpenseInput
from src.utils.money import format_usd, money_2dp
from src.utils.time import local_today


FIELDS = ("description", "amount", "category", "date")


class RuleKind(str, enum.Enum):
    REQUIRED = "required"
    MAX_LENGTH = "max_length"
    NUMERIC = "numeric"
    MIN_VALUE = "min_value"
    MAX_VALUE = "max_value"
    IN_CHOICES = "in_choices"
    DATE = "date"
    NOT_AFTER_TODAY = "not_after_today"


class ErrorCode(str, enum.Enum):
    REQUIRED = "Required"
    TOO_LONG = "TooLong"
    NOT_NUMERIC = "NotNumeric"
    BELOW_MINIMUM = "BelowMinimum"
    ABOVE_MAXIMUM = "AboveMaximum"
    NOT_IN_ENUM = "NotInEnum"
    NOT_A_VALID_DATE = "NotAValidDate"
    IN_FUTURE = "InFuture"


@dataclass(frozen=True)
class Rule:
    kind: RuleKind
    arg: Any = None
    message: Optional[str] = None


@dataclass(frozen=True)
class FieldError:
    field: str
    code: ErrorCode
    message: str


def default_rules(cfg: ExpensesConfig | None = None) -> dict[str, tuple[Rule, ...]]:
    cfg = cfg or ExpensesConfig()
    return {
        "description": (
            Rule(RuleKind.REQUIRED, message="Description is required."),
            Rule(
                RuleKind.MAX_LENGTH,
                cfg.description_max_length,
                message=f"Description cannot exceed {cfg.description_max_length} characters.",
            ),
        ),
        "amount": (
            Rule(RuleKind.REQUIRED, message="Amount is required."),
            Rule(RuleKind.NUMERIC, message="Amount must be a number."),
            Rule(RuleKind.MIN_VALUE, cfg.amount_min, message=f"Amount must be at least {format_usd(cfg.amount_min)}."),
            Rule(RuleKind.MAX_VALUE, cfg.amount_max, message=f"Amount cannot exceed {format_usd(cfg.amount_max)}."),
        ),
        "category": (
            Rule(RuleKind.REQUIRED, message="Category is required."),
            Rule(RuleKind.IN_CHOICES, CATEGORIES, message="Invalid category selected."),
        ),
        "date": (
            Rule(RuleKind.REQUIRED, message="Date is required."),
            Rule(RuleKind.DATE, message="Date must be a valid date."),
            Rule(RuleKind.NOT_AFTER_TODAY, message="Date cannot be in the future."),
        ),
    }


def _clean(raw: Any) -> Any:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw.strip()
    return raw


# Plain decimal notation only: no "_" separators, no "NaN" or "Infinity".
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_amount(raw: Any) -> Optional[Decimal]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        d = raw
    elif isinstance(raw, (int, float)):
        d = Decimal(str(raw))
    else:
        s = str(raw).strip()
        if not _DECIMAL_RE.fullmatch(s):
            return None
        d = Decimal(s)
    if not d.is_finite():
        return None
    return d


def parse_date(raw: Any) -> Optional[dt.date]:
    if isinstance(raw, dt.datetime):
        return raw.date()
    if isinstance(raw, dt.date):
        return raw
    s = str(raw).strip()
    try:
        return dt.date.fromisoformat(s)
    except ValueError:
        pass
    try:
        return dt.datetime.fromisoformat(s).date()
    except ValueError:
        return None


def _check(rule: Rule, value: Any, *, today: dt.date) -> tuple[Optional[ErrorCode], Any]:
    """
    Applies one rule to an already-cleaned value.

    Returns (error code or None, value for the next rule). NUMERIC and DATE convert
    the value so that the range rules after them compare typed values.
    """
    kind = rule.kind
    if kind is RuleKind.REQUIRED:
        if value is None or (isinstance(value, str) and value == ""):
            return ErrorCode.REQUIRED, value
        return None, value
    if kind is RuleKind.MAX_LENGTH:
        if len(str(value)) > int(rule.arg):
            return ErrorCode.TOO_LONG, value
        return None, value
    if kind is RuleKind.NUMERIC:
        d = parse_amount(value)
        if d is None:
            return ErrorCode.NOT_NUMERIC, value
        # Range rules compare the amount as it will be stored (cents, half-up).
        try:
            return None, money_2dp(d)
        except InvalidOperation:
            return None, d
    if kind is RuleKind.MIN_VALUE:
        if value < Decimal(rule.arg):
            return ErrorCode.BELOW_MINIMUM, value
        return None, value
    if kind is RuleKind.MAX_VALUE:
        if value > Decimal(rule.arg):
            return ErrorCode.ABOVE_MAXIMUM, value
        return None, value
    if kind is RuleKind.IN_CHOICES:
        if not isinstance(value, str) or value not in rule.arg:
            return ErrorCode.NOT_IN_ENUM, value
        return None, value
    if kind is RuleKind.DATE:
        d = parse_date(value)
        if d is None:
            return ErrorCode.NOT_A_VALID_DATE, value
        return None, d
    if kind is RuleKind.NOT_AFTER_TODAY:
        if value > today:
            return ErrorCode.IN_FUTURE, value
        return None, value
    raise ValueError(f"Unknown rule kind: {kind}")


def validate(
    data: Mapping[str, Any],
    rules: Mapping[str, tuple[Rule, ...]],
    *,
    today: Optional[dt.date] = None,
) -> tuple[dict[str, Any], dict[str, FieldError]]:
    """
    Evaluates every field's rules independently.

    Within a field the first failing rule wins; errors from all fields are
    collected together. Returns (cleaned values, errors); cleaned values are only
    meaningful for fields without an error.
    """
    today = today or local_today()
    cleaned: dict[str, Any] = {}
    errors: dict[str, FieldError] = {}
    for field, field_rules in rules.items():
        value = _clean(data.get(field))
        for rule in field_rules:
            code, value = _check(rule, value, today=today)
            if code is not None:
                errors[field] = FieldError(field=field, code=code, message=rule.message or code.value)
                break
        else:
            cleaned[field] = value
    return cleaned, errors


def validate_expense(
    data: Mapping[str, Any],
    *,
    cfg: ExpensesConfig | None = None,
    today: Optional[dt.date] = None,
) -> ExpenseInput:
    """
    Validates raw form/JSON input into an `ExpenseInput`, or raises
    `ExpenseValidationError` listing every invalid field.
    """
    cleaned, errors = validate(data, default_rules(cfg), today=today)
    if errors:
        raise ExpenseValidationError(errors)
    return ExpenseInput(
        description=str(cleaned["description"]),
        amount=money_2dp(cleaned["amount"]),
        category=str(cleaned["category"]),
        date=cleaned["date"],
    )


def old_input(data: Mapping[str, Any]) -> dict[str, str]:
    # Values echoed back into a re-rendered form.
    out: dict[str, str] = {}
    for field in FIELDS:
        v = data.get(field)
        out[field] = "" if v is None else str(v)
    return out
