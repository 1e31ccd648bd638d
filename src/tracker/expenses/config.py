from __future__ import annotations

import os
from decimal import Decimal
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


class LoginThrottleConfig(BaseModel):
    max_attempts_per_username: int = 5
    max_attempts_per_ip: int = 10
    decay_seconds: int = 15 * 60


class ExpensesConfig(BaseModel):
    amount_min: Decimal = Decimal("0.01")
    # The request-level ceiling; NUMERIC(10,2) would allow up to 99,999,999.99.
    amount_max: Decimal = Decimal("999999.99")
    description_max_length: int = 255
    page_size: int = 15
    login: LoginThrottleConfig = Field(default_factory=LoginThrottleConfig)


def _candidate_paths() -> list[Path]:
    paths = [Path("expenses.yaml")]
    home = Path(os.path.expanduser("~"))
    paths.append(home / ".expense_tracker" / "expenses.yaml")
    return paths


def load_expenses_config() -> tuple[ExpensesConfig, Optional[str]]:
    for p in _candidate_paths():
        if p.exists():
            data = yaml.safe_load(p.read_text()) or {}
            return ExpensesConfig.model_validate(data.get("expenses") or data), str(p)
    return ExpensesConfig(), None
