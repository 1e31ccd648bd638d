from __future__ import annotations

from typer.testing import CliRunner
from werkzeug.security import check_password_hash

from src.cli import app

runner = CliRunner()


def test_hash_password_prints_verifiable_hash():
    result = runner.invoke(app, ["hash-password"], input="secret\nsecret\n")
    assert result.exit_code == 0
    hashed = result.output.strip().splitlines()[-1]
    assert check_password_hash(hashed, "secret")


def test_export_csv_rejects_unknown_category():
    result = runner.invoke(app, ["export-csv", "--category", "Pets"])
    assert result.exit_code == 2
