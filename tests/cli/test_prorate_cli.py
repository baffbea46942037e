"""Tests for the prorate CLI (scripts/prorate.py)."""

import json

import pytest

from scripts import prorate


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    for name in ("DEALBOOK_CONFIG", "DEALBOOK_CURRENCY", "DEALBOOK_REMAINDER_POLICY"):
        monkeypatch.delenv(name, raising=False)


def test_json_schedule(capsys):
    exit_code = prorate.main(["2024-01-15", "2024-03-15", "300000", "--json"])

    assert exit_code == 0
    doc = json.loads(capsys.readouterr().out)
    assert doc["currency"] == "JPY"
    assert doc["total"] == "300000"
    assert [a["amount"] for a in doc["allocations"]] == ["83607", "142623", "73770"]
    assert [a["applied_days"] for a in doc["allocations"]] == ["17", "29", "15"]


def test_currency_sets_rounding_unit(capsys):
    exit_code = prorate.main(
        ["2024-01-01", "2024-03-31", "100", "--currency", "usd", "--json"]
    )

    assert exit_code == 0
    doc = json.loads(capsys.readouterr().out)
    assert doc["currency"] == "USD"
    assert [a["amount"] for a in doc["allocations"]] == ["34.07", "31.86", "34.07"]


def test_fiscal_quarters(capsys):
    exit_code = prorate.main(
        ["2024-12-15", "2025-02-15", "300000", "--fiscal", "--json"]
    )

    assert exit_code == 0
    doc = json.loads(capsys.readouterr().out)
    assert doc["fiscal_quarters"] == [
        {"fiscal_year": 2025, "quarter": "Q1", "amount": "300000"},
    ]


def test_table_output(capsys):
    exit_code = prorate.main(["2024-06-10", "2024-06-10", "10000"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "2024-06" in out
    assert "Total JPY" in out


def test_invalid_range_reports_error(capsys):
    exit_code = prorate.main(["2024-03-01", "2024-02-01", "100"])

    assert exit_code == 1
    assert "INVALID_DATE_RANGE" in capsys.readouterr().err


def test_unknown_currency_reports_error(capsys):
    exit_code = prorate.main(["2024-01-01", "2024-01-31", "100", "--currency", "XYZ"])

    assert exit_code == 1
    assert "INVALID_CURRENCY" in capsys.readouterr().err


@pytest.mark.parametrize("amount", ["abc", "1,000", "NaN"])
def test_malformed_amount_is_usage_error(amount, capsys):
    with pytest.raises(SystemExit) as exc_info:
        prorate.main(["2024-01-01", "2024-02-01", amount])

    assert exc_info.value.code == 2
    assert "invalid amount" in capsys.readouterr().err
