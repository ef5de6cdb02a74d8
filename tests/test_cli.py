"""Tests for the splitvibe CLI."""

import json
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from typer.testing import CliRunner

from splitvibe.cli import app, format_money

runner = CliRunner()


@pytest.fixture
def ledger_path(tmp_path):
    """Alice paid $90 for three; Bob settled $30, Carol $1 (plus one deleted)."""
    data = {
        "currency": "USD",
        "members": [
            {"id": "user-1", "name": "Alice", "email": "alice@splitvibe.dev"},
            {"id": "user-2", "name": "Bob", "email": "bob@splitvibe.dev"},
            {"id": "user-3", "name": "Carol", "email": "carol@splitvibe.dev"},
        ],
        "expenses": [
            {
                "id": "exp-1",
                "title": "Dinner",
                "amount": "90.00",
                "payers": [{"user_id": "user-1", "amount": "90.00"}],
                "splits": [
                    {"user_id": "user-1", "amount": "30.00"},
                    {"user_id": "user-2", "amount": "30.00"},
                    {"user_id": "user-3", "amount": "30.00"},
                ],
            }
        ],
        "settlements": [
            {
                "id": "set-new",
                "payer_id": "user-2",
                "payee_id": "user-1",
                "amount": "30.00",
                "created_at": (datetime.now(UTC) - timedelta(hours=1)).isoformat(),
            },
            {
                "id": "set-old",
                "payer_id": "user-3",
                "payee_id": "user-1",
                "amount": "1.00",
                "created_at": "2020-01-01T00:00:00Z",
            },
            {
                "id": "set-gone",
                "payer_id": "user-3",
                "payee_id": "user-1",
                "amount": "500.00",
                "created_at": "2020-01-01T00:00:00Z",
                "deleted_at": "2020-01-01T01:00:00Z",
            },
        ],
    }
    path = tmp_path / "ledger.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestSplitCommand:
    """Tests for `splitvibe split`."""

    def test_equal_split(self):
        """Bare ids are enough for an equal split."""
        result = runner.invoke(
            app, ["split", "100", "--paid-by", "a", "-a", "a", "-a", "b", "-a", "c"]
        )

        assert result.exit_code == 0, result.output
        assert "33.34" in result.output
        assert "33.33" in result.output

    def test_percentage_split_with_names(self, ledger_path):
        """Percentages are parsed and names come from the ledger."""
        result = runner.invoke(
            app,
            [
                "split",
                "90",
                "--paid-by",
                "user-1",
                "--among",
                "user-1",
                "--among",
                "user-2",
                "--among",
                "user-3",
                "--mode",
                "PERCENTAGE",
                "--percent",
                "user-1=50",
                "--percent",
                "user-2=30",
                "--percent",
                "user-3=20",
                "--ledger",
                str(ledger_path),
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Alice" in result.output
        assert "45.00" in result.output
        assert "27.00" in result.output
        assert "18.00" in result.output

    def test_shares_split(self):
        """Shares mode accepts ID=WEIGHT pairs."""
        result = runner.invoke(
            app,
            [
                "split",
                "10",
                "--paid-by",
                "alice",
                "-a",
                "bob",
                "-a",
                "carol",
                "--mode",
                "shares",
                "--share",
                "bob=1",
                "--share",
                "carol=2",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "3.34" in result.output
        assert "6.66" in result.output

    def test_rejects_bad_percentages(self):
        """Percentages that don't sum to 100 exit with an error."""
        result = runner.invoke(
            app,
            [
                "split",
                "90",
                "--paid-by",
                "a",
                "-a",
                "a",
                "-a",
                "b",
                "--mode",
                "PERCENTAGE",
                "--percent",
                "a=50",
                "--percent",
                "b=40",
            ],
        )

        assert result.exit_code == 1
        assert "Percentages must sum to 100" in result.output

    def test_rejects_malformed_pair(self):
        """Shares without '=' are a usage error."""
        result = runner.invoke(
            app,
            ["split", "10", "-p", "a", "-a", "a", "--mode", "SHARES", "--share", "a"],
        )

        assert result.exit_code == 2

    def test_rejects_bad_amount(self):
        """Non-numeric totals are a usage error."""
        result = runner.invoke(app, ["split", "ten", "-p", "a", "-a", "a"])

        assert result.exit_code == 2


class TestBalancesCommand:
    """Tests for `splitvibe balances`."""

    def test_json_report(self, ledger_path):
        """The JSON report ignores deleted settlements."""
        result = runner.invoke(app, ["balances", "--ledger", str(ledger_path), "--json"])

        assert result.exit_code == 0, result.output
        report = json.loads(result.stdout)
        assert report["balances"] == [
            {"user_id": "user-1", "amount": "29.00"},
            {"user_id": "user-2", "amount": "0.00"},
            {"user_id": "user-3", "amount": "-29.00"},
        ]
        assert report["simplified_debts"] == [
            {"from": "user-3", "to": "user-1", "amount": "29.00"}
        ]

    def test_table_report(self, ledger_path):
        """The table view shows member names."""
        result = runner.invoke(app, ["balances", "--ledger", str(ledger_path)])

        assert result.exit_code == 0, result.output
        assert "Suggested Transfers" in result.output
        assert "Carol" in result.output

    def test_ledger_path_from_environment(self, ledger_path, monkeypatch):
        """SPLITVIBE_LEDGER_PATH is used when --ledger is omitted."""
        monkeypatch.setenv("SPLITVIBE_LEDGER_PATH", str(ledger_path))

        result = runner.invoke(app, ["balances", "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["simplified_debts"][0]["amount"] == "29.00"

    def test_missing_ledger(self, tmp_path):
        """A missing ledger file exits with an error."""
        result = runner.invoke(app, ["balances", "--ledger", str(tmp_path / "x.json")])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestSettlementsCommand:
    """Tests for `splitvibe settlements`."""

    def test_lists_active_settlements(self, ledger_path):
        """Deleted settlements are hidden; the window is reported."""
        result = runner.invoke(app, ["settlements", "--ledger", str(ledger_path)])

        assert result.exit_code == 0, result.output
        assert "set-new" in result.output
        assert "set-old" in result.output
        assert "set-gone" not in result.output
        assert "yes" in result.output
        assert "24 hours" in result.output


class TestFormatMoney:
    """Tests for format_money."""

    def test_negative_in_parentheses(self):
        assert format_money(Decimal("-85.02"), use_color=False) == "($85.02)"

    def test_positive_padded(self):
        assert format_money(Decimal("1234.5"), use_color=False) == " $1,234.50 "

    def test_decimal_points_align(self):
        """Same-magnitude amounts render at the same width either sign."""
        positive = format_money(Decimal("85.02"), use_color=False)
        negative = format_money(Decimal("-85.02"), use_color=False)

        assert len(positive) == len(negative)
        assert positive.index(".") == negative.index(".")
