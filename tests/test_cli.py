"""CLI tests"""
import pandas as pd
from click.testing import CliRunner

from cli import cli

PLAN_ARGS = [
    "--base-amount", "1000", "--repayment-per-period", "50",
    "--advance-amount", "100", "--late-fee", "5",
    "--periods", "20", "--frequency", "weekly",
]


class TestScaleCommand:
    def test_scale(self):
        result = CliRunner().invoke(cli, ["scale", *PLAN_ARGS, "--amount-given", "2000"])
        assert result.exit_code == 0, result.output
        assert "Repayment amount: 100.00" in result.output
        assert "Advance amount: 200.00" in result.output
        assert "Periods: 20 weeks" in result.output
        assert "Frequency: Weekly" in result.output
        assert "End date" not in result.output

    def test_scale_with_start_date(self):
        result = CliRunner().invoke(
            cli, ["scale", *PLAN_ARGS, "--amount-given", "2000", "--start-date", "2024-01-01"],
        )
        assert result.exit_code == 0, result.output
        assert "End date: 2024-05-20" in result.output

    def test_invalid_plan_reported(self):
        args = ["scale", "--base-amount", "0", "--repayment-per-period", "50",
                "--periods", "20", "--frequency", "weekly", "--amount-given", "500"]
        result = CliRunner().invoke(cli, args)
        assert result.exit_code != 0
        assert "base_amount" in result.output


class TestDateCommands:
    def test_end_date(self):
        result = CliRunner().invoke(
            cli, ["end-date", "--start-date", "2024-01-31", "--frequency", "monthly", "--periods", "1"],
        )
        assert result.output.strip() == "2024-02-29"

    def test_due_dates(self):
        result = CliRunner().invoke(
            cli, ["due-dates", "--start-date", "2024-03-01", "--frequency", "daily", "--periods", "3"],
        )
        assert result.output.split() == ["2024-03-01", "2024-03-02", "2024-03-03"]

    def test_bad_date(self):
        result = CliRunner().invoke(
            cli, ["end-date", "--start-date", "01/03/2024", "--frequency", "daily", "--periods", "3"],
        )
        assert result.exit_code != 0

    def test_calendar(self):
        result = CliRunner().invoke(cli, [
            "calendar", "--year", "2024", "--month", "3", "--start-date", "2024-03-01",
            "--frequency", "weekly", "--periods", "4", "--today", "2024-03-05",
        ])
        assert result.exit_code == 0, result.output
        assert "2024-03" in result.output
        assert "8*" in result.output
        assert "[5]" in result.output


class TestLedgerCommands:
    def _ledger(self, path):
        pd.DataFrame([
            {"customer_id": "c1", "transaction_date": "2024-03-01", "transaction_type": "repayment",
             "payment_mode": "cash", "amount": 100, "remarks": ""},
            {"customer_id": "c1", "transaction_date": "2024-03-08", "transaction_type": "repayment",
             "payment_mode": "upi", "amount": 100, "remarks": ""},
        ]).to_csv(path, index=False)
        return str(path)

    def test_schedule_csv(self, tmp_path):
        ledger = self._ledger(tmp_path / "ledger.csv")
        result = CliRunner().invoke(cli, [
            "schedule", *PLAN_ARGS, "--amount-given", "2000", "--start-date", "2024-03-01",
            "--transactions-file", ledger, "--today", "2024-03-10",
        ])
        assert result.exit_code == 0, result.output
        lines = result.output.strip().splitlines()
        assert lines[0] == "period,due_date,expected_amount,cumulative_expected,is_past,is_covered"
        assert len(lines) == 21
        assert lines[1].startswith("1,2024-03-01,100.0,100.0,True,True")

    def test_summarize(self, tmp_path):
        ledger = self._ledger(tmp_path / "ledger.csv")
        result = CliRunner().invoke(cli, [
            "summarize", "--repayment-amount", "100", "--periods", "10", "--frequency", "weekly",
            "--start-date", "2024-03-01", "--transactions-file", ledger,
            "--today", "2024-03-15", "--daily",
        ])
        assert result.exit_code == 0, result.output
        assert "Total repaid: 200.00" in result.output
        assert "Pending amount: 800.00" in result.output
        assert "Pending periods: 8 weeks" in result.output
        assert "UPI: 100.00" in result.output
        assert "  Late fee: 0.00" in result.output
        assert "Daily collections" in result.output
