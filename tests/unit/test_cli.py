"""
Unit tests for CLI module.

Tests command-line interface functionality using Click's testing utilities.
"""

import json
import pytest
from click.testing import CliRunner

from hodlplan.cli import main, __version__
from hodlplan.constants import STRATEGY_IDS


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def invalid_request_file(tmp_path, request_payload):
    """Request file failing validation."""
    request_payload["wallet_quantity"] = -1
    path = tmp_path / "invalid.json"
    with open(path, "w") as f:
        json.dump(request_payload, f)
    return path


# ============================================================================
# MAIN GROUP
# ============================================================================

class TestMain:
    """Tests for the main command group."""

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("plan", "strategies", "periods", "config"):
            assert command in result.output


# ============================================================================
# PLAN COMMAND
# ============================================================================

class TestPlanCommand:
    """Tests for the plan command."""

    def test_table_output(self, runner, request_file):
        result = runner.invoke(main, ["plan", "-c", str(request_file)])
        assert result.exit_code == 0, result.output
        assert "Withdrawal Plan" in result.output
        assert "Month 1" in result.output
        assert "Summary" in result.output

    def test_quiet_output(self, runner, request_file):
        result = runner.invoke(main, ["-q", "plan", "-c", str(request_file)])
        assert result.exit_code == 0
        assert "Periods: 6" in result.output
        assert "Valid: True" in result.output

    def test_json_output(self, runner, request_file):
        result = runner.invoke(main, ["plan", "-c", str(request_file), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["periods"] == 6
        assert data["totals"]["quantity"] == pytest.approx(1.0)

    def test_strategy_override(self, runner, request_file):
        result = runner.invoke(
            main, ["plan", "-c", str(request_file), "--strategy", "declining", "--json"]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["strategy"] == "declining"

    def test_now_override(self, runner, request_file):
        result = runner.invoke(
            main, ["plan", "-c", str(request_file), "--now", "2024-04-01T00:00:00Z", "--json"]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["periods"] == 3

    def test_invalid_now(self, runner, request_file):
        result = runner.invoke(main, ["plan", "-c", str(request_file), "--now", "yesterday"])
        assert result.exit_code == 1
        assert "reference instant" in result.output

    def test_unknown_strategy_rejected(self, runner, request_file):
        result = runner.invoke(main, ["plan", "-c", str(request_file), "--strategy", "martingale"])
        assert result.exit_code != 0

    def test_save_output(self, runner, request_file, tmp_path):
        output = tmp_path / "out" / "result.json"
        result = runner.invoke(main, ["-q", "plan", "-c", str(request_file), "-o", str(output)])
        assert result.exit_code == 0
        assert output.exists()
        with open(output) as f:
            assert json.load(f)["periods"] == 6

    def test_invalid_request(self, runner, invalid_request_file):
        result = runner.invoke(main, ["plan", "-c", str(invalid_request_file)])
        assert result.exit_code == 1
        assert "Error loading request" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["plan", "-c", str(tmp_path / "missing.json")])
        assert result.exit_code != 0

    def test_no_plan_possible(self, runner, request_file):
        result = runner.invoke(main, ["plan", "-c", str(request_file), "--now", "2030-01-01"])
        assert result.exit_code == 0
        assert "No plan possible" in result.output


# ============================================================================
# OTHER COMMANDS
# ============================================================================

class TestStrategiesCommand:
    """Tests for the strategies command."""

    def test_quiet_lists_ids(self, runner):
        result = runner.invoke(main, ["-q", "strategies"])
        assert result.exit_code == 0
        assert result.output.split() == list(STRATEGY_IDS)

    def test_table(self, runner):
        result = runner.invoke(main, ["strategies"])
        assert result.exit_code == 0
        assert "Payout Strategies" in result.output


class TestPeriodsCommand:
    """Tests for the periods command."""

    def test_monthly(self, runner):
        result = runner.invoke(main, ["periods", "2024-07-01", "--now", "2024-01-01"])
        assert result.exit_code == 0
        assert result.output.strip() == "6"

    def test_weekly(self, runner):
        result = runner.invoke(
            main, ["periods", "2024-07-01", "--cadence", "weekly", "--now", "2024-01-01"]
        )
        assert result.output.strip() == "26"

    def test_invalid_target(self, runner):
        result = runner.invoke(main, ["periods", "someday", "--now", "2024-01-01"])
        assert result.exit_code == 0
        assert result.output.strip() == "0"

    def test_invalid_now(self, runner):
        result = runner.invoke(main, ["periods", "2024-07-01", "--now", "soon"])
        assert result.exit_code == 1


class TestConfigCommands:
    """Tests for config subcommands."""

    def test_validate_valid(self, runner, request_file):
        result = runner.invoke(main, ["config", "validate", str(request_file)])
        assert result.exit_code == 0
        assert "Configuration Summary" in result.output

    def test_validate_quiet(self, runner, request_file):
        result = runner.invoke(main, ["-q", "config", "validate", str(request_file)])
        assert result.exit_code == 0
        assert "Configuration is valid" in result.output

    def test_validate_invalid(self, runner, invalid_request_file):
        result = runner.invoke(main, ["config", "validate", str(invalid_request_file)])
        assert result.exit_code == 1
        assert "validation failed" in result.output
