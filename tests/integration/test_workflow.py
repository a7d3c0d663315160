"""
Integration tests for complete HodlPlan workflows.

Tests end-to-end scenarios combining request files, every strategy, the
schedule and result persistence.
"""

import dataclasses
import json

import numpy as np
import pytest
from click.testing import CliRunner

from hodlplan import compute_withdraw_plan, periods_until
from hodlplan.cli import main
from hodlplan.constants import STRATEGY_IDS
from hodlplan.serialization import load_request, load_result, save_request, save_result


@pytest.mark.integration
class TestRequestToResultWorkflow:
    """Request file → plan → saved result."""

    def test_file_round_trip(self, tmp_path, request_file):
        request = load_request(request_file)
        result = compute_withdraw_plan(request)

        save_request(request, tmp_path / "copy.json")
        save_result(result, tmp_path / "result.json")

        reloaded = compute_withdraw_plan(load_request(tmp_path / "copy.json"))
        assert reloaded.to_dict() == result.to_dict()
        assert load_result(tmp_path / "result.json")["totals"] == result.totals.to_dict()

    def test_every_strategy_on_a_rising_market(self, base_request):
        prices = [40_000, 41_000, 44_000, 43_000, 47_000, 52_000]
        for strategy in STRATEGY_IDS:
            result = compute_withdraw_plan(dataclasses.replace(
                base_request,
                strategy=strategy,
                actual_price_series=prices,
            ))
            assert result.periods == 6
            assert np.all(result.raw_withdrawals >= 0)
            assert result.totals.quantity <= result.withdrawable + 1e-9
            assert result.totals.quantity == pytest.approx(
                float(np.sum(result.raw_withdrawals))
            )
            for event in result.schedule:
                assert event.actual_value == pytest.approx(event.quantity * prices[event.index])

    def test_weekly_plan_schedule_ends_by_target(self, base_request):
        result = compute_withdraw_plan(dataclasses.replace(base_request, cadence="weekly"))
        assert result.periods == periods_until(
            base_request.target_date, "weekly", base_request.reference_instant
        )
        assert all(e.date <= base_request.target_date for e in result.schedule)
        assert result.schedule[-1].remaining_quantity == pytest.approx(0.0, abs=1e-9)


@pytest.mark.integration
class TestCliWorkflow:
    """CLI validate → plan → output."""

    def test_validate_then_plan(self, tmp_path, request_file):
        runner = CliRunner()

        validated = runner.invoke(main, ["-q", "config", "validate", str(request_file)])
        assert validated.exit_code == 0

        output = tmp_path / "plan_result.json"
        planned = runner.invoke(
            main,
            ["-q", "plan", "-c", str(request_file), "--strategy", "growing", "-o", str(output)],
        )
        assert planned.exit_code == 0

        with open(output) as f:
            data = json.load(f)
        quantities = [e["quantity"] for e in data["schedule"]]
        assert data["strategy"] == "growing"
        assert quantities == sorted(quantities)
        assert sum(quantities) == pytest.approx(1.0)
