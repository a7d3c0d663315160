"""
Pytest configuration and fixtures for HodlPlan test suite.

This module provides reusable fixtures for testing all HodlPlan components.
Fixtures follow the principle of "arrange-act-assert" with clear separation.
"""

import json
from datetime import date, datetime

import pytest

from hodlplan.plan import WithdrawPlanRequest


# ---------------------------------------------------------------------------
# Date Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def reference_date() -> datetime:
    """Standard reference instant ("now") for tests."""
    return datetime(2024, 1, 1)


@pytest.fixture
def target_date() -> date:
    """Target date six months after the reference."""
    return date(2024, 7, 1)


# ---------------------------------------------------------------------------
# Request Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def base_request(reference_date, target_date) -> WithdrawPlanRequest:
    """
    Uniform monthly plan.

    Wallet: 1.5 units, 0.5 protected → 1.0 withdrawable
    Horizon: 6 months
    Prices: 40,000 now, 50,000 projected
    """
    return WithdrawPlanRequest(
        wallet_quantity=1.5,
        protected_quantity=0.5,
        cadence="monthly",
        target_date=target_date,
        current_price=40_000,
        projected_price=50_000,
        strategy="uniform",
        reference_instant=reference_date,
    )


@pytest.fixture
def request_payload() -> dict:
    """Dictionary form of a plan request file."""
    return {
        "schema_version": "0.1.0",
        "wallet_quantity": 1.5,
        "protected_quantity": 0.5,
        "cadence": "monthly",
        "target_date": "2024-07-01",
        "current_price": 40000,
        "projected_price": 50000,
        "strategy_config": {"strategy": "uniform"},
        "constraints": {"fee_percent": 0},
        "reference_instant": "2024-01-01T00:00:00",
    }


@pytest.fixture
def request_file(tmp_path, request_payload):
    """Plan request written to a temporary JSON file."""
    path = tmp_path / "plan.json"
    with open(path, "w") as f:
        json.dump(request_payload, f)
    return path
