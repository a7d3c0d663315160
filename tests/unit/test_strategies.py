"""
Unit tests for strategies module.

Tests the strategy catalog, config sanitation and parameter resolution.
"""

import pytest
import numpy as np

from hodlplan.config import (
    FixedPercentConfig,
    GrowingConfig,
    MilestoneConfig,
    UniformConfig,
)
from hodlplan.constants import STRATEGY_IDS
from hodlplan.strategies import (
    STRATEGY_DEFINITIONS,
    DecliningRule,
    FixedPercentRule,
    GlobalConstraints,
    GrowingRule,
    HybridRule,
    MilestoneRule,
    TargetCurrencyRule,
    TrendRule,
    UniformRule,
    ensure_strategy_id,
    get_strategy_definition,
    resolve_strategy_params,
    sanitize_strategy_config,
)


def _resolve(strategy, config=None, constraints=None, periods=12, cadence="monthly"):
    return resolve_strategy_params(
        strategy, config, constraints,
        periods=periods, total=1.0, prices=np.zeros(periods), cadence=cadence,
    )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

class TestCatalog:
    """Tests for the strategy catalog."""

    def test_eight_strategies_in_order(self):
        assert tuple(d.id for d in STRATEGY_DEFINITIONS) == STRATEGY_IDS
        assert len(STRATEGY_DEFINITIONS) == 8

    def test_every_definition_has_label_and_description(self):
        for definition in STRATEGY_DEFINITIONS:
            assert definition.label
            assert definition.description

    def test_defaults(self):
        assert get_strategy_definition("trend-following").defaults == {
            "rate_up_percent": 3,
            "rate_down_percent": 0.5,
            "ma_window": 20,
        }
        assert get_strategy_definition("target-currency").defaults == {"target_amount": 600}

    @pytest.mark.parametrize("value", ["nope", None, 3, ""])
    def test_unknown_ids_fall_back_to_uniform(self, value):
        assert ensure_strategy_id(value) == "uniform"
        assert get_strategy_definition(value).id == "uniform"


# ---------------------------------------------------------------------------
# Sanitation
# ---------------------------------------------------------------------------

class TestSanitizeStrategyConfig:
    """Tests for sanitize_strategy_config."""

    def test_numeric_strings_are_parsed(self):
        config = sanitize_strategy_config("growing", {"growth_percent": "5"})
        assert isinstance(config, GrowingConfig)
        assert config.growth_percent == 5.0

    @pytest.mark.parametrize("raw", ["fast", "", None, float("nan"), float("inf"), True])
    def test_invalid_values_become_none(self, raw):
        config = sanitize_strategy_config("growing", {"growth_percent": raw})
        assert config.growth_percent is None

    def test_matching_model_returned_as_is(self):
        config = FixedPercentConfig(annual_percent=12)
        assert sanitize_strategy_config("fixed-percent", config) is config

    def test_mismatched_model_uses_defaults(self):
        config = sanitize_strategy_config("growing", FixedPercentConfig(annual_percent=12))
        assert config == GrowingConfig()

    def test_missing_config(self):
        assert sanitize_strategy_config("uniform", None) == UniformConfig()

    def test_portion_mode(self):
        assert sanitize_strategy_config("milestone", {"portion_mode": "fixed"}).portion_mode == "fixed"
        assert sanitize_strategy_config("milestone", {"portion_mode": "FIXED"}).portion_mode == "percent"
        assert sanitize_strategy_config("milestone", {}).portion_mode == "percent"

    def test_unknown_keys_ignored(self):
        config = sanitize_strategy_config("milestone", {"milestone_percent": 5, "extra": 1})
        assert isinstance(config, MilestoneConfig)
        assert config.milestone_percent == 5.0


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

class TestResolveStrategyParams:
    """Tests for resolve_strategy_params."""

    def test_uniform(self):
        params = _resolve("uniform")
        assert isinstance(params.rule, UniformRule)
        assert params.periods == 12
        assert params.total == 1.0

    def test_fixed_percent_from_annual(self):
        params = _resolve("fixed-percent", {"annual_percent": 12})
        assert isinstance(params.rule, FixedPercentRule)
        assert params.rule.rate == pytest.approx(0.01)

    def test_fixed_percent_annual_weekly(self):
        params = _resolve("fixed-percent", {"annual_percent": 52}, cadence="weekly")
        assert params.rule.rate == pytest.approx(0.01)

    def test_fixed_percent_period_overrides_annual(self):
        params = _resolve("fixed-percent", {"annual_percent": 12, "period_percent": 5})
        assert params.rule.rate == pytest.approx(0.05)

    def test_fixed_percent_default(self):
        assert _resolve("fixed-percent").rule.rate == pytest.approx(0.04 / 12)

    def test_growing_default(self):
        rule = _resolve("growing").rule
        assert isinstance(rule, GrowingRule)
        assert rule.growth == pytest.approx(0.01)

    def test_declining_clamped(self):
        rule = _resolve("declining", {"decay_percent": 150}).rule
        assert isinstance(rule, DecliningRule)
        assert rule.decay == 1.0

    def test_trend_defaults_and_window_floor(self):
        rule = _resolve("trend-following").rule
        assert isinstance(rule, TrendRule)
        assert rule.rate_up == pytest.approx(0.03)
        assert rule.rate_down == pytest.approx(0.005)
        assert rule.window == 20
        assert _resolve("trend-following", {"ma_window": 2.7}).rule.window == 2
        assert _resolve("trend-following", {"ma_window": 0}).rule.window == 1

    def test_milestone_percent_mode(self):
        rule = _resolve("milestone").rule
        assert isinstance(rule, MilestoneRule)
        assert rule.threshold == pytest.approx(0.10)
        assert rule.mode == "percent"
        assert rule.portion == pytest.approx(0.10)

    def test_milestone_fixed_mode_keeps_quantity(self):
        rule = _resolve("milestone", {"portion_mode": "fixed", "portion_value": 0.2}).rule
        assert rule.mode == "fixed"
        assert rule.portion == pytest.approx(0.2)

    def test_hybrid_defaults(self):
        rule = _resolve("hybrid").rule
        assert isinstance(rule, HybridRule)
        assert rule.base == pytest.approx(0.01)
        assert rule.beta == pytest.approx(0.6)

    def test_target_currency_default(self):
        rule = _resolve("target-currency").rule
        assert isinstance(rule, TargetCurrencyRule)
        assert rule.amount == 600

    @pytest.mark.parametrize("strategy", STRATEGY_IDS)
    def test_every_strategy_resolves_to_its_own_rule(self, strategy):
        params = _resolve(strategy)
        assert params.strategy == strategy
        if strategy != "uniform":
            assert not isinstance(params.rule, UniformRule)

    def test_rules_are_distinct_per_strategy(self):
        rule_types = {type(_resolve(strategy).rule) for strategy in STRATEGY_IDS}
        assert len(rule_types) == len(STRATEGY_IDS)

    def test_unknown_strategy_resolves_uniform(self):
        params = _resolve("martingale")
        assert params.strategy == "uniform"
        assert isinstance(params.rule, UniformRule)


class TestConstraints:
    """Tests for constraint normalization."""

    def test_no_constraints(self):
        params = _resolve("uniform")
        assert params.fee_percent is None
        assert params.min_per_period is None
        assert params.max_per_period is None
        assert params.fee_fraction == 0.0

    def test_fee_clamped(self):
        params = _resolve("uniform", constraints=GlobalConstraints(fee_percent=150))
        assert params.fee_percent == 100.0
        assert params.fee_fraction == 1.0

    def test_non_positive_bounds_dropped(self):
        params = _resolve("uniform", constraints=GlobalConstraints(min_per_period=0, max_per_period=-1))
        assert params.min_per_period is None
        assert params.max_per_period is None

    def test_inverted_bounds_swapped(self):
        params = _resolve("uniform", constraints=GlobalConstraints(min_per_period=0.5, max_per_period=0.1))
        assert params.min_per_period == 0.1
        assert params.max_per_period == 0.5

    def test_from_mapping_is_lenient(self):
        constraints = GlobalConstraints.from_mapping(
            {"fee_percent": "2", "min_per_period": "abc", "max_per_period": None}
        )
        assert constraints.fee_percent == 2.0
        assert constraints.min_per_period is None
        assert constraints.max_per_period is None
        assert GlobalConstraints.from_mapping(None) == GlobalConstraints()
