"""
Strategy catalog and parameter resolution for HodlPlan.

Purpose
-------
Maps a strategy identifier plus loose user-facing configuration and global
constraints into the normalized numeric parameters consumed by the payout
engine (``hodlplan.engine``). All defaulting of absent or non-finite fields
happens here, once per strategy.

Key components
--------------
- StrategyDefinition / STRATEGY_DEFINITIONS:
    Catalog of the eight strategies with label, description and defaults.
- sanitize_strategy_config:
    Coerces raw input (mappings with strings/None/NaN, mismatched models)
    into the typed per-strategy config from ``hodlplan.config``. Never raises.
- GlobalConstraints:
    Lenient fee/floor/ceiling container.
- StrategyParams + rule records:
    Normalized parameter bag. ``rule`` holds the per-strategy parameters as a
    fractional (not percent) record.
- resolve_strategy_params:
    Exhaustive resolution from (strategy, config, constraints) to StrategyParams.

Parameter table
---------------
| Strategy        | Rule fields                         | Default            |
|-----------------|-------------------------------------|--------------------|
| uniform         | -                                   | -                  |
| fixed-percent   | rate (period % or annual % / ppy)   | 4 %/yr             |
| growing         | growth                              | 1 %                |
| declining       | decay                               | 1 %                |
| trend-following | rate_up, rate_down, window          | 3 %, 0.5 %, 20     |
| milestone       | threshold, mode, portion            | 10 %, percent, 10 %|
| hybrid          | base, beta                          | 0.01, 0.6          |
| target-currency | amount                              | 600                |

Example
-------
>>> params = resolve_strategy_params(
...     "fixed-percent", {"annual_percent": "12"}, GlobalConstraints(),
...     periods=12, total=1.0, prices=np.zeros(12), cadence="monthly",
... )
>>> round(params.rule.rate, 4)
0.01
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

import numpy as np
from pydantic import BaseModel

from .config import (
    STRATEGY_CONFIG_TYPES,
    DecliningConfig,
    FixedPercentConfig,
    GrowingConfig,
    HybridConfig,
    MilestoneConfig,
    TargetCurrencyConfig,
    TrendFollowingConfig,
    UniformConfig,
)
from .constants import (
    DEFAULT_ANNUAL_PERCENT,
    DEFAULT_DECAY_PERCENT,
    DEFAULT_GROWTH_PERCENT,
    DEFAULT_HYBRID_BASE,
    DEFAULT_HYBRID_BETA,
    DEFAULT_MA_WINDOW,
    DEFAULT_MILESTONE_PERCENT,
    DEFAULT_PORTION_MODE,
    DEFAULT_PORTION_VALUE,
    DEFAULT_RATE_DOWN_PERCENT,
    DEFAULT_RATE_UP_PERCENT,
    DEFAULT_STRATEGY,
    DEFAULT_TARGET_AMOUNT,
)
from .periods import periods_per_year
from .utils import clamp, finite_or, parse_nullable_number

logger = logging.getLogger(__name__)

__all__ = [
    "StrategyDefinition",
    "STRATEGY_DEFINITIONS",
    "get_strategy_definition",
    "ensure_strategy_id",
    "sanitize_strategy_config",
    "GlobalConstraints",
    "UniformRule",
    "FixedPercentRule",
    "GrowingRule",
    "DecliningRule",
    "TrendRule",
    "MilestoneRule",
    "HybridRule",
    "TargetCurrencyRule",
    "StrategyParams",
    "resolve_strategy_params",
]


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StrategyDefinition:
    """Catalog entry for a payout strategy."""
    id: str
    label: str
    description: str
    defaults: Mapping[str, Any]


STRATEGY_DEFINITIONS: Tuple[StrategyDefinition, ...] = (
    StrategyDefinition(
        id="uniform",
        label="Uniform quantity",
        description="Splits the withdrawable quantity into equal parts across all periods.",
        defaults={},
    ),
    StrategyDefinition(
        id="fixed-percent",
        label="Fixed % of balance",
        description="Withdraws a fixed share of the remaining balance each period.",
        defaults={"annual_percent": DEFAULT_ANNUAL_PERCENT, "period_percent": None},
    ),
    StrategyDefinition(
        id="growing",
        label="Progressive growth",
        description="Increases the withdrawn quantity each period by a growth rate.",
        defaults={"growth_percent": DEFAULT_GROWTH_PERCENT},
    ),
    StrategyDefinition(
        id="declining",
        label="Progressive decline",
        description="Reduces the withdrawn quantity each period by a decay rate.",
        defaults={"decay_percent": DEFAULT_DECAY_PERCENT},
    ),
    StrategyDefinition(
        id="trend-following",
        label="Price trend",
        description="Withdraws more while the price is above its moving average, less otherwise.",
        defaults={
            "rate_up_percent": DEFAULT_RATE_UP_PERCENT,
            "rate_down_percent": DEFAULT_RATE_DOWN_PERCENT,
            "ma_window": DEFAULT_MA_WINDOW,
        },
    ),
    StrategyDefinition(
        id="milestone",
        label="Price milestones",
        description="Sells only when the price rises past a threshold since the last sale.",
        defaults={
            "milestone_percent": DEFAULT_MILESTONE_PERCENT,
            "portion_mode": DEFAULT_PORTION_MODE,
            "portion_value": DEFAULT_PORTION_VALUE,
        },
    ),
    StrategyDefinition(
        id="hybrid",
        label="Minimum + variable",
        description="Guarantees a fixed minimum and adds a part tied to recent price gains.",
        defaults={"base_quantity": DEFAULT_HYBRID_BASE, "beta": DEFAULT_HYBRID_BETA},
    ),
    StrategyDefinition(
        id="target-currency",
        label="Uniform in currency",
        description="Targets a stable currency amount and converts it to quantity each period.",
        defaults={"target_amount": DEFAULT_TARGET_AMOUNT},
    ),
)

_DEFINITIONS_BY_ID: Dict[str, StrategyDefinition] = {d.id: d for d in STRATEGY_DEFINITIONS}


def ensure_strategy_id(value: Any) -> str:
    """Return *value* if it names a known strategy, otherwise the default ('uniform')."""
    if isinstance(value, str) and value in _DEFINITIONS_BY_ID:
        return value
    return DEFAULT_STRATEGY


def get_strategy_definition(strategy: Any) -> StrategyDefinition:
    return _DEFINITIONS_BY_ID[ensure_strategy_id(strategy)]


# ---------------------------------------------------------------------------
# Config sanitation
# ---------------------------------------------------------------------------

ConfigInput = Union[BaseModel, Mapping[str, Any], None]


def sanitize_strategy_config(strategy: Any, raw: ConfigInput = None) -> BaseModel:
    """
    Coerce loose user input into the typed config for *strategy*.

    Parameters
    ----------
    strategy : str
        Strategy identifier (unknown values resolve to 'uniform').
    raw : BaseModel, mapping or None
        A config model of the matching type is returned as-is. A mapping is
        read field by field: numbers and numeric strings are kept, anything
        else (None, "", "abc", NaN, inf) becomes None so the strategy
        default applies. A config of another strategy is ignored.

    Returns
    -------
    BaseModel
        Instance of the strategy's config model.

    Examples
    --------
    >>> sanitize_strategy_config("growing", {"growth_percent": "5"})
    GrowingConfig(strategy='growing', growth_percent=5.0)
    >>> sanitize_strategy_config("growing", {"growth_percent": "fast"}).growth_percent is None
    True
    """
    strategy_id = ensure_strategy_id(strategy)
    config_type = STRATEGY_CONFIG_TYPES[strategy_id]

    if isinstance(raw, config_type):
        return raw
    if isinstance(raw, BaseModel):
        logger.debug(
            "Ignoring %s for strategy %r; using defaults",
            type(raw).__name__, strategy_id,
        )
        return config_type()
    if not isinstance(raw, Mapping):
        return config_type()

    values: Dict[str, Any] = {}
    for name in config_type.model_fields:
        if name == "strategy":
            continue
        if name == "portion_mode":
            values[name] = "fixed" if raw.get(name) == "fixed" else "percent"
            continue
        values[name] = parse_nullable_number(raw.get(name))
    return config_type(**values)


# ---------------------------------------------------------------------------
# Global constraints
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GlobalConstraints:
    """
    Fee and per-period bounds shared by all strategies.

    Values are taken as given; normalization (clamping, dropping
    non-positive bounds, swapping inverted bounds) happens in
    ``resolve_strategy_params``.
    """
    fee_percent: Optional[float] = 0.0
    min_per_period: Optional[float] = None
    max_per_period: Optional[float] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "GlobalConstraints":
        if not data:
            return cls()
        return cls(
            fee_percent=parse_nullable_number(data.get("fee_percent")),
            min_per_period=parse_nullable_number(data.get("min_per_period")),
            max_per_period=parse_nullable_number(data.get("max_per_period")),
        )


# ---------------------------------------------------------------------------
# Rules (normalized per-strategy parameters)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UniformRule:
    pass


@dataclass(frozen=True)
class FixedPercentRule:
    rate: float


@dataclass(frozen=True)
class GrowingRule:
    growth: float


@dataclass(frozen=True)
class DecliningRule:
    decay: float


@dataclass(frozen=True)
class TrendRule:
    rate_up: float
    rate_down: float
    window: int


@dataclass(frozen=True)
class MilestoneRule:
    threshold: float
    mode: str
    portion: float


@dataclass(frozen=True)
class HybridRule:
    base: float
    beta: float


@dataclass(frozen=True)
class TargetCurrencyRule:
    amount: float


Rule = Union[
    UniformRule,
    FixedPercentRule,
    GrowingRule,
    DecliningRule,
    TrendRule,
    MilestoneRule,
    HybridRule,
    TargetCurrencyRule,
]


@dataclass(frozen=True, eq=False)
class StrategyParams:
    """
    Normalized parameter bag consumed by ``hodlplan.engine``.

    Parameters
    ----------
    strategy : str
        Resolved strategy identifier.
    periods : int
        Number of withdrawal periods (N).
    total : float
        Withdrawable quantity (W).
    prices : np.ndarray
        Per-period price path driving price-aware strategies.
    fee_percent : float, optional
        Present only when > 0.
    min_per_period, max_per_period : float, optional
        Present only when > 0; min <= max.
    rule : Rule
        Strategy-specific parameters, as fractions.
    """
    strategy: str
    periods: int
    total: float
    prices: np.ndarray
    rule: Rule
    fee_percent: Optional[float] = None
    min_per_period: Optional[float] = None
    max_per_period: Optional[float] = None

    @property
    def fee_fraction(self) -> float:
        if self.fee_percent is None:
            return 0.0
        return clamp(self.fee_percent / 100.0, 0.0, 1.0)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def _percent(value: Optional[float], default: float) -> float:
    """Non-negative fraction from a percent field, *default* when absent."""
    return max(0.0, finite_or(value, default)) / 100.0


def _resolve_uniform(config: UniformConfig, cadence: str) -> UniformRule:
    return UniformRule()


def _resolve_fixed_percent(config: FixedPercentConfig, cadence: str) -> FixedPercentRule:
    period_percent = parse_nullable_number(config.period_percent)
    if period_percent is not None:
        return FixedPercentRule(rate=max(0.0, period_percent) / 100.0)
    annual = _percent(config.annual_percent, DEFAULT_ANNUAL_PERCENT)
    return FixedPercentRule(rate=annual / periods_per_year(cadence))


def _resolve_growing(config: GrowingConfig, cadence: str) -> GrowingRule:
    growth = finite_or(config.growth_percent, DEFAULT_GROWTH_PERCENT) / 100.0
    # ratio must stay positive
    return GrowingRule(growth=max(growth, -0.99))


def _resolve_declining(config: DecliningConfig, cadence: str) -> DecliningRule:
    decay = finite_or(config.decay_percent, DEFAULT_DECAY_PERCENT) / 100.0
    return DecliningRule(decay=clamp(decay, 0.0, 1.0))


def _resolve_trend(config: TrendFollowingConfig, cadence: str) -> TrendRule:
    window = finite_or(config.ma_window, DEFAULT_MA_WINDOW)
    return TrendRule(
        rate_up=_percent(config.rate_up_percent, DEFAULT_RATE_UP_PERCENT),
        rate_down=_percent(config.rate_down_percent, DEFAULT_RATE_DOWN_PERCENT),
        window=max(1, int(math.floor(window))),
    )


def _resolve_milestone(config: MilestoneConfig, cadence: str) -> MilestoneRule:
    mode = "fixed" if config.portion_mode == "fixed" else "percent"
    value = max(0.0, finite_or(config.portion_value, DEFAULT_PORTION_VALUE))
    return MilestoneRule(
        threshold=_percent(config.milestone_percent, DEFAULT_MILESTONE_PERCENT),
        mode=mode,
        portion=value / 100.0 if mode == "percent" else value,
    )


def _resolve_hybrid(config: HybridConfig, cadence: str) -> HybridRule:
    return HybridRule(
        base=max(0.0, finite_or(config.base_quantity, DEFAULT_HYBRID_BASE)),
        beta=max(0.0, finite_or(config.beta, DEFAULT_HYBRID_BETA)),
    )


def _resolve_target_currency(config: TargetCurrencyConfig, cadence: str) -> TargetCurrencyRule:
    return TargetCurrencyRule(
        amount=max(0.0, finite_or(config.target_amount, DEFAULT_TARGET_AMOUNT)),
    )


_RESOLVERS: Dict[str, Callable[[Any, str], Rule]] = {
    "uniform": _resolve_uniform,
    "fixed-percent": _resolve_fixed_percent,
    "growing": _resolve_growing,
    "declining": _resolve_declining,
    "trend-following": _resolve_trend,
    "milestone": _resolve_milestone,
    "hybrid": _resolve_hybrid,
    "target-currency": _resolve_target_currency,
}


def _resolve_bounds(constraints: GlobalConstraints) -> Tuple[Optional[float], Optional[float], Optional[float]]:
    fee = clamp(finite_or(constraints.fee_percent, 0.0), 0.0, 100.0)
    lower = parse_nullable_number(constraints.min_per_period)
    upper = parse_nullable_number(constraints.max_per_period)
    lower = lower if lower is not None and lower > 0 else None
    upper = upper if upper is not None and upper > 0 else None
    if lower is not None and upper is not None and lower > upper:
        lower, upper = upper, lower
    return (fee if fee > 0 else None), lower, upper


def resolve_strategy_params(
    strategy: Any,
    config: ConfigInput,
    constraints: Optional[GlobalConstraints],
    *,
    periods: int,
    total: float,
    prices: np.ndarray,
    cadence: str = "monthly",
) -> StrategyParams:
    """
    Normalize strategy configuration and constraints for the engine.

    Parameters
    ----------
    strategy : str
        Strategy identifier; unknown ids resolve to 'uniform'.
    config : BaseModel, mapping or None
        Raw or typed per-strategy configuration.
    constraints : GlobalConstraints, optional
        Fee and per-period bounds.
    periods : int
        Number of withdrawal periods.
    total : float
        Withdrawable quantity.
    prices : np.ndarray
        Price path for price-aware strategies.
    cadence : {'weekly', 'monthly'}
        Used to spread annual rates over periods.

    Returns
    -------
    StrategyParams
    """
    strategy_id = ensure_strategy_id(strategy)
    typed = sanitize_strategy_config(strategy_id, config)
    rule = _RESOLVERS[strategy_id](typed, cadence)
    fee, lower, upper = _resolve_bounds(constraints or GlobalConstraints())

    params = StrategyParams(
        strategy=strategy_id,
        periods=max(0, int(periods)),
        total=max(0.0, finite_or(total, 0.0)),
        prices=prices,
        rule=rule,
        fee_percent=fee,
        min_per_period=lower,
        max_per_period=upper,
    )
    logger.debug(
        "Resolved %s: rule=%s fee=%s bounds=(%s, %s) N=%d W=%.8f",
        strategy_id, rule, fee, lower, upper, params.periods, params.total,
    )
    return params
