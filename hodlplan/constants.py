"""
Global constants for HodlPlan.

Purpose
-------
Centralizes default values and magic numbers used throughout the HodlPlan
codebase: calendar conversions, per-strategy defaults, numeric tolerances and
the bounds applied to user-supplied scenario inputs.

Usage
-----
>>> from hodlplan.constants import WEEKS_PER_MONTH, DEFAULT_STRATEGY
>>> monthly = per_period * WEEKS_PER_MONTH

Categories
----------
- Calendar: periods per year, weeks per month
- Strategies: default identifiers and per-strategy parameters
- Numerics: tolerance for geometric-series degeneracy
- Scenarios: price variation bounds
- Serialization: schema version
"""

from typing import Tuple

__all__ = [
    # Calendar
    "CADENCES",
    "DEFAULT_CADENCE",
    "WEEKS_PER_YEAR",
    "MONTHS_PER_YEAR",
    "WEEKS_PER_MONTH",
    "DAYS_PER_WEEK",
    # Strategies
    "STRATEGY_IDS",
    "DEFAULT_STRATEGY",
    "DEFAULT_ANNUAL_PERCENT",
    "DEFAULT_GROWTH_PERCENT",
    "DEFAULT_DECAY_PERCENT",
    "DEFAULT_RATE_UP_PERCENT",
    "DEFAULT_RATE_DOWN_PERCENT",
    "DEFAULT_MA_WINDOW",
    "DEFAULT_MILESTONE_PERCENT",
    "DEFAULT_PORTION_MODE",
    "DEFAULT_PORTION_VALUE",
    "DEFAULT_HYBRID_BASE",
    "DEFAULT_HYBRID_BETA",
    "DEFAULT_TARGET_AMOUNT",
    # Numerics
    "RATIO_EPSILON",
    # Scenarios
    "VARIATION_MIN",
    "VARIATION_MAX",
    # Serialization
    "SCHEMA_VERSION",
]


# =============================================================================
# Calendar
# =============================================================================

CADENCES: Tuple[str, ...] = ("weekly", "monthly")
"""Supported withdrawal cadences."""

DEFAULT_CADENCE: str = "monthly"
"""Cadence used when none (or an unknown one) is given."""

WEEKS_PER_YEAR: int = 52
"""Periods per year for weekly cadence (annual-rate conversion)."""

MONTHS_PER_YEAR: int = 12
"""Periods per year for monthly cadence (annual-rate conversion)."""

WEEKS_PER_MONTH: float = 4.345
"""Average number of weeks in a calendar month (monthly normalization)."""

DAYS_PER_WEEK: int = 7


# =============================================================================
# Strategies
# =============================================================================

STRATEGY_IDS: Tuple[str, ...] = (
    "uniform",
    "fixed-percent",
    "growing",
    "declining",
    "trend-following",
    "milestone",
    "hybrid",
    "target-currency",
)
"""Enumerated payout strategies, in catalog order."""

DEFAULT_STRATEGY: str = "uniform"
"""Strategy used when the requested identifier is unknown."""

DEFAULT_ANNUAL_PERCENT: float = 4.0
"""fixed-percent: share of the remaining balance withdrawn per year (%)."""

DEFAULT_GROWTH_PERCENT: float = 1.0
"""growing: per-period growth of the payout (%)."""

DEFAULT_DECAY_PERCENT: float = 1.0
"""declining: per-period decay of the payout (%)."""

DEFAULT_RATE_UP_PERCENT: float = 3.0
"""trend-following: share of the remaining balance when price > moving average (%)."""

DEFAULT_RATE_DOWN_PERCENT: float = 0.5
"""trend-following: share of the remaining balance when price <= moving average (%)."""

DEFAULT_MA_WINDOW: int = 20
"""trend-following: moving-average window, in periods."""

DEFAULT_MILESTONE_PERCENT: float = 10.0
"""milestone: price rise since the last payout that triggers a sale (%)."""

DEFAULT_PORTION_MODE: str = "percent"
"""milestone: payout mode, "percent" of remaining or "fixed" quantity."""

DEFAULT_PORTION_VALUE: float = 10.0
"""milestone: payout value (percent of remaining, or quantity in fixed mode)."""

DEFAULT_HYBRID_BASE: float = 0.01
"""hybrid: guaranteed base quantity per period."""

DEFAULT_HYBRID_BETA: float = 0.6
"""hybrid: momentum factor applied to positive price moves."""

DEFAULT_TARGET_AMOUNT: float = 600.0
"""target-currency: currency amount targeted per period."""


# =============================================================================
# Numerics
# =============================================================================

RATIO_EPSILON: float = 1e-9
"""Below this distance from 1 a geometric ratio is treated as flat."""


# =============================================================================
# Scenarios
# =============================================================================

VARIATION_MIN: float = -50.0
"""Lowest accepted price variation for a what-if scenario (%)."""

VARIATION_MAX: float = 60.0
"""Highest accepted price variation for a what-if scenario (%)."""


# =============================================================================
# Serialization
# =============================================================================

SCHEMA_VERSION: str = "0.1.0"
"""Version tag written into serialized requests and results."""
