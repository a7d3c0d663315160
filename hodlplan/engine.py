"""
Withdrawal strategy engine for HodlPlan.

Purpose
-------
Given the normalized parameters of a strategy (``StrategyParams``), computes
the raw payout quantity of every period. The result is a NumPy array of
length N with non-negative entries whose sum never exceeds the withdrawable
quantity W.

Per-period pipeline
-------------------
Identical for every strategy:

    1. gross  = strategy target for period t
    2. gross  = clip(gross, min_per_period, max_per_period)
       gross  = min(gross, remaining);  gross = max(gross, 0)
    3. net    = gross * (1 - fee_percent / 100)
    4. payout[t] = net;  remaining -= net

The pool is debited by the net payout, not the gross.

Strategy targets (t 0-indexed)
------------------------------
- uniform        : remaining / (N - t)
- fixed-percent  : remaining * p
- growing        : r0 * (1 + g)^t,  r0 such that the unconstrained sum is W
- declining      : r0 * (1 - d)^t,  same closed form
- trend-following: remaining * rate_up if price_t > MA_t else remaining * rate_down
- milestone      : pay when price_t >= anchor * (1 + threshold), anchor being
                   the price at the last payout (raised on unpaid rallies)
- hybrid         : base + max(0, beta * (price_t - price_{t-1})) / price_t
- target-currency: amount / price_t, scaled by W / sum when the provisional
                   quantities exceed W

Running state (remaining balance, milestone anchor) is threaded through the
loop as an explicit accumulator; nothing outlives a call.

Final correction pass
---------------------
The first period whose cumulative payout exceeds W is trimmed by the excess
and every later period is zeroed, so sum(payouts) <= W always holds.

Example
-------
>>> params = resolve_strategy_params(
...     "uniform", None, None, periods=4, total=1.0, prices=np.zeros(4)
... )
>>> compute_withdrawals(params).tolist()
[0.25, 0.25, 0.25, 0.25]
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, NamedTuple, Optional, Tuple

import numpy as np

from .constants import RATIO_EPSILON
from .strategies import (
    DecliningRule,
    FixedPercentRule,
    GrowingRule,
    HybridRule,
    MilestoneRule,
    StrategyParams,
    TargetCurrencyRule,
    TrendRule,
    UniformRule,
)

logger = logging.getLogger(__name__)

__all__ = [
    "compute_withdrawals",
    "moving_average",
    "geometric_first_term",
    "enforce_total_cap",
]


class _FoldState(NamedTuple):
    """Accumulator threaded through the payout loop."""
    remaining: float
    anchor: float


# (gross target or None to skip the period, next anchor)
Target = Callable[[int, _FoldState], Tuple[Optional[float], float]]


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------

def moving_average(prices: np.ndarray, window: int) -> np.ndarray:
    """
    Trailing moving average including the current period.

    Near the start the average uses as many periods as are available.

    Examples
    --------
    >>> moving_average(np.array([20_000., 19_000., 21_000., 22_000.]), 2).tolist()
    [20000.0, 19500.0, 20000.0, 21500.0]
    """
    prices = np.asarray(prices, dtype=float)
    n = prices.shape[0]
    if n == 0:
        return np.zeros(0, dtype=float)
    size = max(1, int(window))
    cumulative = np.cumsum(prices)
    lagged = np.zeros(n, dtype=float)
    if n > size:
        lagged[size:] = cumulative[: n - size]
    counts = np.minimum(np.arange(1, n + 1), size)
    return (cumulative - lagged) / counts


def geometric_first_term(total: float, periods: int, ratio: float) -> float:
    """
    First term r0 of a geometric sequence of *periods* terms summing to *total*.

        total = r0 * (ratio^N - 1) / (ratio - 1)

    A ratio within RATIO_EPSILON of 1 (or a non-positive denominator) falls
    back to total / periods.

    Examples
    --------
    >>> round(geometric_first_term(1.0, 2, 3.0), 6)
    0.25
    """
    if periods <= 0:
        return 0.0
    if abs(ratio - 1.0) < RATIO_EPSILON:
        return total / periods
    denom = (ratio ** periods - 1.0) / (ratio - 1.0)
    if not math.isfinite(denom) or denom <= 0:
        return total / periods
    return total / denom


def enforce_total_cap(payouts: np.ndarray, total: float) -> np.ndarray:
    """
    Trim a payout sequence so its cumulative sum never exceeds *total*.

    The first period where the running total would exceed *total* is reduced
    by the excess; every subsequent period is forced to 0.
    """
    capped = np.nan_to_num(np.asarray(payouts, dtype=float), nan=0.0, posinf=0.0, neginf=0.0)
    capped = np.maximum(capped, 0.0)
    cumulative = np.cumsum(capped)
    over = np.flatnonzero(cumulative > total)
    if over.size:
        first = int(over[0])
        excess = float(cumulative[first] - total)
        logger.debug("Trimming period %d by %.10f; zeroing %d later periods",
                     first, excess, capped.shape[0] - first - 1)
        capped[first] = max(0.0, capped[first] - excess)
        capped[first + 1:] = 0.0
    return capped


def _price_at(prices: np.ndarray, t: int) -> float:
    if prices.shape[0] == 0:
        return 0.0
    price = float(prices[min(t, prices.shape[0] - 1)])
    return price if math.isfinite(price) and price > 0 else 0.0


# ---------------------------------------------------------------------------
# Bounds and fee
# ---------------------------------------------------------------------------

def _apply_bounds(value: float, available: float, params: StrategyParams) -> float:
    result = value if math.isfinite(value) and value > 0 else 0.0
    if params.min_per_period is not None:
        result = max(result, params.min_per_period)
    if params.max_per_period is not None:
        result = min(result, params.max_per_period)
    result = min(result, max(0.0, available))
    return max(0.0, result)


def _apply_fee(value: float, fee_fraction: float) -> float:
    if not math.isfinite(value) or value <= 0:
        return 0.0
    return max(0.0, value * (1.0 - fee_fraction))


# ---------------------------------------------------------------------------
# Strategy targets
# ---------------------------------------------------------------------------

def _uniform_target(params: StrategyParams, rule: UniformRule) -> Target:
    n = params.periods

    def target(t: int, state: _FoldState):
        return state.remaining / (n - t), state.anchor

    return target


def _fixed_percent_target(params: StrategyParams, rule: FixedPercentRule) -> Target:
    def target(t: int, state: _FoldState):
        return state.remaining * rule.rate, state.anchor

    return target


def _geometric_target(params: StrategyParams, ratio: float) -> Target:
    first = geometric_first_term(params.total, params.periods, ratio)

    def target(t: int, state: _FoldState):
        return first * ratio ** t, state.anchor

    return target


def _growing_target(params: StrategyParams, rule: GrowingRule) -> Target:
    return _geometric_target(params, 1.0 + rule.growth)


def _declining_target(params: StrategyParams, rule: DecliningRule) -> Target:
    return _geometric_target(params, 1.0 - rule.decay)


def _trend_target(params: StrategyParams, rule: TrendRule) -> Target:
    path = np.array([_price_at(params.prices, t) for t in range(params.periods)], dtype=float)
    averages = moving_average(path, rule.window)

    def target(t: int, state: _FoldState):
        rate = rule.rate_up if path[t] > averages[t] else rule.rate_down
        return state.remaining * rate, state.anchor

    return target


def _milestone_target(params: StrategyParams, rule: MilestoneRule) -> Target:
    prices = params.prices

    def target(t: int, state: _FoldState):
        price = _price_at(prices, t)
        if price <= 0:
            return None, state.anchor
        if state.anchor <= 0:
            # first known price becomes the reference
            return None, price
        if price >= state.anchor * (1.0 + rule.threshold) and state.remaining > 0:
            if rule.mode == "fixed":
                return min(rule.portion, state.remaining), price
            return state.remaining * rule.portion, price
        return None, max(state.anchor, price)

    return target


def _hybrid_target(params: StrategyParams, rule: HybridRule) -> Target:
    prices = params.prices

    def target(t: int, state: _FoldState):
        price = _price_at(prices, t)
        previous = _price_at(prices, t - 1) if t > 0 else price
        variable = 0.0
        if price > 0 and previous > 0:
            variable = max(0.0, rule.beta * (price - previous)) / price
        return rule.base + variable, state.anchor

    return target


def _target_currency_target(params: StrategyParams, rule: TargetCurrencyRule) -> Target:
    prices = params.prices
    provisional = np.array(
        [rule.amount / p if p > 0 else 0.0 for p in (_price_at(prices, t) for t in range(params.periods))],
        dtype=float,
    )
    planned = float(provisional.sum())
    scale = params.total / planned if planned > params.total > 0 else 1.0

    def target(t: int, state: _FoldState):
        return provisional[t] * scale, state.anchor

    return target


_TARGETS: Dict[type, Callable[[StrategyParams, object], Target]] = {
    UniformRule: _uniform_target,
    FixedPercentRule: _fixed_percent_target,
    GrowingRule: _growing_target,
    DecliningRule: _declining_target,
    TrendRule: _trend_target,
    MilestoneRule: _milestone_target,
    HybridRule: _hybrid_target,
    TargetCurrencyRule: _target_currency_target,
}


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def _fold(params: StrategyParams, target: Target) -> np.ndarray:
    payouts = np.zeros(params.periods, dtype=float)
    fee_fraction = params.fee_fraction
    state = _FoldState(remaining=params.total, anchor=_price_at(params.prices, 0))

    for t in range(params.periods):
        gross, anchor = target(t, state)
        if gross is None:
            net = 0.0
        else:
            net = _apply_fee(_apply_bounds(gross, state.remaining, params), fee_fraction)
        payouts[t] = net
        state = _FoldState(remaining=max(0.0, state.remaining - net), anchor=anchor)

    return payouts


def compute_withdrawals(params: StrategyParams) -> np.ndarray:
    """
    Raw per-period payout quantities for the resolved strategy.

    Parameters
    ----------
    params : StrategyParams
        Output of ``resolve_strategy_params``; ``params.rule`` selects the
        strategy.

    Returns
    -------
    np.ndarray, shape (N,)
        Non-negative payouts with sum <= params.total. All zeros when N or W
        is 0, or when a target-currency plan targets no amount.
    """
    if params.periods <= 0 or params.total <= 0:
        return np.zeros(max(params.periods, 0), dtype=float)
    if isinstance(params.rule, TargetCurrencyRule) and params.rule.amount <= 0:
        return np.zeros(params.periods, dtype=float)

    target = _TARGETS[type(params.rule)](params, params.rule)
    raw = _fold(params, target)
    return enforce_total_cap(raw, params.total)
