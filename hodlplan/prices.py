"""
Price series construction for HodlPlan.

Purpose
-------
Produces one price per withdrawal period for two valuations of the plan:

- actual   : present-value view. Holds the current price across the horizon
             unless an explicit series is supplied.
- projected: what-if view. Linear path from the current price (period 0) to
             the projected price (last period) unless an explicit series is
             supplied.

A price of 0 means "value unknown", never "free": payouts valued at an
unknown price contribute 0 to currency totals, and price-driven strategies
treat the period as carrying no signal.

The actual series is also the price path consumed by the price-driven
strategies (trend-following, milestone, hybrid, target-currency).

Both series are built once per request and returned as read-only arrays.

Example
-------
>>> series = build_price_series(40_000, 50_000, periods=3)
>>> series.actual.tolist()
[40000.0, 40000.0, 40000.0]
>>> series.projected.tolist()
[40000.0, 45000.0, 50000.0]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .constants import VARIATION_MAX, VARIATION_MIN
from .types import PriceSeriesDict
from .utils import clamp, finite_or, fit_length

__all__ = [
    "PriceSeries",
    "interpolate_prices",
    "fit_price_series",
    "build_price_series",
    "projected_price_from_variation",
]


def _price_or_zero(value: Optional[float]) -> float:
    price = finite_or(value, 0.0)
    return price if price > 0 else 0.0


def _freeze(values: np.ndarray) -> np.ndarray:
    values = np.asarray(values, dtype=float)
    values.setflags(write=False)
    return values


# ---------------------------------------------------------------------------
# Series container
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class PriceSeries:
    """
    Per-period prices for both valuations of a plan.

    Parameters
    ----------
    actual : np.ndarray
        Prices used for present-value valuation and strategy decisions.
    projected : np.ndarray
        Prices used for the what-if valuation.
    """
    actual: np.ndarray
    projected: np.ndarray

    def __len__(self) -> int:
        return int(self.actual.shape[0])

    def to_dict(self) -> PriceSeriesDict:
        return {
            "actual": self.actual.tolist(),
            "projected": self.projected.tolist(),
        }


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def interpolate_prices(start: Optional[float], end: Optional[float], periods: int) -> np.ndarray:
    """
    Linear path from *start* (index 0) to *end* (index periods-1).

    A single-period path holds the end value. Missing or non-positive prices
    are read as 0.

    Examples
    --------
    >>> interpolate_prices(100, 200, 5).tolist()
    [100.0, 125.0, 150.0, 175.0, 200.0]
    >>> interpolate_prices(100, 200, 1).tolist()
    [200.0]
    """
    periods = max(0, int(periods))
    if periods == 0:
        return np.zeros(0, dtype=float)
    start_price = _price_or_zero(start)
    end_price = _price_or_zero(end)
    if periods == 1:
        return np.array([end_price], dtype=float)
    return np.linspace(start_price, end_price, periods, dtype=float)


def fit_price_series(
    values: Sequence[float],
    periods: int,
    fallback: Optional[float] = None,
) -> np.ndarray:
    """Truncate/pad an explicit series to *periods* entries (see ``utils.fit_length``)."""
    return fit_length(values, periods, fill=_price_or_zero(fallback))


def build_price_series(
    current_price: Optional[float],
    projected_price: Optional[float],
    periods: int,
    *,
    actual_series: Optional[Sequence[float]] = None,
    projected_series: Optional[Sequence[float]] = None,
) -> PriceSeries:
    """
    Build the actual and projected price series for a plan.

    Parameters
    ----------
    current_price : float, optional
        Spot price today. Missing → 0 (unknown).
    projected_price : float, optional
        Hypothetical price at the target date. Missing → the projected series
        is all zeros unless an explicit one is supplied.
    periods : int
        Number of withdrawal periods (series length).
    actual_series, projected_series : sequence of float, optional
        Caller-supplied paths. Fitted to *periods* entries, padding with the
        last value (or the matching scalar price when empty).

    Returns
    -------
    PriceSeries
        Two read-only arrays of length *periods*.
    """
    current = _price_or_zero(current_price)
    projected = _price_or_zero(projected_price)

    if actual_series is not None:
        actual = fit_price_series(actual_series, periods, fallback=current)
    else:
        actual = interpolate_prices(current, current, periods)

    if projected_series is not None:
        scenario = fit_price_series(projected_series, periods, fallback=projected)
    elif projected <= 0:
        scenario = np.zeros(max(0, int(periods)), dtype=float)
    else:
        scenario = interpolate_prices(current if current > 0 else projected, projected, periods)

    return PriceSeries(actual=_freeze(actual), projected=_freeze(scenario))


def projected_price_from_variation(current_price: Optional[float], variation_percent: Optional[float]) -> float:
    """
    Projected price implied by a percentage move of the current price.

    The variation is clamped to [VARIATION_MIN, VARIATION_MAX]. Returns 0 when
    the current price is unknown.

    Examples
    --------
    >>> projected_price_from_variation(40_000, 25)
    50000.0
    >>> projected_price_from_variation(40_000, 500)
    64000.0
    """
    current = _price_or_zero(current_price)
    if current <= 0:
        return 0.0
    variation = clamp(finite_or(variation_percent, 0.0), VARIATION_MIN, VARIATION_MAX)
    return current * (1.0 + variation / 100.0)
