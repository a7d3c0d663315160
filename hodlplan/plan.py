"""
Withdrawal plan assembly for HodlPlan.

Purpose
-------
Entry point of the computation engine. Turns a ``WithdrawPlanRequest`` into a
``PlanResult``: withdrawable quantity, period count, price series, the raw
payout sequence of the selected strategy, the dated schedule of withdrawal
events with their currency valuations, and rolled-up totals and averages.

Pipeline
--------
    target date + cadence → periods_until
    prices                → build_price_series (actual, projected)
    strategy + config     → resolve_strategy_params
    params                → compute_withdrawals (raw payouts)
    raw payouts           → schedule (dated events) → totals / averages

Key components
--------------
- WithdrawPlanRequest:
    Lenient, immutable input record. Any field may be missing or malformed.
- WithdrawalEvent:
    One scheduled payout with valuations and the balance left afterwards.
- PlanAmounts:
    (quantity, actual_value, projected_value) triple used for totals and
    averages.
- PlanResult:
    Immutable output. ``is_valid`` is False when no plan is possible.

Design principles
-----------------
- Pure: no I/O; "now" is injectable through ``reference_instant``
- Never raises for bad input: invalidity is data (``is_valid=False``)
- Invariant: sum of scheduled quantities <= withdrawable

Example
-------
>>> from datetime import date
>>> request = WithdrawPlanRequest(
...     wallet_quantity=1.5,
...     protected_quantity=0.5,
...     cadence="monthly",
...     target_date=date(2024, 7, 1),
...     current_price=40_000,
...     projected_price=50_000,
...     reference_instant=date(2024, 1, 1),
... )
>>> result = compute_withdraw_plan(request)
>>> result.periods, result.withdrawable
(6, 1.0)
>>> round(result.per_period_average.quantity, 4)
0.1667
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .engine import compute_withdrawals
from .periods import (
    DateLike,
    monthly_factor,
    normalize_cadence,
    payout_date,
    periods_until,
    to_datetime,
)
from .prices import PriceSeries, build_price_series
from .strategies import (
    ConfigInput,
    GlobalConstraints,
    ensure_strategy_id,
    resolve_strategy_params,
)
from .types import AmountsDict, PlanResultDict, WithdrawalEventDict
from .utils import clamp, finite_or

logger = logging.getLogger(__name__)

__all__ = [
    "WithdrawPlanRequest",
    "WithdrawalEvent",
    "PlanAmounts",
    "PlanResult",
    "compute_withdraw_plan",
    "periods_until",
]


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WithdrawPlanRequest:
    """
    Input of ``compute_withdraw_plan``.

    Parameters
    ----------
    wallet_quantity : float
        Asset quantity held. Negative or non-finite → 0.
    protected_quantity : float
        Quantity never withdrawn, clamped to [0, wallet_quantity].
    cadence : {'weekly', 'monthly'}
        Withdrawal cadence (unknown → monthly).
    target_date : date, datetime or str, optional
        Final date of the plan. Absent/unparsable → no periods.
    current_price : float, optional
        Spot price; drives the actual valuation.
    projected_price : float, optional
        What-if price at the target date; drives the projected valuation.
    strategy : str
        One of the eight strategy identifiers (unknown → 'uniform').
    strategy_config : config model or mapping, optional
        Strategy parameters; absent fields take the strategy defaults.
    constraints : GlobalConstraints or mapping, optional
        Fee percent and per-period bounds.
    actual_price_series, projected_price_series : sequence of float, optional
        Explicit per-period prices.
    reference_instant : date, datetime or str, optional
        "Now". Defaults to the current time when the plan is computed.
    monthly_target : float, optional
        Currency amount per month used for ``monthly_target_coverage``.
    """
    wallet_quantity: float = 0.0
    protected_quantity: float = 0.0
    cadence: str = "monthly"
    target_date: DateLike = None
    current_price: Optional[float] = None
    projected_price: Optional[float] = None
    strategy: str = "uniform"
    strategy_config: ConfigInput = None
    constraints: Union[GlobalConstraints, Mapping[str, Any], None] = None
    actual_price_series: Optional[Sequence[float]] = None
    projected_price_series: Optional[Sequence[float]] = None
    reference_instant: DateLike = None
    monthly_target: Optional[float] = None

    @property
    def withdrawable(self) -> float:
        """max(0, wallet - clamp(protected, 0, wallet))."""
        wallet = max(0.0, finite_or(self.wallet_quantity, 0.0))
        protected = clamp(finite_or(self.protected_quantity, 0.0), 0.0, wallet)
        return max(0.0, wallet - protected)

    def resolved_constraints(self) -> GlobalConstraints:
        if isinstance(self.constraints, GlobalConstraints):
            return self.constraints
        if isinstance(self.constraints, Mapping):
            return GlobalConstraints.from_mapping(self.constraints)
        return GlobalConstraints()


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WithdrawalEvent:
    """
    One scheduled payout.

    ``remaining_quantity`` is the withdrawable quantity minus every scheduled
    quantity up to and including this event.
    """
    index: int
    quantity: float
    actual_value: float
    projected_value: float
    remaining_quantity: float
    date: date
    label: str

    def to_dict(self) -> WithdrawalEventDict:
        return {
            "index": self.index,
            "quantity": self.quantity,
            "actual_value": self.actual_value,
            "projected_value": self.projected_value,
            "remaining_quantity": self.remaining_quantity,
            "date": self.date.isoformat(),
            "label": self.label,
        }

    def __repr__(self) -> str:
        return (
            f"WithdrawalEvent({self.label}, {self.date.isoformat()}, "
            f"quantity={self.quantity:.8f}, remaining={self.remaining_quantity:.8f})"
        )


@dataclass(frozen=True)
class PlanAmounts:
    """Quantity with its actual and projected currency values."""
    quantity: float = 0.0
    actual_value: float = 0.0
    projected_value: float = 0.0

    def scaled(self, factor: float) -> "PlanAmounts":
        return PlanAmounts(
            quantity=self.quantity * factor,
            actual_value=self.actual_value * factor,
            projected_value=self.projected_value * factor,
        )

    def to_dict(self) -> AmountsDict:
        return {
            "quantity": self.quantity,
            "actual_value": self.actual_value,
            "projected_value": self.projected_value,
        }


@dataclass(frozen=True, eq=False)
class PlanResult:
    """
    Output of ``compute_withdraw_plan``.

    Parameters
    ----------
    withdrawable : float
        Quantity available for withdrawal.
    periods : int
        Number of withdrawal periods (0 → no plan).
    cadence : str
        Normalized cadence.
    strategy : str
        Resolved strategy identifier.
    schedule : tuple of WithdrawalEvent
        Dated events with positive quantity, ordered by index.
    raw_withdrawals : np.ndarray
        Raw payout per period (length ``periods``), zeros included.
    price_series : PriceSeries
        Actual and projected prices per period.
    totals, per_period_average, monthly_normalized_average : PlanAmounts
        Aggregates over the schedule.
    is_valid : bool
        periods > 0, withdrawable > 0 and something is withdrawn.
    reference_instant : datetime
        "Now" used for the computation.
    target_date : datetime, optional
        Parsed target date.
    monthly_target_coverage : float, optional
        Monthly-normalized actual value divided by the monthly target.
    """
    withdrawable: float
    periods: int
    cadence: str
    strategy: str
    schedule: Tuple[WithdrawalEvent, ...]
    raw_withdrawals: np.ndarray
    price_series: PriceSeries
    totals: PlanAmounts
    per_period_average: PlanAmounts
    monthly_normalized_average: PlanAmounts
    is_valid: bool
    reference_instant: datetime
    target_date: Optional[datetime] = None
    monthly_target_coverage: Optional[float] = None

    @property
    def first_event(self) -> Optional[WithdrawalEvent]:
        return self.schedule[0] if self.schedule else None

    def to_frame(self) -> pd.DataFrame:
        """Schedule as a DataFrame indexed by payout date."""
        columns = [
            "index", "label", "quantity", "actual_value",
            "projected_value", "remaining_quantity",
        ]
        if not self.schedule:
            return pd.DataFrame(columns=columns, index=pd.DatetimeIndex([], name="date"))
        frame = pd.DataFrame(
            [
                {
                    "date": pd.Timestamp(event.date),
                    "index": event.index,
                    "label": event.label,
                    "quantity": event.quantity,
                    "actual_value": event.actual_value,
                    "projected_value": event.projected_value,
                    "remaining_quantity": event.remaining_quantity,
                }
                for event in self.schedule
            ]
        )
        return frame.set_index("date")[columns]

    def to_dict(self) -> PlanResultDict:
        first = self.first_event
        return {
            "withdrawable": self.withdrawable,
            "periods": self.periods,
            "cadence": self.cadence,
            "strategy": self.strategy,
            "is_valid": self.is_valid,
            "reference_instant": self.reference_instant.isoformat(),
            "target_date": self.target_date.isoformat() if self.target_date else None,
            "schedule": [event.to_dict() for event in self.schedule],
            "raw_withdrawals": self.raw_withdrawals.tolist(),
            "price_series": self.price_series.to_dict(),
            "totals": self.totals.to_dict(),
            "per_period_average": self.per_period_average.to_dict(),
            "monthly_normalized_average": self.monthly_normalized_average.to_dict(),
            "first_event": first.to_dict() if first else None,
            "monthly_target_coverage": self.monthly_target_coverage,
        }

    def __repr__(self) -> str:
        return (
            f"PlanResult(strategy={self.strategy!r}, periods={self.periods}, "
            f"withdrawable={self.withdrawable:.8f}, events={len(self.schedule)}, "
            f"total={self.totals.quantity:.8f}, valid={self.is_valid})"
        )


# ---------------------------------------------------------------------------
# Schedule assembly
# ---------------------------------------------------------------------------

def _label(index: int, cadence: str) -> str:
    unit = "Week" if cadence == "weekly" else "Month"
    return f"{unit} {index + 1}"


def _build_schedule(
    raw: np.ndarray,
    prices: PriceSeries,
    cadence: str,
    reference: datetime,
    target: Optional[datetime],
    withdrawable: float,
) -> Tuple[WithdrawalEvent, ...]:
    events = []
    cumulative = 0.0
    for t, quantity in enumerate(raw.tolist()):
        if quantity <= 0:
            continue
        when = payout_date(reference, t, cadence)
        if when is None or (target is not None and when.date() > target.date()):
            logger.debug("Payout %d falls after the target date; schedule stops", t)
            break
        cumulative += quantity
        events.append(
            WithdrawalEvent(
                index=t,
                quantity=quantity,
                actual_value=quantity * float(prices.actual[t]),
                projected_value=quantity * float(prices.projected[t]),
                remaining_quantity=max(0.0, withdrawable - cumulative),
                date=when.date(),
                label=_label(t, cadence),
            )
        )
    return tuple(events)


def _sum_amounts(schedule: Sequence[WithdrawalEvent]) -> PlanAmounts:
    return PlanAmounts(
        quantity=float(sum(e.quantity for e in schedule)),
        actual_value=float(sum(e.actual_value for e in schedule)),
        projected_value=float(sum(e.projected_value for e in schedule)),
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def compute_withdraw_plan(request: WithdrawPlanRequest) -> PlanResult:
    """
    Compute the withdrawal plan described by *request*.

    Parameters
    ----------
    request : WithdrawPlanRequest

    Returns
    -------
    PlanResult
        A fresh result. When the period count or the withdrawable quantity is
        0 the result is invalid, with an empty schedule and zero totals, and
        no strategy math runs.

    Examples
    --------
    >>> result = compute_withdraw_plan(WithdrawPlanRequest(
    ...     wallet_quantity=1.0, target_date="not-a-date"
    ... ))
    >>> result.periods, result.is_valid, result.schedule
    (0, False, ())
    """
    reference = to_datetime(request.reference_instant) or datetime.now()
    target = to_datetime(request.target_date)
    cadence = normalize_cadence(request.cadence)
    strategy = ensure_strategy_id(request.strategy)
    withdrawable = request.withdrawable
    periods = periods_until(target, cadence, reference)

    prices = build_price_series(
        request.current_price,
        request.projected_price,
        periods,
        actual_series=request.actual_price_series,
        projected_series=request.projected_price_series,
    )

    if periods <= 0 or withdrawable <= 0:
        logger.debug(
            "No plan possible: periods=%d withdrawable=%.8f", periods, withdrawable
        )
        raw = np.zeros(periods, dtype=float)
        raw.setflags(write=False)
        return PlanResult(
            withdrawable=withdrawable,
            periods=periods,
            cadence=cadence,
            strategy=strategy,
            schedule=(),
            raw_withdrawals=raw,
            price_series=prices,
            totals=PlanAmounts(),
            per_period_average=PlanAmounts(),
            monthly_normalized_average=PlanAmounts(),
            is_valid=False,
            reference_instant=reference,
            target_date=target,
        )

    params = resolve_strategy_params(
        strategy,
        request.strategy_config,
        request.resolved_constraints(),
        periods=periods,
        total=withdrawable,
        prices=prices.actual,
        cadence=cadence,
    )
    raw = compute_withdrawals(params)
    raw.setflags(write=False)

    schedule = _build_schedule(raw, prices, cadence, reference, target, withdrawable)
    totals = _sum_amounts(schedule)
    per_period = totals.scaled(1.0 / periods)
    monthly = per_period.scaled(monthly_factor(cadence))

    monthly_target = finite_or(request.monthly_target, 0.0)
    coverage = monthly.actual_value / monthly_target if monthly_target > 0 else None

    result = PlanResult(
        withdrawable=withdrawable,
        periods=periods,
        cadence=cadence,
        strategy=strategy,
        schedule=schedule,
        raw_withdrawals=raw,
        price_series=prices,
        totals=totals,
        per_period_average=per_period,
        monthly_normalized_average=monthly,
        is_valid=totals.quantity > 0,
        reference_instant=reference,
        target_date=target,
        monthly_target_coverage=coverage,
    )
    logger.debug("Computed %r", result)
    return result
