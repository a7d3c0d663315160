"""
Type definitions for HodlPlan.

Purpose
-------
Provides TypedDict definitions for the dictionary shapes produced by
``to_dict()`` methods and consumed by serialization and the CLI. Using
TypedDicts documents the expected structures and enables IDE completion.

Usage
-----
>>> from hodlplan.types import PlanResultDict
>>> data: PlanResultDict = result.to_dict()
>>> data["totals"]["quantity"]

Type Definitions
----------------
AmountsDict
    Quantity with actual/projected values: {"quantity", "actual_value", "projected_value"}

WithdrawalEventDict
    One scheduled payout, date as ISO string

PriceSeriesDict
    Per-period prices: {"actual", "projected"}

PlanResultDict
    Full plan output
"""

from typing import List, Optional
from typing_extensions import TypedDict

__all__ = [
    "AmountsDict",
    "WithdrawalEventDict",
    "PriceSeriesDict",
    "PlanResultDict",
]


class AmountsDict(TypedDict):
    """
    Quantity and its currency valuations.

    Attributes
    ----------
    quantity : float
        Asset units.
    actual_value : float
        Value at the actual price series.
    projected_value : float
        Value at the projected price series.
    """

    quantity: float
    actual_value: float
    projected_value: float


class WithdrawalEventDict(TypedDict):
    """Serialized WithdrawalEvent."""

    index: int
    quantity: float
    actual_value: float
    projected_value: float
    remaining_quantity: float
    date: str
    label: str


class PriceSeriesDict(TypedDict):
    actual: List[float]
    projected: List[float]


class PlanResultDict(TypedDict):
    """
    Serialized PlanResult.

    Notes
    -----
    ``first_event`` is None for an empty schedule and
    ``monthly_target_coverage`` is None when no monthly target was given.
    """

    withdrawable: float
    periods: int
    cadence: str
    strategy: str
    is_valid: bool
    reference_instant: str
    target_date: Optional[str]
    schedule: List[WithdrawalEventDict]
    raw_withdrawals: List[float]
    price_series: PriceSeriesDict
    totals: AmountsDict
    per_period_average: AmountsDict
    monthly_normalized_average: AmountsDict
    first_event: Optional[WithdrawalEventDict]
    monthly_target_coverage: Optional[float]
