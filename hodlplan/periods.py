"""
Period calculation for HodlPlan.

Purpose
-------
Converts a target date and a withdrawal cadence into the number of payout
opportunities left between a reference instant ("now") and that date, and
resolves the calendar date of each payout.

Counting rules
--------------
- Target absent, unparsable, or not strictly after the reference → 0 periods.
- weekly : whole weeks between reference and target (floored).
- monthly: (year*12 + month) difference, plus one when the target's
  day-of-month is past the reference's day-of-month.
- A positive difference that counts as zero whole periods still yields one
  period (a near future date leaves one payout opportunity).

Calendar rules
--------------
Payout t (0-indexed) falls 7*(t+1) days after the reference (weekly) or t+1
calendar months after it (monthly). Month arithmetic uses ``pd.DateOffset``,
which clamps to the last day of the resulting month, so Jan 31 + 1 month is
Feb 28/29, never March. A payout that would fall outside the representable
calendar has no date.

All functions are pure; "now" is only read when no reference is passed.

Example
-------
>>> from datetime import date
>>> periods_until(date(2024, 7, 1), "monthly", date(2024, 1, 1))
6
>>> add_months(date(2024, 1, 31), 1)
datetime.date(2024, 2, 29)
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional, Union

import pandas as pd

from .constants import (
    CADENCES,
    DAYS_PER_WEEK,
    DEFAULT_CADENCE,
    MONTHS_PER_YEAR,
    WEEKS_PER_MONTH,
    WEEKS_PER_YEAR,
)

__all__ = [
    "DateLike",
    "normalize_cadence",
    "periods_per_year",
    "monthly_factor",
    "to_datetime",
    "periods_until",
    "add_months",
    "payout_date",
]

DateLike = Union[date, datetime, str, None]


# ---------------------------------------------------------------------------
# Cadence helpers
# ---------------------------------------------------------------------------

def normalize_cadence(cadence: Optional[str]) -> str:
    """Map any cadence to 'weekly' or 'monthly' (unknown values → default)."""
    if isinstance(cadence, str) and cadence.strip().lower() in CADENCES:
        return cadence.strip().lower()
    return DEFAULT_CADENCE


def periods_per_year(cadence: Optional[str]) -> int:
    """Number of payout periods in a year for *cadence* (52 or 12)."""
    return WEEKS_PER_YEAR if normalize_cadence(cadence) == "weekly" else MONTHS_PER_YEAR


def monthly_factor(cadence: Optional[str]) -> float:
    """Multiplier turning a per-period figure into a per-month figure."""
    return WEEKS_PER_MONTH if normalize_cadence(cadence) == "weekly" else 1.0


# ---------------------------------------------------------------------------
# Date parsing
# ---------------------------------------------------------------------------

def _naive_utc(stamp: pd.Timestamp) -> datetime:
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert("UTC").tz_localize(None)
    return stamp.to_pydatetime()


def to_datetime(value: DateLike) -> Optional[datetime]:
    """
    Normalize a date-like value to a naive datetime.

    Parameters
    ----------
    value : date, datetime, str or None
        A ``date`` is read as midnight. Strings are parsed with
        ``pd.to_datetime`` (a trailing ``Z`` marks UTC). Timezone-aware values
        are converted to UTC before the timezone is dropped.

    Returns
    -------
    datetime or None
        None when the value is absent or cannot be parsed.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo is None else _naive_utc(pd.Timestamp(value))
    if isinstance(value, date):
        return datetime.combine(value, time())
    if not isinstance(value, str) or not value.strip():
        return None

    parsed = pd.to_datetime(value.strip(), errors="coerce")
    if pd.isna(parsed):
        return None
    return _naive_utc(parsed)


# ---------------------------------------------------------------------------
# Period counting
# ---------------------------------------------------------------------------

def periods_until(
    target_date: DateLike,
    cadence: Optional[str],
    reference_instant: DateLike = None,
) -> int:
    """
    Count the withdrawal periods between *reference_instant* and *target_date*.

    Parameters
    ----------
    target_date : date, datetime, str or None
        Final date of the plan.
    cadence : {'weekly', 'monthly'}
        Withdrawal cadence. Unknown values count monthly.
    reference_instant : date, datetime, str, optional
        "Now". Defaults to the current local time.

    Returns
    -------
    int
        0 when no plan is possible, otherwise >= 1.

    Examples
    --------
    >>> periods_until("2023-12-01", "monthly", date(2024, 1, 1))
    0
    >>> periods_until("2024-01-02", "weekly", date(2024, 1, 1))
    1
    """
    target = to_datetime(target_date)
    if target is None:
        return 0
    reference = to_datetime(reference_instant)
    if reference is None:
        reference = datetime.now()
    if target <= reference:
        return 0

    if normalize_cadence(cadence) == "weekly":
        count = (target - reference) // timedelta(weeks=1)
    else:
        count = (target.year - reference.year) * 12 + (target.month - reference.month)
        if target.day > reference.day:
            count += 1

    return max(1, int(count))


# ---------------------------------------------------------------------------
# Calendar arithmetic
# ---------------------------------------------------------------------------

def add_months(value: Union[date, datetime], months: int) -> Union[date, datetime]:
    """
    Shift *value* by *months* calendar months, clamping to the month's end.

    Works for both ``date`` and ``datetime`` (time of day is preserved).

    Examples
    --------
    >>> add_months(date(2024, 1, 31), 1)
    datetime.date(2024, 2, 29)
    >>> add_months(date(2023, 11, 30), 3)
    datetime.date(2024, 2, 29)
    """
    shifted = pd.Timestamp(value) + pd.DateOffset(months=int(months))
    if isinstance(value, datetime):
        return shifted.to_pydatetime()
    return shifted.date()


def payout_date(reference: datetime, index: int, cadence: Optional[str]) -> Optional[datetime]:
    """
    Calendar instant of payout *index* (0-indexed) counted from *reference*.

    Returns None when the instant falls outside the representable calendar.
    """
    try:
        if normalize_cadence(cadence) == "weekly":
            return reference + timedelta(days=DAYS_PER_WEEK * (index + 1))
        return add_months(reference, index + 1)
    except (OverflowError, ValueError):
        return None
