"""General utilities for HodlPlan

Contents
--------
- Numeric coercion helpers (finite checks, nullable parsing, clamping)
- Array helpers (fit a sequence to a fixed length)
- Formatting helpers (quantity and currency strings for reports)
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Optional, Sequence

import numpy as np

__all__ = [
    # Numeric coercion
    "is_finite_number",
    "parse_nullable_number",
    "finite_or",
    "clamp",
    # Arrays
    "fit_length",
    # Formatting
    "format_quantity",
    "format_currency",
]


# ---------------------------------------------------------------------------
# Numeric coercion
# ---------------------------------------------------------------------------

def is_finite_number(value: Any) -> bool:
    """True for real numbers (not bools) that are neither NaN nor infinite."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, np.integer, np.floating)):
        return math.isfinite(float(value))
    return False


def parse_nullable_number(value: Any) -> Optional[float]:
    """Parse loose user input ("12", 12, None, "", "abc") into a finite float or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = float(text)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    if is_finite_number(value):
        return float(value)
    return None


def finite_or(value: Any, default: float) -> float:
    """Return *value* as float when finite, otherwise *default*."""
    parsed = parse_nullable_number(value)
    return default if parsed is None else parsed


def clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


# ---------------------------------------------------------------------------
# Array helpers
# ---------------------------------------------------------------------------

def fit_length(values: Sequence[float], length: int, *, fill: float = 0.0) -> np.ndarray:
    """Truncate or pad *values* to exactly *length* entries.

    Padding repeats the last entry; *fill* is used only when *values* is empty.
    Non-finite and negative entries become 0, and anything that is not a
    sequence of values is read as an empty one.
    """
    length = max(0, int(length))
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        values = ()
    cleaned = [finite_or(v, 0.0) for v in list(values)[:length]]
    cleaned = [v if v > 0 else 0.0 for v in cleaned]
    pad_value = cleaned[-1] if cleaned else max(0.0, finite_or(fill, 0.0))
    cleaned.extend([pad_value] * (length - len(cleaned)))
    return np.asarray(cleaned, dtype=float)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_quantity(value: float, decimals: int = 8) -> str:
    """
    Format an asset quantity with a fixed number of decimals.

    Examples
    --------
    >>> format_quantity(0.166666666)
    '0.16666667'
    >>> format_quantity(1, decimals=4)
    '1.0000'
    """
    return f"{value:.{decimals}f}"


def format_currency(value, decimals=2, symbol='€'):
    """
    Format currency values for reports and tables.

    Parameters
    ----------
    value : float
        Amount in currency units.
    decimals : int, default 2
        Number of decimal places to display.
    symbol : str, default '€'
        Currency symbol suffix.

    Examples
    --------
    >>> format_currency(6666.666)
    '6,666.67 €'
    >>> format_currency(600, decimals=0, symbol='$')
    '600 $'
    """
    return f'{value:,.{decimals}f} {symbol}'
