"""
HodlPlan - Withdrawal planner for a volatile asset

Plans periodic withdrawals of a fixed quantity of a volatile asset from
"now" until a target date, under one of eight payout strategies, and values
each payout at the current price and at a projected price.

Modules
-------
- periods       : Period counting and payout dates
- prices        : Actual and projected price series
- strategies    : Strategy catalog and parameter resolution
- engine        : Per-period payout computation
- plan          : Request → result assembly (schedule, totals, averages)
- config        : Pydantic request models and environment settings
- serialization : JSON load/save of requests and results
- cli           : Command-line interface
"""

from .periods import periods_until
from .plan import (
    PlanAmounts,
    PlanResult,
    WithdrawalEvent,
    WithdrawPlanRequest,
    compute_withdraw_plan,
)
from .strategies import (
    STRATEGY_DEFINITIONS,
    GlobalConstraints,
    get_strategy_definition,
    sanitize_strategy_config,
)
from .exceptions import ConfigurationError, HodlPlanError, TimeIndexError, ValidationError
from . import utils

__version__ = "0.1.0"

__all__ = [
    "compute_withdraw_plan",
    "periods_until",
    "WithdrawPlanRequest",
    "WithdrawalEvent",
    "PlanAmounts",
    "PlanResult",
    "GlobalConstraints",
    "STRATEGY_DEFINITIONS",
    "get_strategy_definition",
    "sanitize_strategy_config",
    "HodlPlanError",
    "ConfigurationError",
    "ValidationError",
    "TimeIndexError",
    "utils",
]
