"""
Configuration management module for HodlPlan.

Purpose
-------
Centralized configuration using Pydantic models for type-safe parameter
management, validation, and serialization of withdrawal plan requests.
Supports environment variables for application settings.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and validates ranges
- Immutable: Frozen models prevent accidental mutation
- Tagged union: one config model per strategy, discriminated by ``strategy``,
  so a milestone config can never be paired with a growing strategy
- Nullable: every strategy field is optional; absent values fall back to the
  strategy defaults during parameter resolution (``hodlplan.strategies``)
- Environment-aware: ``AppSettings`` reads ``HODLPLAN_*`` variables and .env

Example
-------
>>> from datetime import date
>>> from hodlplan.config import MilestoneConfig, PlanRequestConfig
>>> config = PlanRequestConfig(
...     wallet_quantity=1.5,
...     protected_quantity=0.5,
...     target_date=date(2024, 7, 1),
...     current_price=40_000,
...     strategy_config=MilestoneConfig(milestone_percent=5),
... )
>>> config.strategy_config.strategy
'milestone'
>>>
>>> # Serialize to dict/JSON
>>> json_str = config.model_dump_json()
>>> loaded = PlanRequestConfig.model_validate_json(json_str)
"""

from __future__ import annotations
from typing import Optional, Literal, List, Union
import datetime

from pydantic import BaseModel, Field, field_validator, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Annotated

from .constants import VARIATION_MAX, VARIATION_MIN

__all__ = [
    "UniformConfig",
    "FixedPercentConfig",
    "GrowingConfig",
    "DecliningConfig",
    "TrendFollowingConfig",
    "MilestoneConfig",
    "HybridConfig",
    "TargetCurrencyConfig",
    "StrategyConfig",
    "STRATEGY_CONFIG_TYPES",
    "GlobalConstraintsConfig",
    "PlanRequestConfig",
    "AppSettings",
]

StrategyName = Literal[
    "uniform",
    "fixed-percent",
    "growing",
    "declining",
    "trend-following",
    "milestone",
    "hybrid",
    "target-currency",
]


# ---------------------------------------------------------------------------
# Strategy Configurations
# ---------------------------------------------------------------------------

class UniformConfig(BaseModel):
    """Equal quantity every period. No parameters."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy: Literal["uniform"] = "uniform"


class FixedPercentConfig(BaseModel):
    """
    Withdraw a fixed share of the remaining balance each period.

    Attributes
    ----------
    annual_percent : float, optional
        Yearly share (%), spread over 52 or 12 periods per year.
    period_percent : float, optional
        Per-period share (%). Takes precedence over annual_percent.

    Examples
    --------
    >>> FixedPercentConfig(annual_percent=12).period_percent is None
    True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy: Literal["fixed-percent"] = "fixed-percent"
    annual_percent: Optional[float] = Field(
        default=None,
        description="Share of remaining balance withdrawn per year (%)"
    )
    period_percent: Optional[float] = Field(
        default=None,
        description="Share of remaining balance withdrawn per period (%)"
    )


class GrowingConfig(BaseModel):
    """Payout grows geometrically by growth_percent each period."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy: Literal["growing"] = "growing"
    growth_percent: Optional[float] = Field(
        default=None,
        description="Per-period payout growth (%)"
    )


class DecliningConfig(BaseModel):
    """Payout shrinks geometrically by decay_percent each period."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy: Literal["declining"] = "declining"
    decay_percent: Optional[float] = Field(
        default=None,
        description="Per-period payout decay (%)"
    )


class TrendFollowingConfig(BaseModel):
    """
    Withdraw more when the price trades above its moving average.

    Attributes
    ----------
    rate_up_percent : float, optional
        Share of remaining balance when price > moving average (%).
    rate_down_percent : float, optional
        Share of remaining balance when price <= moving average (%).
    ma_window : float, optional
        Moving-average window in periods (floored, at least 1).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy: Literal["trend-following"] = "trend-following"
    rate_up_percent: Optional[float] = Field(
        default=None,
        description="Share of remaining balance above trend (%)"
    )
    rate_down_percent: Optional[float] = Field(
        default=None,
        description="Share of remaining balance at/below trend (%)"
    )
    ma_window: Optional[float] = Field(
        default=None,
        description="Moving-average window (periods)"
    )


class MilestoneConfig(BaseModel):
    """
    Sell only after the price rises milestone_percent since the last sale.

    Attributes
    ----------
    milestone_percent : float, optional
        Price rise that triggers a payout (%).
    portion_mode : {'percent', 'fixed'}
        'percent': pay portion_value % of the remaining balance.
        'fixed'  : pay portion_value units of the asset.
    portion_value : float, optional
        Payout size, interpreted according to portion_mode.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy: Literal["milestone"] = "milestone"
    milestone_percent: Optional[float] = Field(
        default=None,
        description="Price rise since last payout that triggers a sale (%)"
    )
    portion_mode: Literal["percent", "fixed"] = Field(
        default="percent",
        description="Payout mode: percent of remaining or fixed quantity"
    )
    portion_value: Optional[float] = Field(
        default=None,
        description="Payout size (percent or quantity)"
    )


class HybridConfig(BaseModel):
    """Guaranteed base quantity plus a momentum-scaled top-up."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy: Literal["hybrid"] = "hybrid"
    base_quantity: Optional[float] = Field(
        default=None,
        description="Guaranteed quantity per period"
    )
    beta: Optional[float] = Field(
        default=None,
        description="Momentum factor applied to positive price moves"
    )


class TargetCurrencyConfig(BaseModel):
    """Aim for a stable currency amount each period."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    strategy: Literal["target-currency"] = "target-currency"
    target_amount: Optional[float] = Field(
        default=None,
        description="Currency amount targeted per period"
    )


StrategyConfig = Annotated[
    Union[
        UniformConfig,
        FixedPercentConfig,
        GrowingConfig,
        DecliningConfig,
        TrendFollowingConfig,
        MilestoneConfig,
        HybridConfig,
        TargetCurrencyConfig,
    ],
    Field(discriminator="strategy"),
]

STRATEGY_CONFIG_TYPES = {
    "uniform": UniformConfig,
    "fixed-percent": FixedPercentConfig,
    "growing": GrowingConfig,
    "declining": DecliningConfig,
    "trend-following": TrendFollowingConfig,
    "milestone": MilestoneConfig,
    "hybrid": HybridConfig,
    "target-currency": TargetCurrencyConfig,
}
"""Strategy identifier → configuration model."""


# ---------------------------------------------------------------------------
# Global Constraints
# ---------------------------------------------------------------------------

class GlobalConstraintsConfig(BaseModel):
    """
    Constraints applied to every strategy.

    Attributes
    ----------
    fee_percent : float
        Proportional fee deducted from each payout (0-100).
    min_per_period : float, optional
        Floor on each gross payout (asset units).
    max_per_period : float, optional
        Ceiling on each gross payout (asset units).

    Examples
    --------
    >>> GlobalConstraintsConfig(fee_percent=1.5, max_per_period=0.2).min_per_period is None
    True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    fee_percent: float = Field(
        default=0.0,
        ge=0,
        le=100,
        description="Proportional fee on each payout (%)"
    )
    min_per_period: Optional[float] = Field(
        default=None,
        ge=0,
        description="Minimum gross payout per period"
    )
    max_per_period: Optional[float] = Field(
        default=None,
        ge=0,
        description="Maximum gross payout per period"
    )


# ---------------------------------------------------------------------------
# Plan Request Configuration
# ---------------------------------------------------------------------------

class PlanRequestConfig(BaseModel):
    """
    Validated shape of a withdrawal plan request file.

    Attributes
    ----------
    wallet_quantity : float
        Asset quantity held.
    protected_quantity : float
        Quantity that must never be withdrawn.
    cadence : {'weekly', 'monthly'}
        Withdrawal cadence.
    target_date : datetime.date, optional
        Last date of the plan. A request without one is valid and yields an
        empty plan.
    current_price : float, optional
        Spot price used for the actual valuation.
    projected_price : float, optional
        Hypothetical price at the target date.
    price_variation_percent : float, optional
        Alternative to projected_price: percentage move of the current price
        (-50 to 60). Ignored when projected_price is given.
    strategy_config : StrategyConfig
        Tagged strategy configuration (defaults to uniform).
    constraints : GlobalConstraintsConfig
        Fee and per-period bounds.
    actual_price_series, projected_price_series : list of float, optional
        Explicit per-period price paths.
    reference_instant : datetime.datetime, optional
        "Now". Defaults to the time the plan is computed.
    monthly_target : float, optional
        Currency amount per month the plan is measured against.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    wallet_quantity: float = Field(
        ge=0,
        description="Asset quantity held"
    )
    protected_quantity: float = Field(
        default=0.0,
        ge=0,
        description="Quantity that is never withdrawn"
    )
    cadence: Literal["weekly", "monthly"] = Field(
        default="monthly",
        description="Withdrawal cadence"
    )
    target_date: Optional[datetime.date] = Field(
        default=None,
        description="Final date of the plan (absent: no periods)"
    )
    current_price: Optional[float] = Field(
        default=None,
        gt=0,
        description="Current price per unit"
    )
    projected_price: Optional[float] = Field(
        default=None,
        gt=0,
        description="Projected price per unit at the target date"
    )
    price_variation_percent: Optional[float] = Field(
        default=None,
        ge=VARIATION_MIN,
        le=VARIATION_MAX,
        description="Projected move of the current price (%)"
    )
    strategy_config: StrategyConfig = Field(
        default_factory=UniformConfig,
        description="Strategy configuration (tagged by 'strategy')"
    )
    constraints: GlobalConstraintsConfig = Field(
        default_factory=GlobalConstraintsConfig,
        description="Fee and per-period bounds"
    )
    actual_price_series: Optional[List[float]] = Field(
        default=None,
        description="Explicit per-period prices for the actual valuation"
    )
    projected_price_series: Optional[List[float]] = Field(
        default=None,
        description="Explicit per-period prices for the projected valuation"
    )
    reference_instant: Optional[datetime.datetime] = Field(
        default=None,
        description="Reference instant ('now')"
    )
    monthly_target: Optional[float] = Field(
        default=None,
        ge=0,
        description="Currency amount per month to compare the plan against"
    )

    @field_validator("actual_price_series", "projected_price_series")
    @classmethod
    def validate_series(cls, v):
        """Reject negative prices in explicit series."""
        if v is not None and any(price < 0 for price in v):
            raise ValueError("price series must not contain negative prices")
        return v

    @property
    def strategy(self) -> str:
        """Strategy identifier carried by strategy_config."""
        return self.strategy_config.strategy


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Supports .env files for local development. Environment variables
    are prefixed with HODLPLAN_ (e.g., HODLPLAN_LOG_LEVEL=DEBUG).

    Attributes
    ----------
    debug : bool
        Enable debug mode (forces DEBUG logging).
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR".
    default_cadence : str
        Cadence used by the CLI when a request omits one.
    default_strategy : str
        Strategy used by the CLI when none is selected.

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.log_level
    'WARNING'

    # With .env file:
    # HODLPLAN_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="HODLPLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )
    default_cadence: Literal["weekly", "monthly"] = Field(
        default="monthly",
        description="Default withdrawal cadence"
    )
    default_strategy: StrategyName = Field(
        default="uniform",
        description="Default payout strategy"
    )

    @property
    def effective_log_level(self) -> str:
        """DEBUG when debug mode is on, otherwise log_level."""
        return "DEBUG" if self.debug else self.log_level
