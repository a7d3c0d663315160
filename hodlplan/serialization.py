"""
Serialization module for HodlPlan requests and results.

Purpose
-------
Provides JSON serialization and deserialization of withdrawal plan requests
and results, enabling saved scenarios, sharing, and reproducible runs.

Supports:
- WithdrawPlanRequest ↔ dict / JSON file (validated with PlanRequestConfig)
- PlanResult → dict / JSON file

Design Principles
-----------------
- Type-safe: Uses Pydantic configs for validation of incoming files
- Human-readable: Indented JSON, ISO-8601 dates
- Reproducible: The reference instant is stored with the request
- Versioned: Every document carries ``schema_version``; a mismatch warns

Example
-------
>>> from pathlib import Path
>>> from hodlplan.serialization import load_request, save_result
>>> from hodlplan.plan import compute_withdraw_plan
>>>
>>> request = load_request(Path("plan.json"))
>>> result = compute_withdraw_plan(request)
>>> save_result(result, Path("results/plan_result.json"))
"""

from __future__ import annotations
from typing import Dict, Any, Optional, TYPE_CHECKING
from pathlib import Path
import json
import warnings

from pydantic import ValidationError as PydanticValidationError

from .config import GlobalConstraintsConfig, PlanRequestConfig
from .constants import SCHEMA_VERSION
from .exceptions import ConfigurationError
from .periods import normalize_cadence, to_datetime
from .plan import WithdrawPlanRequest
from .prices import projected_price_from_variation
from .strategies import ensure_strategy_id, sanitize_strategy_config
from .utils import finite_or, parse_nullable_number

if TYPE_CHECKING:
    from .plan import PlanResult

__all__ = [
    "SCHEMA_VERSION",
    "request_from_config",
    "request_from_dict",
    "request_to_dict",
    "result_to_dict",
    "save_request",
    "load_request",
    "save_result",
    "load_result",
]


def _check_schema_version(data: Dict[str, Any], source: str) -> None:
    schema_version = data.get("schema_version", "0.0.0")
    if schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"{source} schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )


def _positive_or_none(value: Any) -> Optional[float]:
    parsed = parse_nullable_number(value)
    return parsed if parsed is not None and parsed > 0 else None


# ---------------------------------------------------------------------------
# Request Serialization
# ---------------------------------------------------------------------------

def request_from_config(config: PlanRequestConfig) -> WithdrawPlanRequest:
    """
    Build a WithdrawPlanRequest from a validated PlanRequestConfig.

    When ``projected_price`` is absent and ``price_variation_percent`` is
    given, the projected price is derived from the current price.
    """
    projected = config.projected_price
    if projected is None and config.price_variation_percent is not None:
        projected = projected_price_from_variation(
            config.current_price, config.price_variation_percent
        ) or None

    return WithdrawPlanRequest(
        wallet_quantity=config.wallet_quantity,
        protected_quantity=config.protected_quantity,
        cadence=config.cadence,
        target_date=config.target_date,
        current_price=config.current_price,
        projected_price=projected,
        strategy=config.strategy,
        strategy_config=config.strategy_config,
        constraints=config.constraints.model_dump(),
        actual_price_series=config.actual_price_series,
        projected_price_series=config.projected_price_series,
        reference_instant=config.reference_instant,
        monthly_target=config.monthly_target,
    )


def request_from_dict(data: Dict[str, Any]) -> WithdrawPlanRequest:
    """
    Create a WithdrawPlanRequest from its dictionary representation.

    Parameters
    ----------
    data : dict
        Request fields (see PlanRequestConfig). ``schema_version`` is
        accepted and ignored.

    Returns
    -------
    WithdrawPlanRequest

    Raises
    ------
    ConfigurationError
        If the data fails validation.
    """
    payload = {k: v for k, v in data.items() if k != "schema_version"}
    try:
        config = PlanRequestConfig.model_validate(payload)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid plan request: {e}") from e
    return request_from_config(config)


def request_to_dict(request: WithdrawPlanRequest) -> Dict[str, Any]:
    """
    Convert a WithdrawPlanRequest to a dictionary accepted by request_from_dict.

    Loose values are normalized on the way out (unknown strategy → uniform,
    non-positive prices dropped, fee clamped to [0, 100]).
    """
    strategy = ensure_strategy_id(request.strategy)
    strategy_config = sanitize_strategy_config(strategy, request.strategy_config)
    constraints = request.resolved_constraints()
    target = to_datetime(request.target_date)
    reference = to_datetime(request.reference_instant)

    data: Dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "wallet_quantity": max(0.0, finite_or(request.wallet_quantity, 0.0)),
        "protected_quantity": max(0.0, finite_or(request.protected_quantity, 0.0)),
        "cadence": normalize_cadence(request.cadence),
        "target_date": target.date().isoformat() if target else None,
        "current_price": _positive_or_none(request.current_price),
        "projected_price": _positive_or_none(request.projected_price),
        "strategy_config": strategy_config.model_dump(mode="json"),
        "constraints": GlobalConstraintsConfig(
            fee_percent=min(100.0, max(0.0, finite_or(constraints.fee_percent, 0.0))),
            min_per_period=_positive_or_none(constraints.min_per_period),
            max_per_period=_positive_or_none(constraints.max_per_period),
        ).model_dump(),
        "reference_instant": reference.isoformat() if reference else None,
    }
    if request.actual_price_series is not None:
        data["actual_price_series"] = [float(p) for p in request.actual_price_series]
    if request.projected_price_series is not None:
        data["projected_price_series"] = [float(p) for p in request.projected_price_series]
    if request.monthly_target is not None:
        data["monthly_target"] = max(0.0, finite_or(request.monthly_target, 0.0))
    return data


def save_request(request: WithdrawPlanRequest, path: Path) -> None:
    """
    Save a plan request to a JSON file.

    Examples
    --------
    >>> save_request(request, Path("scenarios/base.json"))
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(request_to_dict(request), f, indent=2)


def load_request(path: Path) -> WithdrawPlanRequest:
    """
    Load a plan request from a JSON file.

    Raises
    ------
    ConfigurationError
        If the file is not valid JSON or fails validation.

    Warns
    -----
    UserWarning
        If the file's schema version differs from SCHEMA_VERSION.
    """
    path = Path(path)
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")

    _check_schema_version(data, "Request")
    try:
        return request_from_dict(data)
    except ConfigurationError as e:
        raise ConfigurationError(f"{path}: {e}") from e


# ---------------------------------------------------------------------------
# Result Serialization
# ---------------------------------------------------------------------------

def result_to_dict(result: PlanResult) -> Dict[str, Any]:
    """Dictionary representation of a PlanResult, tagged with the schema version."""
    return {"schema_version": SCHEMA_VERSION, **result.to_dict()}


def save_result(result: PlanResult, path: Path) -> None:
    """Save a PlanResult to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(result_to_dict(result), f, indent=2)


def load_result(path: Path) -> Dict[str, Any]:
    """
    Load a saved PlanResult as a dictionary.

    Results are read back as plain data; recompute from the request to get a
    PlanResult object.
    """
    with open(Path(path), "r") as f:
        data = json.load(f)
    _check_schema_version(data, "Result")
    return data
