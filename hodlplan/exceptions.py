"""
Custom exceptions for HodlPlan.

Purpose
-------
Provides a unified exception hierarchy for the outer layers of HodlPlan
(configuration loading, serialization, CLI). The computation engine itself
never raises for malformed input: it degrades to neutral results and reports
invalid plans as data (``PlanResult.is_valid``).

Exception Hierarchy
-------------------
HodlPlanError (base)
├── ConfigurationError - Invalid request or configuration file
└── ValidationError - Data validation failures
    └── TimeIndexError - Unparsable dates on an outer surface

Usage
-----
>>> from hodlplan.exceptions import ConfigurationError
>>>
>>> try:
...     request = load_request(Path("plan.json"))
... except HodlPlanError as e:
...     print(f"HodlPlan error: {e}")
"""


class HodlPlanError(Exception):
    """
    Base exception for all HodlPlan errors.

    Examples
    --------
    >>> try:
    ...     load_request(path)
    ... except HodlPlanError as e:
    ...     logger.error("Could not load plan: %s", e)
    """
    pass


class ConfigurationError(HodlPlanError):
    """
    Invalid configuration or request file.

    Raised when a request file cannot be turned into a plan request:
    - File is not valid JSON
    - Field values fail schema validation (e.g., fee_percent > 100)
    - Unknown fields in a strict section

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "Invalid plan request in plan.json: fee_percent must be <= 100"
    ... )
    """
    pass


class ValidationError(HodlPlanError):
    """
    Data validation failures outside the engine.

    Examples
    --------
    >>> raise ValidationError("cadence must be 'weekly' or 'monthly', got 'daily'")
    """
    pass


class TimeIndexError(ValidationError):
    """
    Date parsing errors on an outer surface (CLI options, files).

    The engine maps unparsable target dates to zero periods; this error is
    only raised where a caller explicitly asked for a date, such as the
    ``--now`` option of the CLI.

    Examples
    --------
    >>> raise TimeIndexError("Could not parse reference instant 'yesterday'")
    """
    pass
