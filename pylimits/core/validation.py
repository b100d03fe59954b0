"""
Input validation utilities for PyLimits.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion beyond float()/int() on numeric scalars
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

import math
import numbers
from typing import Any, Iterable

from pylimits.core.exceptions import ConfigurationError


def check_positive_int(value: Any, name: str) -> int:
    """
    Validate a strictly positive integer option.
    
    Args:
        value: Input to validate
        name: Option name for error messages
        
    Returns:
        value as int
        
    Raises:
        ConfigurationError: If value is not an integer >= 1
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ConfigurationError(
            f"{name}: expected a positive integer, got {value!r}", option=name
        )
    result = int(value)
    if result < 1:
        raise ConfigurationError(
            f"{name}: must be >= 1, got {result}", option=name
        )
    return result


def check_positive(value: Any, name: str) -> float:
    """
    Validate a strictly positive finite float option.
    
    Raises:
        ConfigurationError: If value is not a finite number > 0
    """
    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"{name}: cannot convert {value!r} to float", option=name
        ) from e
    if not math.isfinite(result) or result <= 0:
        raise ConfigurationError(
            f"{name}: must be a finite number > 0, got {result}", option=name
        )
    return result


def check_non_negative(value: Any, name: str) -> float:
    """Validate a finite float option >= 0."""
    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"{name}: cannot convert {value!r} to float", option=name
        ) from e
    if not math.isfinite(result) or result < 0:
        raise ConfigurationError(
            f"{name}: must be a finite number >= 0, got {result}", option=name
        )
    return result


def check_open_unit_interval(value: Any, name: str) -> float:
    """
    Validate a probability strictly between 0 and 1.
    
    Used for confidence levels, where 0 and 1 make the target
    tail probability degenerate.
    
    Raises:
        ConfigurationError: If value is not in (0, 1)
    """
    try:
        result = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"{name}: cannot convert {value!r} to float", option=name
        ) from e
    if not 0.0 < result < 1.0:
        raise ConfigurationError(
            f"{name}: must be in (0, 1), got {result}", option=name
        )
    return result


def check_choice(value: Any, choices: Iterable[str], name: str) -> str:
    """
    Validate that a string option is one of the allowed choices.
    
    Raises:
        ConfigurationError: If value is not one of choices
    """
    allowed = tuple(choices)
    if value not in allowed:
        quoted = " or ".join(repr(c) for c in allowed)
        raise ConfigurationError(
            f"{name}: should be one of {quoted}, got {value!r}", option=name
        )
    return value
