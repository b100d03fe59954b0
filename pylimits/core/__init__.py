"""
Core infrastructure for PyLimits.

This module provides shared abstractions and utilities used by the
domain-specific submodules.

Key components:
    protocols: HypoTestEngine, ResultStore, Backend protocols
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Option validators
    compute: Timing
"""

from pylimits.core.protocols import HypoTestEngine, ResultStore, Backend
from pylimits.core.result import Result
from pylimits.core.exceptions import (
    PyLimitsError,
    ValidationError,
    ConfigurationError,
    HypoTestFailedError,
    BracketExpansionError,
    NumericalError,
    NonFiniteResultError,
)

__all__ = [
    # Protocols
    "HypoTestEngine",
    "ResultStore",
    "Backend",
    # Result
    "Result",
    # Exceptions
    "PyLimitsError",
    "ValidationError",
    "ConfigurationError",
    "HypoTestFailedError",
    "BracketExpansionError",
    "NumericalError",
    "NonFiniteResultError",
]
