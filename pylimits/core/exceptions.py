"""
Exception hierarchy for PyLimits.

All exceptions inherit from PyLimitsError to allow catching any
library-specific error. Domain-specific exceptions should inherit from
the appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyLimitsError(Exception):
    """Base exception for all PyLimits errors."""
    pass


class ValidationError(PyLimitsError):
    """
    Input validation failed.
    
    Raised when user-provided inputs fail validation checks.
    """
    pass


class ConfigurationError(ValidationError):
    """
    Search configuration is invalid.
    
    Raised before any toys are thrown: unknown rule or test statistic,
    non-positive accuracies, or a store-dependent option requested
    without a result store.
    
    Attributes:
        option: Name of the offending option, if known
    """
    
    def __init__(self, message: str, option: str | None = None):
        super().__init__(message)
        self.option = option


class HypoTestFailedError(PyLimitsError):
    """
    The hypothesis test engine produced no usable outcome.
    
    Attributes:
        r: Signal strength at which the engine was called, if any
    """
    
    def __init__(self, message: str, r: float | None = None):
        super().__init__(message)
        self.r = r


class BracketExpansionError(PyLimitsError):
    """
    Upper bracket could not be established.
    
    Raised when doubling the upper bound on r reaches the growth cap
    without the statistic dropping below the target.
    
    Attributes:
        r: Last evaluated signal strength
        value: Statistic value observed at r
        error: Statistical error on value
        cap: Growth factor relative to the initial bound
    """
    
    def __init__(
        self, 
        message: str,
        r: float,
        value: float,
        error: float | None = None,
        cap: float | None = None
    ):
        super().__init__(message)
        self.r = r
        self.value = value
        self.error = error
        self.cap = cap


class NumericalError(PyLimitsError):
    """
    Numerical computation failed.
    
    Base class for errors arising from numerical issues during computation.
    """
    pass


class NonFiniteResultError(NumericalError):
    """
    Computation produced NaN or infinity.
    
    Attributes:
        quantity: Name of the quantity that is not finite
        value: The offending value
    """
    
    def __init__(
        self, 
        message: str,
        quantity: str | None = None,
        value: float | None = None
    ):
        super().__init__(message)
        self.quantity = quantity
        self.value = value
