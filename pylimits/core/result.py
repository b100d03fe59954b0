"""
Generic result container for all PyLimits computations.

The Result class provides a standardized envelope that all domain-specific
results use. This enables shared tooling for timing, logging, reproducibility,
and reporting while allowing domains to define their own parameter structures.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (evaluations, bracket trace)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for limit and significance computations.
    
    Type Parameters:
        P: The domain-specific parameter payload type
        
    Attributes:
        params: Domain-specific parameters (limit, significance, etc.)
        info: Structured metadata (status, evaluations, bracket trace)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
    
    Examples:
        >>> Result(
        ...     params=LimitParams(limit=3.0, half_width=0.05, ...),
        ...     info={'status': 'converged', 'n_evaluations': 9},
        ...     timing={'total_seconds': 0.5, 'bisection': 0.4},
        ...     backend_name='cpu_hybrid'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    
    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
