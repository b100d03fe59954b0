"""
Core protocols for PyLimits.

These define structural interfaces for the collaborators the search
algorithms consume. We use Protocol (structural typing) rather than ABC
(nominal typing) so any toy generator or persistence layer can plug in
without inheriting from library classes.

Design Principles:
    - Minimal contracts: prescribe only what the search actually calls
    - Engines own the model; the core never touches likelihoods
    - Type-safe: use generics to preserve type information through pipelines
"""

from __future__ import annotations

from typing import Protocol, TypeVar, Iterator, runtime_checkable, TYPE_CHECKING

if TYPE_CHECKING:
    from pylimits.core.result import Result
    from pylimits.hybrid._common import HypoTestOutcome, TestStatSettings

# Type variables for generic payloads
P = TypeVar('P')  # Parameter payload type
D = TypeVar('D')  # Design type


@runtime_checkable
class HypoTestEngine(Protocol):
    """
    Toy-based hypothesis test at a fixed signal strength.
    
    An engine owns the statistical model (signal and background pdfs,
    nuisance parameters) and knows how to throw toys under both
    hypotheses. The search only asks it for one outcome at a time.
    """
    
    def run_toys(
        self,
        r: float,
        n_toys: int,
        settings: 'TestStatSettings',
    ) -> 'HypoTestOutcome | None':
        """
        Throw n_toys toys per hypothesis with the signal scaled by r.
        
        Args:
            r: Signal strength at which to test
            n_toys: Number of toys per hypothesis
            settings: Test statistic code and whether r floats in fits
            
        Returns:
            The outcome, or None if the test could not be performed.
            None is reported as a failed run, never retried.
        """
        ...


@runtime_checkable
class ResultStore(Protocol):
    """
    Keyed storage for hypothesis test outcomes.
    
    Labels are opaque identifiers; the store must not interpret them
    beyond prefix matching.
    """
    
    def save(self, outcome: 'HypoTestOutcome', label: str) -> None:
        """Store outcome under label."""
        ...
    
    def load_all_matching(self, prefix: str) -> Iterator['HypoTestOutcome']:
        """Yield every stored outcome whose label starts with prefix, in insertion order."""
        ...
    
    def __contains__(self, label: object) -> bool:
        """Whether an outcome is already stored under label."""
        ...


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.
    
    Each backend takes a domain-specific design and produces a
    domain-specific parameter payload.
    
    Backends are stateless: all configuration is passed via the design
    or at construction time. This makes them easy to test and swap.
    
    Type Parameters:
        D: The design type this backend accepts
        P: The parameter payload type this backend produces
    """
    
    @property
    def name(self) -> str:
        """
        Backend identifier.
        
        Convention: '{device}_{algorithm}'
        Examples: 'cpu_hybrid'
        """
        ...
    
    def solve(self, design: D) -> 'Result[P]':
        """
        Execute the statistical computation.
        
        Args:
            design: Domain-specific design
            
        Returns:
            Result envelope containing parameter payload and metadata
            
        Raises:
            HypoTestFailedError: If the engine produced no outcome
            BracketExpansionError: If no upper bracket could be found
            NonFiniteResultError: If the result is NaN or infinite
        """
        ...
