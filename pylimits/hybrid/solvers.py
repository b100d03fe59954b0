"""
Solver dispatch for hybrid limits.

Provides hybrid_limit() (upper limit on r by CLs or CLs+b) and
hybrid_significance() (significance of an excess from CLb).
"""

from __future__ import annotations

from typing import Literal

from pylimits.core.exceptions import ValidationError
from pylimits.core.protocols import HypoTestEngine, ResultStore
from pylimits.hybrid.design import HybridDesign
from pylimits.hybrid.solution import LimitSolution, SignificanceSolution
from pylimits.hybrid.backends.cpu import CPUHybridBackend


BackendChoice = Literal['cpu']


def _get_backend(backend: str = 'cpu'):
    """
    Select backend for hybrid limits.

    Only the sequential CPU backend exists; the engine decides where
    its toys are thrown.
    """
    if backend in ('cpu', 'auto'):
        return CPUHybridBackend()
    raise ValidationError(
        f"Unknown backend: {backend!r}. Use 'cpu'."
    )


def _check_mode(design: HybridDesign, mode: str, entry_point: str) -> HybridDesign:
    if design.mode != mode:
        raise ValidationError(
            f"{entry_point}: expected a {mode!r} design, got a {design.mode!r} "
            f"design. Build it with HybridDesign.for_{mode}()."
        )
    return design


def hybrid_limit(
    engine: HypoTestEngine | HybridDesign,
    *,
    n_toys: int = 500,
    cls_accuracy: float = 0.005,
    r_abs_accuracy: float = 0.1,
    r_rel_accuracy: float = 0.05,
    rule: Literal["CLs", "CLsplusb"] = "CLs",
    test_statistic: Literal["LEP", "TEV", "Atlas"] = "LEP",
    confidence_level: float = 0.95,
    r_interval: bool = False,
    r_max: float = 20.0,
    hint: float | None = None,
    max_resamples: int = 100,
    backend: str = 'cpu',
) -> LimitSolution:
    """
    Upper limit on the signal strength r with the hybrid CLs method.

    Doubles the upper bound on r until the statistic is safely below
    1 - confidence_level, then bisects, resampling near the target.

    Parameters
    ----------
    engine : HypoTestEngine or HybridDesign
        Toy-based hypothesis test engine, or a pre-built design.
    n_toys : int
        Toys per hypothesis per engine call. Default 500.
    cls_accuracy : float
        Absolute accuracy on CLs to reach to terminate the scan.
        Default 0.005.
    r_abs_accuracy : float
        Absolute accuracy on r to reach to terminate the scan. Default 0.1.
    r_rel_accuracy : float
        Relative accuracy on r to reach to terminate the scan. Default 0.05.
    rule : str
        "CLs" (default) or "CLsplusb".
    test_statistic : str
        "LEP" (default), "TEV" or "Atlas".
    confidence_level : float
        Default 0.95.
    r_interval : bool
        Also tighten the bracket edges around the limit.
    r_max : float
        Initial upper bound on r. Default 20.
    hint : float or None
        Expected limit; the initial bound becomes min(3 * hint, r_max).
    max_resamples : int
        Cap on extra engine calls per adaptive evaluation. Default 100.
    backend : str
        'cpu' (default).

    Returns
    -------
    LimitSolution

    Raises
    ------
    ConfigurationError
        If an option is invalid.
    ValidationError
        If a prebuilt design is not a limit design.
    BracketExpansionError
        If the statistic is still above target at 20x the initial bound.
    HypoTestFailedError
        If the engine fails.
    """
    if isinstance(engine, HybridDesign):
        design = _check_mode(engine, "limit", "hybrid_limit")
    else:
        design = HybridDesign.for_limit(
            engine,
            n_toys=n_toys,
            cls_accuracy=cls_accuracy,
            r_abs_accuracy=r_abs_accuracy,
            r_rel_accuracy=r_rel_accuracy,
            rule=rule,
            test_statistic=test_statistic,
            confidence_level=confidence_level,
            r_interval=r_interval,
            r_max=r_max,
            hint=hint,
            max_resamples=max_resamples,
        )

    be = _get_backend(backend)
    result = be.solve(design)
    return LimitSolution(_result=result, _design=design)


def hybrid_significance(
    engine: HypoTestEngine | HybridDesign | None = None,
    *,
    n_toys: int = 500,
    test_statistic: Literal["LEP", "TEV", "Atlas"] = "LEP",
    r_value: float = 1.0,
    store: ResultStore | None = None,
    save_result: bool = False,
    read_results: bool = False,
    seed: int | None = None,
    backend: str = 'cpu',
) -> SignificanceSolution:
    """
    Significance of the observation from one hypothesis test at r_value.

    Parameters
    ----------
    engine : HypoTestEngine, HybridDesign or None
        Toy-based hypothesis test engine, or a pre-built design. May be
        None when read_results is True.
    n_toys : int
        Toys per hypothesis. Default 500.
    test_statistic : str
        "LEP" (default), "TEV" or "Atlas".
    r_value : float
        Signal strength of the alternate hypothesis. Default 1.
    store : ResultStore or None
        Where outcomes are saved to / read from.
    save_result : bool
        Save the outcome in store under a random "HybridResult_" label.
    read_results : bool
        Merge all "HybridResult_" outcomes in store instead of running toys.
    seed : int or None
        Seed for the label generator.
    backend : str
        'cpu' (default).

    Returns
    -------
    SignificanceSolution

    Raises
    ------
    ConfigurationError
        If an option is invalid or a store option lacks a store.
    ValidationError
        If a prebuilt design is not a significance design.
    HypoTestFailedError
        If no outcome could be produced or read.
    NonFiniteResultError
        If the significance is not finite.
    """
    if isinstance(engine, HybridDesign):
        design = _check_mode(engine, "significance", "hybrid_significance")
    else:
        design = HybridDesign.for_significance(
            engine,
            n_toys=n_toys,
            test_statistic=test_statistic,
            r_value=r_value,
            store=store,
            save_result=save_result,
            read_results=read_results,
            seed=seed,
        )

    be = _get_backend(backend)
    result = be.solve(design)
    return SignificanceSolution(_result=result, _design=design)
