"""
Limit search on r driven by a noisy hypothesis test engine.

Pieces, in the order a search uses them:

- StatisticEvaluator: one (optionally adaptive) estimate of CLs or CLs+b
  at a given r.
- expand_upper_bracket: doubles the upper bound until the statistic is
  below target by three standard errors.
- bisect: bisection between 0 and that bound, ending on bracket width or
  on a midpoint that hits the target within cls_accuracy.
- refine_interval: tightens both bracket edges around the limit.

All of them assume the statistic decreases monotonically with r.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pylimits.core.exceptions import BracketExpansionError, HypoTestFailedError
from pylimits.hybrid._common import (
    HypoTestOutcome,
    Rule,
    SearchState,
    SearchStatus,
    StatSample,
)

if TYPE_CHECKING:
    from pylimits.hybrid.design import HybridDesign

logger = logging.getLogger(__name__)

# Expansion stops once the bound reaches this multiple of the initial one.
MAX_EXPANSION_FACTOR = 20.0

# Statistical margin, in standard errors, used for every above/below decision.
N_SIGMA = 3.0


class StatisticEvaluator:
    """
    Evaluates the driving statistic at a given r.

    Counts engine calls and evaluations, and collects non-fatal warnings
    (e.g. hitting the resampling cap) for the Result envelope.
    """

    def __init__(self, design: HybridDesign):
        self._design = design
        self.n_evaluations = 0
        self.n_engine_calls = 0
        self.warnings: list[str] = []

    @property
    def rule(self) -> Rule:
        return self._design.rule

    def _run(self, r: float) -> HypoTestOutcome | None:
        self.n_engine_calls += 1
        return self._design.engine.run_toys(
            r, self._design.n_toys, self._design.settings
        )

    def evaluate(
        self,
        r: float,
        adaptive: bool = False,
        target: float | None = None,
    ) -> StatSample:
        """
        Estimate the statistic at r.

        With adaptive=True, more toys are accumulated while the estimate is
        within three standard errors of target and its error is still above
        cls_accuracy, up to max_resamples extra engine calls.

        Returns:
            The sample, or StatSample.failed(r) if the engine returned
            no outcome.
        """
        design = self._design
        rule = design.rule
        self.n_evaluations += 1

        outcome = self._run(r)
        if outcome is None:
            logger.error("Hypotest failed at r = %g", r)
            return StatSample.failed(r)
        value = outcome.statistic(rule)
        error = outcome.statistic_error(rule)
        logger.info("r = %g: %s = %g +/- %g", r, rule.value, value, error)

        if adaptive:
            if target is None:
                raise ValueError("adaptive evaluation needs a target")
            n_extra = 0
            while abs(value - target) < N_SIGMA * error and error >= design.cls_accuracy:
                if n_extra >= design.max_resamples:
                    message = (
                        f"r = {r:g}: stopped resampling after "
                        f"{design.max_resamples} extra runs with "
                        f"{rule.value} = {value:g} +/- {error:g}"
                    )
                    logger.warning(message)
                    self.warnings.append(message)
                    break
                more = self._run(r)
                if more is None:
                    logger.error("Hypotest failed at r = %g", r)
                    return StatSample.failed(r)
                outcome = outcome.merge(more)
                n_extra += 1
                value = outcome.statistic(rule)
                error = outcome.statistic_error(rule)
                logger.info("r = %g: %s = %g +/- %g", r, rule.value, value, error)

        logger.debug(
            "r = %g:\n"
            "\tCLs      = %g +/- %g\n"
            "\tCLb      = %g +/- %g\n"
            "\tCLsplusb = %g +/- %g",
            r,
            outcome.cls, outcome.cls_error,
            outcome.clb, outcome.clb_error,
            outcome.clsb, outcome.clsb_error,
        )
        return StatSample(value=value, error=error, r=r, n_toys=outcome.n_sb)


def expand_upper_bracket(
    evaluator: StatisticEvaluator,
    initial_max: float,
    cls_target: float,
    max_factor: float = MAX_EXPANSION_FACTOR,
) -> tuple[float, StatSample]:
    """
    Find an upper bound on r where the statistic is provably below target.

    Starting at initial_max, the bound is doubled until the statistic there
    is zero or value + 3|error| < cls_target.

    Returns:
        (r_max, sample at r_max)

    Raises:
        HypoTestFailedError: If the engine fails at any bound.
        BracketExpansionError: If a bound of max_factor * initial_max
            was evaluated without satisfying the condition.
    """
    logger.info("Search for upper limit to the limit")
    rule = evaluator.rule.value
    r_hi = initial_max
    while True:
        sample = evaluator.evaluate(r_hi)
        if sample.is_failure:
            raise HypoTestFailedError(
                f"Hypotest failed while bracketing at r = {r_hi:g}", r=r_hi
            )
        if sample.value == 0 or sample.value + N_SIGMA * abs(sample.error) < cls_target:
            return r_hi, sample
        if r_hi / initial_max >= max_factor:
            raise BracketExpansionError(
                f"Cannot set higher limit: at r = {r_hi:g} still get "
                f"{rule} = {sample.value:g}",
                r=r_hi,
                value=sample.value,
                error=sample.error,
                cap=max_factor,
            )
        r_hi *= 2.0


def bisect(
    evaluator: StatisticEvaluator,
    r_min: float,
    r_max: float,
    cls_min: StatSample,
    cls_max: StatSample,
    design: HybridDesign,
) -> SearchState:
    """
    Bisect [r_min, r_max] for the r where the statistic equals the target.

    Each iteration evaluates the midpoint adaptively. A midpoint within
    cls_accuracy of the target ends the search as LUCKY; otherwise it
    replaces whichever endpoint lies on the same side of the target.
    The search is CONVERGED once the bracket is no wider than
    max(r_abs_accuracy, r_rel_accuracy * r_mid), and FAILED if the
    engine fails.

    Returns:
        The final SearchState; state.trace holds the bracket at the start
        of every iteration.
    """
    logger.info("Now doing proper bracketing & bisection")
    target = design.cls_target
    state = SearchState(r_min=r_min, r_max=r_max, cls_min=cls_min, cls_max=cls_max)

    while state.status is SearchStatus.SEARCHING:
        state.trace.append((state.r_min, state.r_max))
        state.n_iterations += 1
        r_mid = 0.5 * (state.r_min + state.r_max)
        state.r_mid = r_mid

        mid = evaluator.evaluate(r_mid, adaptive=True, target=target)
        if mid.is_failure:
            logger.error("Hypotest failed")
            state.status = SearchStatus.FAILED
            break
        if abs(mid.value - target) <= design.cls_accuracy:
            logger.info("reached accuracy.")
            state.status = SearchStatus.LUCKY
            break

        if (mid.value > target) == (state.cls_max.value > target):
            state.r_max, state.cls_max = r_mid, mid
        else:
            state.r_min, state.cls_min = r_mid, mid

        if state.width <= max(design.r_abs_accuracy, design.r_rel_accuracy * r_mid):
            state.status = SearchStatus.CONVERGED

    return state


def limit_from_state(state: SearchState) -> float:
    """Point estimate of the limit for a finished search."""
    if state.status is SearchStatus.LUCKY:
        return state.r_mid
    if state.status is SearchStatus.CONVERGED:
        return 0.5 * (state.r_max + state.r_min)
    raise ValueError(f"no limit for a search in state {state.status.value!r}")


def refine_interval(
    evaluator: StatisticEvaluator,
    state: SearchState,
    limit: float,
    design: HybridDesign,
) -> None:
    """
    Move both bracket edges towards limit until they pin the crossing.

    Each edge is advanced independently to the midpoint between itself and
    the limit, evaluated adaptively, until it is within half an accuracy
    unit of the limit or its own statistic is within cls_accuracy of the
    target. Updates state in place.

    Raises:
        HypoTestFailedError: If the engine fails during refinement.
    """
    target = design.cls_target
    tolerance = 0.5 * max(design.r_abs_accuracy, design.r_rel_accuracy * limit)

    bound_low = limit - tolerance
    while state.r_min < bound_low and abs(state.cls_min.value - target) >= design.cls_accuracy:
        probe = 0.5 * (state.r_min + limit)
        sample = evaluator.evaluate(probe, adaptive=True, target=target)
        if sample.is_failure:
            raise HypoTestFailedError(
                f"Hypotest failed while refining lower edge at r = {probe:g}", r=probe
            )
        state.r_min, state.cls_min = probe, sample

    bound_high = limit + tolerance
    while state.r_max > bound_high and abs(state.cls_max.value - target) >= design.cls_accuracy:
        probe = 0.5 * (state.r_max + limit)
        sample = evaluator.evaluate(probe, adaptive=True, target=target)
        if sample.is_failure:
            raise HypoTestFailedError(
                f"Hypotest failed while refining upper edge at r = {probe:g}", r=probe
            )
        state.r_max, state.cls_max = probe, sample
