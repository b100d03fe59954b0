"""
CPU backend for hybrid limits and significances.

CPUHybridBackend: sequential limit search (bracket expansion, bisection,
optional interval refinement) or a single significance estimate,
depending on design.mode.
"""

from __future__ import annotations

import logging

from pylimits.core.result import Result
from pylimits.core.compute.timing import Timer
from pylimits.core.exceptions import HypoTestFailedError
from pylimits.hybrid._common import (
    LimitParams,
    SearchStatus,
    SignificanceParams,
    StatSample,
)
from pylimits.hybrid._search import (
    StatisticEvaluator,
    bisect,
    expand_upper_bracket,
    limit_from_state,
    refine_interval,
)
from pylimits.hybrid._significance import compute_significance
from pylimits.hybrid.design import HybridDesign

logger = logging.getLogger(__name__)


class CPUHybridBackend:
    """
    CPU backend for hybrid CLs limits.

    Every engine call is made in sequence; the engine's toy generation
    dominates the cost.
    """

    @property
    def name(self) -> str:
        return 'cpu_hybrid'

    def solve(self, design: HybridDesign) -> Result[LimitParams] | Result[SignificanceParams]:
        """Dispatch on design.mode."""
        if design.mode == "limit":
            return self._solve_limit(design)
        if design.mode == "significance":
            return self._solve_significance(design)
        raise ValueError(f"Unknown mode: {design.mode!r}")

    def _solve_limit(self, design: HybridDesign) -> Result[LimitParams]:
        timer = Timer()
        timer.start()

        evaluator = StatisticEvaluator(design)
        target = design.cls_target

        with timer.section('bracket_expansion'):
            r_max, cls_max = expand_upper_bracket(
                evaluator, design.initial_r_max, target,
            )

        # r = 0 is signal-free, so the statistic there is 1 by construction
        cls_min = StatSample(value=1.0, error=0.0, r=0.0)

        with timer.section('bisection'):
            state = bisect(evaluator, 0.0, r_max, cls_min, cls_max, design)

        if state.status is SearchStatus.FAILED:
            raise HypoTestFailedError(
                f"Hypotest failed at r = {state.r_mid:g}", r=state.r_mid
            )

        limit = limit_from_state(state)
        bisection_bracket = (state.r_min, state.r_max)

        interval = None
        if design.r_interval:
            logger.info(
                "Limit (before determining interval): r < %g +/- %g @ %g%% CL",
                limit, state.half_width, design.confidence_level * 100,
            )
            with timer.section('interval_refinement'):
                refine_interval(evaluator, state, limit, design)
            interval = (state.r_min, state.r_max)

        timer.stop()

        params = LimitParams(
            limit=limit,
            half_width=state.half_width,
            r_min=state.r_min,
            r_max=state.r_max,
            status=state.status.value,
            confidence_level=design.confidence_level,
            rule=design.rule.value,
            interval=interval,
        )

        return Result(
            params=params,
            info={
                'status': state.status.value,
                'cls_target': target,
                'r_max_bracket': r_max,
                'bisection_bracket': bisection_bracket,
                'n_iterations': state.n_iterations,
                'n_evaluations': evaluator.n_evaluations,
                'n_engine_calls': evaluator.n_engine_calls,
                'trace': tuple(state.trace),
                'test_statistic': design.test_statistic.value,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(evaluator.warnings),
        )

    def _solve_significance(self, design: HybridDesign) -> Result[SignificanceParams]:
        timer = Timer()
        timer.start()

        with timer.section('hypotest'):
            params = compute_significance(design)

        timer.stop()

        return Result(
            params=params,
            info={
                'r_value': design.r_value,
                'read_results': design.read_results,
                'test_statistic': design.test_statistic.value,
            },
            timing=timer.result(),
            backend_name=self.name,
        )
