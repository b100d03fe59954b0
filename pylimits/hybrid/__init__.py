"""
Hybrid frequentist-Bayesian limits.

Upper limits on a signal strength r by the CLs (or CLs+b) method, and
significances from CLb, driven by a toy-based hypothesis test engine.

Public API:
    hybrid_limit(engine)         - upper limit on r
    hybrid_significance(engine)  - significance of an excess
    HypoTestOutcome              - toy counts an engine returns
    MemoryResultStore            - in-memory outcome store
"""

from pylimits.hybrid.solvers import hybrid_limit, hybrid_significance
from pylimits.hybrid.design import HybridDesign
from pylimits.hybrid._common import (
    HypoTestOutcome,
    LimitParams,
    Rule,
    SearchStatus,
    SignificanceParams,
    StatSample,
    TestStatistic,
    TestStatSettings,
    TEST_STATISTIC_SETTINGS,
)
from pylimits.hybrid._significance import pvalue_to_significance
from pylimits.hybrid.solution import LimitSolution, SignificanceSolution
from pylimits.hybrid.store import MemoryResultStore

__all__ = [
    "hybrid_limit",
    "hybrid_significance",
    "HybridDesign",
    "HypoTestOutcome",
    "LimitParams",
    "Rule",
    "SearchStatus",
    "SignificanceParams",
    "StatSample",
    "TestStatistic",
    "TestStatSettings",
    "TEST_STATISTIC_SETTINGS",
    "pvalue_to_significance",
    "LimitSolution",
    "SignificanceSolution",
    "MemoryResultStore",
]
