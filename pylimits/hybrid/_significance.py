"""
Significance of an excess from one accumulated hypothesis test.

No search is involved: the outcome at a fixed reference r is either
produced by the engine or merged from a result store, and its CLb is
turned into a one-sided Gaussian significance.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import numpy as np
from scipy import stats as sp_stats

from pylimits.core.exceptions import HypoTestFailedError, NonFiniteResultError
from pylimits.hybrid._common import HypoTestOutcome, SignificanceParams
from pylimits.hybrid.design import RESULT_LABEL_PREFIX

if TYPE_CHECKING:
    from pylimits.core.protocols import ResultStore
    from pylimits.hybrid.design import HybridDesign

logger = logging.getLogger(__name__)


def pvalue_to_significance(p: float) -> float:
    """
    One-sided Gaussian significance of a p-value, Z = Phi^-1(1 - p).

    p = 0.5 gives 0, smaller p gives positive Z. Returns inf for p = 0
    and NaN outside [0, 1].
    """
    if not 0.0 <= p <= 1.0:
        return float("nan")
    return float(sp_stats.norm.isf(p))


def read_outcomes(store: ResultStore, prefix: str = RESULT_LABEL_PREFIX) -> HypoTestOutcome | None:
    """Merge every stored outcome whose label starts with prefix, or None if there are none."""
    logger.info("Reading toys")
    merged: HypoTestOutcome | None = None
    for outcome in store.load_all_matching(prefix):
        merged = outcome if merged is None else merged.merge(outcome)
    return merged


def new_label(rng: np.random.Generator, store: ResultStore) -> str:
    """
    Storage label not yet used in store; the number only keeps labels unique.

    Draws again from rng on a collision, so seeded runs saving to one
    store still get distinct labels.
    """
    label = _draw_label(rng)
    while label in store:
        label = _draw_label(rng)
    return label


def _draw_label(rng: np.random.Generator) -> str:
    return f"{RESULT_LABEL_PREFIX}{int(rng.integers(0, np.iinfo(np.uint32).max - 1))}"


def significance_from_clb(clb: float, clb_err: float) -> tuple[float, float, float]:
    """
    Significance and its asymmetric errors from CLb +/- its error.

    Returns:
        (significance, sigma_low, sigma_high), where the errors are the
        shifts when CLb moves down / up by one standard error.
    """
    significance = pvalue_to_significance(1.0 - clb)
    sigma_high = pvalue_to_significance(1.0 - (clb + clb_err)) - significance
    sigma_low = pvalue_to_significance(1.0 - (clb - clb_err)) - significance
    return significance, sigma_low, sigma_high


def compute_significance(design: HybridDesign) -> SignificanceParams:
    """
    Run (or read) the hypothesis test at design.r_value and convert CLb.

    Raises:
        HypoTestFailedError: If the engine returns no outcome, or the
            store holds none.
        NonFiniteResultError: If the significance is NaN or infinite.
    """
    if design.read_results:
        outcome = read_outcomes(design.store)
    else:
        outcome = design.engine.run_toys(design.r_value, design.n_toys, design.settings)
    if outcome is None:
        raise HypoTestFailedError("Hypotest failed", r=design.r_value)

    label = None
    if design.save_result:
        label = new_label(np.random.default_rng(design.seed), design.store)
        design.store.save(outcome, label)
        logger.info("Hybrid result saved as %s", label)

    significance, sigma_low, sigma_high = significance_from_clb(
        outcome.clb, outcome.clb_error
    )
    if not math.isfinite(significance):
        raise NonFiniteResultError(
            f"Significance is not finite ({significance}) for "
            f"CLb = {outcome.clb:g} +/- {outcome.clb_error:g}",
            quantity="significance",
            value=significance,
        )

    return SignificanceParams(
        significance=significance,
        sigma_low=sigma_low,
        sigma_high=sigma_high,
        clb=outcome.clb,
        clb_error=outcome.clb_error,
        n_toys=outcome.n_b,
        label=label,
    )
