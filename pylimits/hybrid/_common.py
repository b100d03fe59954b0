"""
Common data structures for hybrid CLs limits.

HypoTestOutcome is the accumulated toy summary an engine returns.
StatSample and SearchState carry the search's working values, and
LimitParams / SignificanceParams are the payloads wrapped by Result[P]
and exposed through Solution classes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from numpy.typing import ArrayLike


class Rule(str, Enum):
    """Statistic that drives the limit search."""
    CLS = "CLs"
    CLSPLUSB = "CLsplusb"


class TestStatistic(str, Enum):
    """Test statistic used by the engine to rank toys."""
    __test__ = False

    LEP = "LEP"
    TEV = "TEV"
    ATLAS = "Atlas"


class SearchStatus(str, Enum):
    """Terminal (and initial) states of the bisection search."""
    SEARCHING = "searching"
    CONVERGED = "converged"
    LUCKY = "lucky"
    FAILED = "failed"


@dataclass(frozen=True)
class TestStatSettings:
    """
    Engine-invocation parameters fixed by the test statistic choice.

    code: statistic identifier understood by the engine
        (1 = LEP simple likelihood ratio, 3 = profile likelihood ratio).
    poi_constant: whether r stays fixed when the engine fits the
        alternate hypothesis.
    """
    __test__ = False

    code: int
    poi_constant: bool


TEST_STATISTIC_SETTINGS: dict[TestStatistic, TestStatSettings] = {
    TestStatistic.LEP: TestStatSettings(code=1, poi_constant=True),
    TestStatistic.TEV: TestStatSettings(code=3, poi_constant=True),
    TestStatistic.ATLAS: TestStatSettings(code=3, poi_constant=False),
}


def _binomial_error(p: float, n: int) -> float:
    return math.sqrt(p * (1.0 - p) / n)


@dataclass(frozen=True)
class HypoTestOutcome:
    """
    Toy counts from one or more hypothesis tests at a fixed r.

    A toy falls in the tail when its test statistic is at least as
    background-like as the observed one. Tail probabilities and their
    binomial errors follow directly from the counts:

    - CLs+b = n_sb_tail / n_sb
    - CLb   = n_b_tail / n_b
    - CLs   = CLs+b / CLb

    Outcomes from independent runs are combined with merge(), which sums
    the counts and is therefore independent of merge order.
    """
    n_sb: int
    n_sb_tail: int
    n_b: int
    n_b_tail: int

    def __post_init__(self):
        if self.n_sb < 1 or self.n_b < 1:
            raise ValueError(
                f"outcome needs at least one toy per hypothesis, "
                f"got n_sb={self.n_sb}, n_b={self.n_b}"
            )
        if not 0 <= self.n_sb_tail <= self.n_sb:
            raise ValueError(
                f"n_sb_tail must be in [0, {self.n_sb}], got {self.n_sb_tail}"
            )
        if not 0 <= self.n_b_tail <= self.n_b:
            raise ValueError(
                f"n_b_tail must be in [0, {self.n_b}], got {self.n_b_tail}"
            )

    @classmethod
    def from_toys(
        cls,
        observed: float,
        sb_stats: ArrayLike,
        b_stats: ArrayLike,
    ) -> HypoTestOutcome:
        """
        Count tail toys from test statistic samples.

        Args:
            observed: Test statistic on the observed data.
            sb_stats: Test statistic of each signal+background toy.
            b_stats: Test statistic of each background-only toy.

        Returns:
            Outcome with toys at or above the observed value in the tail.
        """
        sb = np.asarray(sb_stats, dtype=np.float64).ravel()
        b = np.asarray(b_stats, dtype=np.float64).ravel()
        return cls(
            n_sb=int(sb.size),
            n_sb_tail=int(np.count_nonzero(sb >= observed)),
            n_b=int(b.size),
            n_b_tail=int(np.count_nonzero(b >= observed)),
        )

    def merge(self, other: HypoTestOutcome) -> HypoTestOutcome:
        """Combine with an independent outcome at the same r."""
        return HypoTestOutcome(
            n_sb=self.n_sb + other.n_sb,
            n_sb_tail=self.n_sb_tail + other.n_sb_tail,
            n_b=self.n_b + other.n_b,
            n_b_tail=self.n_b_tail + other.n_b_tail,
        )

    @property
    def clsb(self) -> float:
        return self.n_sb_tail / self.n_sb

    @property
    def clsb_error(self) -> float:
        return _binomial_error(self.clsb, self.n_sb)

    @property
    def clb(self) -> float:
        return self.n_b_tail / self.n_b

    @property
    def clb_error(self) -> float:
        return _binomial_error(self.clb, self.n_b)

    @property
    def cls(self) -> float:
        clb = self.clb
        # Both tails empty: nothing left to exclude with.
        if clb == 0.0:
            return 0.0
        return self.clsb / clb

    @property
    def cls_error(self) -> float:
        clsb, clb = self.clsb, self.clb
        if clsb == 0.0 or clb == 0.0:
            return 0.0
        return (clsb / clb) * math.hypot(
            self.clsb_error / clsb, self.clb_error / clb
        )

    def statistic(self, rule: Rule) -> float:
        """CLs or CLs+b, depending on rule."""
        return self.cls if rule is Rule.CLS else self.clsb

    def statistic_error(self, rule: Rule) -> float:
        return self.cls_error if rule is Rule.CLS else self.clsb_error


FAILED_ERROR = -1.0


@dataclass(frozen=True)
class StatSample:
    """
    A tail probability estimate (CLs or CLs+b) at one value of r.

    error == -1 marks a failed hypothesis test; such a sample carries
    no information and must never be compared against a target.
    """
    value: float
    error: float
    r: float | None = None
    n_toys: int = 0

    @classmethod
    def failed(cls, r: float | None = None) -> StatSample:
        return cls(value=FAILED_ERROR, error=FAILED_ERROR, r=r)

    @property
    def is_failure(self) -> bool:
        return self.error == FAILED_ERROR


@dataclass
class SearchState:
    """
    Working bracket of the bisection search.

    Invariant: r_min <= r_max, and the statistic at r_min lies above the
    target while the one at r_max lies below it. cls_min / cls_max are the
    most recent samples taken at (or nearest to) each endpoint.
    """
    r_min: float
    r_max: float
    cls_min: StatSample
    cls_max: StatSample
    status: SearchStatus = SearchStatus.SEARCHING
    r_mid: float | None = None
    n_iterations: int = 0
    trace: list[tuple[float, float]] = field(default_factory=list)

    @property
    def width(self) -> float:
        return self.r_max - self.r_min

    @property
    def half_width(self) -> float:
        return 0.5 * (self.r_max - self.r_min)


@dataclass(frozen=True)
class LimitParams:
    """
    Parameter payload for an upper limit on r.

    - limit: the r at which the statistic crosses 1 - confidence_level
    - half_width: half the final bracket width
    - r_min, r_max: final bracket (refined when an interval was requested)
    - status: "converged" or "lucky"
    """
    limit: float
    half_width: float
    r_min: float
    r_max: float
    status: str
    confidence_level: float
    rule: str
    interval: tuple[float, float] | None = None


@dataclass(frozen=True)
class SignificanceParams:
    """
    Parameter payload for a significance estimate.

    sigma_low is negative (the shift when CLb moves down by its error),
    sigma_high positive. Either may be NaN when CLb +/- error leaves [0, 1].
    """
    significance: float
    sigma_low: float
    sigma_high: float
    clb: float
    clb_error: float
    n_toys: int
    label: str | None = None
