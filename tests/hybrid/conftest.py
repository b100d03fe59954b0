"""
Synthetic hypothesis test engines for the hybrid limit tests.

CurveEngine turns a known, decreasing curve f(r) into toy counts so the
crossing point r* with f(r*) = 1 - CL is known exactly. Without an rng the
counts are round(f(r) * n_toys), i.e. noiseless up to 1 / (2 n_toys);
with an rng they are binomial draws.
"""

import math

import numpy as np
import pytest

from pylimits.hybrid import HypoTestOutcome


class CurveEngine:
    """Engine whose CLs+b follows curve(r); CLb is fixed (1 by default)."""

    def __init__(self, curve, clb=1.0, rng=None):
        self.curve = curve
        self.clb = clb
        self.rng = rng
        self.calls: list[float] = []
        self.settings_seen = []

    def run_toys(self, r, n_toys, settings):
        self.calls.append(r)
        self.settings_seen.append(settings)
        p_sb = min(max(self.curve(r) * self.clb, 0.0), 1.0)
        if self.rng is None:
            n_sb_tail = int(round(p_sb * n_toys))
            n_b_tail = int(round(self.clb * n_toys))
        else:
            n_sb_tail = int(self.rng.binomial(n_toys, p_sb))
            n_b_tail = int(self.rng.binomial(n_toys, self.clb))
        return HypoTestOutcome(
            n_sb=n_toys, n_sb_tail=n_sb_tail, n_b=n_toys, n_b_tail=n_b_tail,
        )


class FailingEngine:
    """Returns real outcomes for the first n_ok calls, then None."""

    def __init__(self, curve, n_ok=0):
        self._inner = CurveEngine(curve)
        self.n_ok = n_ok
        self.calls: list[float] = []

    def run_toys(self, r, n_toys, settings):
        self.calls.append(r)
        if len(self.calls) > self.n_ok:
            return None
        return self._inner.run_toys(r, n_toys, settings)


class FixedOutcomeEngine:
    """Always returns the same outcome."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.calls: list[float] = []

    def run_toys(self, r, n_toys, settings):
        self.calls.append(r)
        return self.outcome


def exp_curve(r):
    return math.exp(-r)


def linear_curve(r):
    """Crosses 0.05 at r = 4.5, zero beyond r = 5."""
    return 0.5 - 0.1 * r


@pytest.fixture
def exp_engine():
    """Noiseless exp(-r): crossing at ln(20) ~ 2.996 for a 95% CL."""
    return CurveEngine(exp_curve)


@pytest.fixture
def linear_engine():
    return CurveEngine(linear_curve)


@pytest.fixture
def curve_engine():
    """Factory for CurveEngine."""
    return CurveEngine


@pytest.fixture
def failing_engine():
    """Factory for FailingEngine."""
    return FailingEngine


@pytest.fixture
def fixed_outcome_engine():
    """Factory for FixedOutcomeEngine."""
    return FixedOutcomeEngine


@pytest.fixture
def noisy_exp_engine():
    return CurveEngine(exp_curve, rng=np.random.default_rng(42))
