"""
Tests for the significance estimate from CLb.

Covers the p-value to Z transform, the asymmetric errors, engine and
store input paths, and the failure modes.
"""

import math

import pytest
from scipy import stats

from pylimits.core.exceptions import (
    ConfigurationError,
    HypoTestFailedError,
    NonFiniteResultError,
    ValidationError,
)
from pylimits.hybrid import (
    HybridDesign,
    HypoTestOutcome,
    MemoryResultStore,
    hybrid_significance,
    pvalue_to_significance,
)
from pylimits.hybrid._significance import significance_from_clb


def _outcome(n_b_tail, n_b=1000):
    return HypoTestOutcome(n_sb=n_b, n_sb_tail=10, n_b=n_b, n_b_tail=n_b_tail)


# ═══════════════════════════════════════════════════════════════════════
# p-value transform
# ═══════════════════════════════════════════════════════════════════════


class TestPValueToSignificance:

    def test_half_is_zero(self):
        assert pvalue_to_significance(0.5) == pytest.approx(0.0, abs=1e-12)

    def test_known_values(self):
        assert pvalue_to_significance(0.158655) == pytest.approx(1.0, abs=1e-5)
        assert pvalue_to_significance(2.86652e-7) == pytest.approx(5.0, abs=1e-4)

    def test_smaller_p_larger_z(self):
        assert pvalue_to_significance(0.01) > pvalue_to_significance(0.05) > 0

    def test_zero_is_infinite(self):
        assert pvalue_to_significance(0.0) == math.inf

    @pytest.mark.parametrize("p", [-0.1, 1.5])
    def test_outside_unit_interval_is_nan(self, p):
        assert math.isnan(pvalue_to_significance(p))


class TestSignificanceFromClb:

    def test_clb_half_without_error(self):
        sig, lo, hi = significance_from_clb(0.5, 0.0)
        assert sig == pytest.approx(0.0, abs=1e-12)
        assert lo == pytest.approx(0.0, abs=1e-12)
        assert hi == pytest.approx(0.0, abs=1e-12)

    def test_asymmetric_errors(self):
        sig, lo, hi = significance_from_clb(0.977, 0.0047)
        assert sig == pytest.approx(stats.norm.isf(0.023))
        assert lo < 0.0 < hi
        # Z grows faster as CLb approaches 1
        assert hi > -lo


# ═══════════════════════════════════════════════════════════════════════
# From the engine
# ═══════════════════════════════════════════════════════════════════════


class TestFromEngine:

    def test_basic(self, fixed_outcome_engine):
        engine = fixed_outcome_engine(_outcome(977))
        sol = hybrid_significance(engine)
        assert sol.clb == pytest.approx(0.977)
        assert sol.clb_error == pytest.approx(math.sqrt(0.977 * 0.023 / 1000))
        assert sol.significance == pytest.approx(stats.norm.isf(0.023))
        assert sol.sigma_low < 0.0 < sol.sigma_high
        assert sol.n_toys == 1000
        assert sol.label is None

    def test_engine_called_once_at_r_value(self, fixed_outcome_engine):
        engine = fixed_outcome_engine(_outcome(900))
        hybrid_significance(engine, r_value=2.5)
        assert engine.calls == [2.5]

    def test_settings_follow_test_statistic(self, curve_engine):
        engine = curve_engine(lambda r: 0.01, clb=0.9)
        sol = hybrid_significance(engine, test_statistic="TEV")
        assert engine.settings_seen[0].code == 3
        assert engine.settings_seen[0].poi_constant
        assert sol.clb == pytest.approx(0.9)
        assert sol.info['test_statistic'] == "TEV"

    def test_metadata(self, fixed_outcome_engine):
        sol = hybrid_significance(fixed_outcome_engine(_outcome(900)))
        assert sol.backend_name == 'cpu_hybrid'
        assert 'hypotest' in sol.timing
        assert sol.info['r_value'] == 1.0
        assert sol.info['read_results'] is False

    def test_summary(self, fixed_outcome_engine):
        sol = hybrid_significance(fixed_outcome_engine(_outcome(977)))
        text = sol.summary()
        assert "-- Hybrid --" in text
        assert "Significance:" in text
        assert "CLb 0.977" in text

    def test_design_passthrough(self, fixed_outcome_engine):
        design = HybridDesign.for_significance(fixed_outcome_engine(_outcome(977)))
        sol = hybrid_significance(design)
        assert sol.significance == pytest.approx(stats.norm.isf(0.023))

    def test_limit_design_rejected(self, fixed_outcome_engine):
        engine = fixed_outcome_engine(_outcome(977))
        with pytest.raises(ValidationError, match="significance"):
            hybrid_significance(HybridDesign.for_limit(engine))
        assert engine.calls == []


class TestFailures:

    def test_engine_returns_none(self, fixed_outcome_engine):
        with pytest.raises(HypoTestFailedError) as exc_info:
            hybrid_significance(fixed_outcome_engine(None), r_value=2.0)
        assert exc_info.value.r == 2.0

    def test_clb_one_is_not_finite(self, fixed_outcome_engine):
        with pytest.raises(NonFiniteResultError) as exc_info:
            hybrid_significance(fixed_outcome_engine(_outcome(1000)))
        assert exc_info.value.quantity == "significance"
        assert exc_info.value.value == math.inf

    def test_clb_zero_is_not_finite(self, fixed_outcome_engine):
        with pytest.raises(NonFiniteResultError):
            hybrid_significance(fixed_outcome_engine(_outcome(0)))

    def test_missing_engine(self):
        with pytest.raises(ConfigurationError) as exc_info:
            hybrid_significance()
        assert exc_info.value.option == "engine"

    def test_save_without_store(self, fixed_outcome_engine):
        with pytest.raises(ConfigurationError) as exc_info:
            hybrid_significance(fixed_outcome_engine(_outcome(900)), save_result=True)
        assert exc_info.value.option == "save_result"

    def test_read_without_store(self):
        with pytest.raises(ConfigurationError) as exc_info:
            hybrid_significance(read_results=True)
        assert exc_info.value.option == "read_results"


# ═══════════════════════════════════════════════════════════════════════
# Saving and reading outcomes
# ═══════════════════════════════════════════════════════════════════════


class TestResultStore:

    def test_save_uses_prefixed_label(self, fixed_outcome_engine):
        store = MemoryResultStore()
        sol = hybrid_significance(
            fixed_outcome_engine(_outcome(977)), store=store, save_result=True, seed=1,
        )
        assert sol.label.startswith("HybridResult_")
        assert store.labels() == [sol.label]

    def test_same_seed_same_label(self, fixed_outcome_engine):
        labels = []
        for _ in range(2):
            sol = hybrid_significance(
                fixed_outcome_engine(_outcome(977)),
                store=MemoryResultStore(), save_result=True, seed=7,
            )
            labels.append(sol.label)
        assert labels[0] == labels[1]

    def test_same_seed_one_store_keeps_both_runs(self, fixed_outcome_engine):
        store = MemoryResultStore()
        first = hybrid_significance(
            fixed_outcome_engine(_outcome(970)), store=store, save_result=True, seed=1,
        )
        second = hybrid_significance(
            fixed_outcome_engine(_outcome(980)), store=store, save_result=True, seed=1,
        )
        assert first.label != second.label
        assert second.label.startswith("HybridResult_")
        assert store.labels() == [first.label, second.label]

        merged = hybrid_significance(store=store, read_results=True)
        assert merged.n_toys == 2000
        assert merged.clb == pytest.approx(0.975)

    def test_read_and_save_does_not_double_count(self, fixed_outcome_engine):
        store = MemoryResultStore()
        hybrid_significance(
            fixed_outcome_engine(_outcome(977)), store=store, save_result=True, seed=1,
        )
        with pytest.raises(ConfigurationError) as exc_info:
            hybrid_significance(store=store, read_results=True, save_result=True)
        assert exc_info.value.option == "save_result"
        assert len(store) == 1
        assert hybrid_significance(store=store, read_results=True).n_toys == 1000

    def test_read_merges_saved_runs(self, fixed_outcome_engine):
        store = MemoryResultStore()
        hybrid_significance(
            fixed_outcome_engine(_outcome(970)), store=store, save_result=True, seed=1,
        )
        hybrid_significance(
            fixed_outcome_engine(_outcome(980)), store=store, save_result=True, seed=2,
        )
        assert len(store) == 2

        sol = hybrid_significance(store=store, read_results=True)
        assert sol.n_toys == 2000
        assert sol.clb == pytest.approx(0.975)
        assert sol.clb_error == pytest.approx(math.sqrt(0.975 * 0.025 / 2000))
        assert sol.info['read_results'] is True

    def test_read_ignores_other_labels(self):
        store = MemoryResultStore()
        store.save(_outcome(977), "HybridResult_1")
        store.save(_outcome(0), "OtherResult_1")
        sol = hybrid_significance(store=store, read_results=True)
        assert sol.clb == pytest.approx(0.977)
        assert sol.n_toys == 1000

    def test_read_from_empty_store(self):
        with pytest.raises(HypoTestFailedError):
            hybrid_significance(store=MemoryResultStore(), read_results=True)

    def test_read_does_not_call_engine(self, fixed_outcome_engine):
        store = MemoryResultStore()
        store.save(_outcome(977), "HybridResult_1")
        engine = fixed_outcome_engine(_outcome(500))
        sol = hybrid_significance(engine, store=store, read_results=True)
        assert engine.calls == []
        assert sol.clb == pytest.approx(0.977)
