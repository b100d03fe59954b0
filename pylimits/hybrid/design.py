"""
Design class for hybrid frequentist-Bayesian limits.

HybridDesign encapsulates everything the backend needs to run a limit
search or a significance estimate: the engine, the accuracy targets and
the rule/test statistic choice. Immutable, validated at construction, so
a bad option fails before a single toy is thrown.
"""

from __future__ import annotations

from dataclasses import dataclass

from pylimits.core.exceptions import ConfigurationError
from pylimits.core.protocols import HypoTestEngine, ResultStore
from pylimits.core.validation import (
    check_choice,
    check_non_negative,
    check_open_unit_interval,
    check_positive,
    check_positive_int,
)
from pylimits.hybrid._common import (
    Rule,
    TestStatistic,
    TestStatSettings,
    TEST_STATISTIC_SETTINGS,
)

VALID_RULES = tuple(rule.value for rule in Rule)
VALID_TEST_STATISTICS = tuple(ts.value for ts in TestStatistic)

# Label prefix under which hypothesis test outcomes are stored.
RESULT_LABEL_PREFIX = "HybridResult_"


@dataclass(frozen=True)
class HybridDesign:
    """
    Frozen configuration of one hybrid limit or significance run.

    Attributes:
        engine: Hypothesis test engine; None only when reading stored results.
        mode: "limit" or "significance".
        n_toys: Toys per hypothesis per engine call.
        cls_accuracy: Absolute accuracy on the driving statistic.
        r_abs_accuracy: Absolute accuracy on r.
        r_rel_accuracy: Relative accuracy on r.
        rule: CLs or CLsplusb.
        test_statistic: LEP, TEV or Atlas.
        confidence_level: e.g. 0.95 for a 95% CL limit.
        r_interval: Refine the bracket edges around the limit.
        r_max: Initial upper bound on r.
        hint: Optional guess of the limit, shrinks the initial bound.
        max_resamples: Cap on extra engine calls per adaptive evaluation.
        r_value: Signal strength at which the significance is computed.
        store: Result store for saving/reading outcomes.
        save_result: Save the significance outcome to the store.
        read_results: Merge stored outcomes instead of throwing toys.
        seed: Seed for the storage label generator.
    """
    engine: HypoTestEngine | None
    mode: str
    n_toys: int
    cls_accuracy: float
    r_abs_accuracy: float
    r_rel_accuracy: float
    rule: Rule
    test_statistic: TestStatistic
    confidence_level: float
    r_interval: bool
    r_max: float
    hint: float | None
    max_resamples: int
    r_value: float
    store: ResultStore | None
    save_result: bool
    read_results: bool
    seed: int | None

    @classmethod
    def for_limit(
        cls,
        engine: HypoTestEngine,
        *,
        n_toys: int = 500,
        cls_accuracy: float = 0.005,
        r_abs_accuracy: float = 0.1,
        r_rel_accuracy: float = 0.05,
        rule: str = "CLs",
        test_statistic: str = "LEP",
        confidence_level: float = 0.95,
        r_interval: bool = False,
        r_max: float = 20.0,
        hint: float | None = None,
        max_resamples: int = 100,
    ) -> HybridDesign:
        """
        Create a limit-search design with validation.

        Args:
            engine: Object implementing HypoTestEngine.
            n_toys: Toys per hypothesis per call. Must be >= 1.
            cls_accuracy: Accuracy on CLs (or CLs+b) that ends the search
                early and stops adaptive resampling. Must be > 0.
            r_abs_accuracy: Absolute accuracy on r. Must be > 0.
            r_rel_accuracy: Relative accuracy on r. Must be >= 0.
            rule: "CLs" (default) or "CLsplusb".
            test_statistic: "LEP" (default), "TEV" or "Atlas".
            confidence_level: Confidence level in (0, 1).
            r_interval: Also tighten both bracket edges around the limit.
            r_max: Initial upper bound on r. Must be > 0.
            hint: Expected limit; if positive the initial bound becomes
                min(3 * hint, r_max).
            max_resamples: Extra engine calls allowed per evaluation.

        Returns:
            Validated HybridDesign.

        Raises:
            ConfigurationError: If any option is invalid.
        """
        _check_engine(engine)
        if hint is not None:
            hint = float(hint)
        return cls(
            engine=engine,
            mode="limit",
            n_toys=check_positive_int(n_toys, "n_toys"),
            cls_accuracy=check_positive(cls_accuracy, "cls_accuracy"),
            r_abs_accuracy=check_positive(r_abs_accuracy, "r_abs_accuracy"),
            r_rel_accuracy=check_non_negative(r_rel_accuracy, "r_rel_accuracy"),
            rule=Rule(check_choice(rule, VALID_RULES, "rule")),
            test_statistic=TestStatistic(
                check_choice(test_statistic, VALID_TEST_STATISTICS, "test_statistic")
            ),
            confidence_level=check_open_unit_interval(
                confidence_level, "confidence_level"
            ),
            r_interval=bool(r_interval),
            r_max=check_positive(r_max, "r_max"),
            hint=hint,
            max_resamples=check_positive_int(max_resamples, "max_resamples"),
            r_value=1.0,
            store=None,
            save_result=False,
            read_results=False,
            seed=None,
        )

    @classmethod
    def for_significance(
        cls,
        engine: HypoTestEngine | None = None,
        *,
        n_toys: int = 500,
        test_statistic: str = "LEP",
        r_value: float = 1.0,
        store: ResultStore | None = None,
        save_result: bool = False,
        read_results: bool = False,
        seed: int | None = None,
    ) -> HybridDesign:
        """
        Create a significance design with validation.

        Args:
            engine: Object implementing HypoTestEngine. May be None when
                read_results is True.
            n_toys: Toys per hypothesis. Must be >= 1.
            test_statistic: "LEP" (default), "TEV" or "Atlas".
            r_value: Signal strength of the alternate hypothesis.
            store: Result store used by save_result / read_results.
            save_result: Save the outcome under a fresh random label.
            read_results: Merge every stored outcome instead of running toys.
            seed: Seed for the label generator.

        Raises:
            ConfigurationError: If any option is invalid, a store option
                is requested without a store, or save_result is combined
                with read_results.
        """
        if (save_result or read_results) and store is None:
            option = "save_result" if save_result else "read_results"
            raise ConfigurationError(
                f"{option}: requires a result store, but store is None",
                option=option,
            )
        if read_results and save_result:
            raise ConfigurationError(
                "save_result: cannot save an outcome merged from the store "
                "it is read from, the next read would count its toys twice",
                option="save_result",
            )
        if store is not None and not isinstance(store, ResultStore):
            raise ConfigurationError(
                f"store: {type(store).__name__} does not implement "
                f"save(), load_all_matching() and __contains__()",
                option="store",
            )
        if not read_results:
            _check_engine(engine)
        return cls(
            engine=engine,
            mode="significance",
            n_toys=check_positive_int(n_toys, "n_toys"),
            cls_accuracy=0.005,
            r_abs_accuracy=0.1,
            r_rel_accuracy=0.05,
            rule=Rule.CLS,
            test_statistic=TestStatistic(
                check_choice(test_statistic, VALID_TEST_STATISTICS, "test_statistic")
            ),
            confidence_level=0.95,
            r_interval=False,
            r_max=20.0,
            hint=None,
            max_resamples=100,
            r_value=float(r_value),
            store=store,
            save_result=bool(save_result),
            read_results=bool(read_results),
            seed=seed,
        )

    @property
    def use_cls(self) -> bool:
        return self.rule is Rule.CLS

    @property
    def cls_target(self) -> float:
        """Tail probability at which the limit is set."""
        return 1.0 - self.confidence_level

    @property
    def settings(self) -> TestStatSettings:
        return TEST_STATISTIC_SETTINGS[self.test_statistic]

    @property
    def initial_r_max(self) -> float:
        """Starting upper bound, tightened by the hint when one is given."""
        if self.hint is not None and self.hint > 0.0:
            return min(3.0 * self.hint, self.r_max)
        return self.r_max


def _check_engine(engine) -> None:
    if engine is None:
        raise ConfigurationError(
            "engine: a hypothesis test engine is required", option="engine"
        )
    if not isinstance(engine, HypoTestEngine):
        raise ConfigurationError(
            f"engine: {type(engine).__name__} does not implement run_toys()",
            option="engine",
        )
