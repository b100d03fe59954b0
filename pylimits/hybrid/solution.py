"""
Solution wrappers for hybrid limit results.

LimitSolution and SignificanceSolution wrap Result[P] and provide
convenient accessors and the classic HypoTestInverter / Hybrid report.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

from pylimits.core.result import Result
from pylimits.hybrid._common import LimitParams, SignificanceParams

if TYPE_CHECKING:
    from pylimits.hybrid.design import HybridDesign


@dataclass
class LimitSolution:
    """
    User-facing upper limit on r.

    summary() produces the HypoTestInverter report.
    """
    _result: Result[LimitParams]
    _design: 'HybridDesign'

    # --- Core fields ---

    @property
    def limit(self) -> float:
        """Upper limit on r."""
        return self._result.params.limit

    @property
    def half_width(self) -> float:
        """Half width of the final bracket, the uncertainty on limit."""
        return self._result.params.half_width

    @property
    def r_min(self) -> float:
        return self._result.params.r_min

    @property
    def r_max(self) -> float:
        return self._result.params.r_max

    @property
    def interval(self) -> tuple[float, float] | None:
        """Refined (r_min, r_max) around the limit, or None if not requested."""
        return self._result.params.interval

    @property
    def status(self) -> str:
        """Terminal search state: "converged" or "lucky"."""
        return self._result.params.status

    @property
    def lucky(self) -> bool:
        return self._result.params.status == "lucky"

    @property
    def confidence_level(self) -> float:
        return self._result.params.confidence_level

    @property
    def rule(self) -> str:
        return self._result.params.rule

    # --- Metadata ---

    @property
    def n_evaluations(self) -> int:
        """Number of points in r at which the statistic was evaluated."""
        return self._result.info['n_evaluations']

    @property
    def trace(self) -> tuple[tuple[float, float], ...]:
        """Bracket (r_min, r_max) at the start of each bisection step."""
        return self._result.info['trace']

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Display ---

    def summary(self) -> str:
        """
        HypoTestInverter report.

        Produces:
             -- HypoTestInverter --
            Limit: r < 3.00195 +/- 0.0390625 @ 95% CL
        """
        lines = [
            "",
            " -- HypoTestInverter -- ",
            f"Limit: r < {self.limit:g} +/- {self.half_width:g} "
            f"@ {self.confidence_level * 100:g}% CL",
        ]
        if self.interval is not None:
            lo, hi = self.interval
            lines.append(f"Interval: [{lo:g}, {hi:g}]")
        lines.append(
            f"Rule: {self.rule}, status: {self.status}, "
            f"evaluations: {self.n_evaluations}"
        )
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"LimitSolution(limit={self.limit:.4g}, "
            f"half_width={self.half_width:.4g}, status={self.status!r})"
        )


@dataclass
class SignificanceSolution:
    """
    User-facing significance estimate.

    summary() produces the Hybrid significance report.
    """
    _result: Result[SignificanceParams]
    _design: 'HybridDesign'

    @property
    def significance(self) -> float:
        """One-sided Gaussian significance of the observation."""
        return self._result.params.significance

    @property
    def sigma_low(self) -> float:
        """Shift of the significance when CLb drops by its error (<= 0)."""
        return self._result.params.sigma_low

    @property
    def sigma_high(self) -> float:
        """Shift of the significance when CLb rises by its error (>= 0)."""
        return self._result.params.sigma_high

    @property
    def clb(self) -> float:
        return self._result.params.clb

    @property
    def clb_error(self) -> float:
        return self._result.params.clb_error

    @property
    def n_toys(self) -> int:
        """Background-only toys behind CLb."""
        return self._result.params.n_toys

    @property
    def label(self) -> str | None:
        """Label under which the outcome was saved, if it was."""
        return self._result.params.label

    # --- Metadata ---

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Display ---

    def summary(self) -> str:
        """
        Hybrid significance report.

        Produces:
             -- Hybrid --
            Significance: 2.1 -0.05/+0.06 (CLb 0.982 +/- 0.0042)
        """
        return "\n".join([
            "",
            " -- Hybrid -- ",
            f"Significance: {self.significance:g}  {self.sigma_low:g}/+"
            f"{self.sigma_high:g} (CLb {self.clb:g} +/- {self.clb_error:g})",
        ])

    def __repr__(self) -> str:
        return (
            f"SignificanceSolution(significance={self.significance:.4g}, "
            f"clb={self.clb:.4g})"
        )
