"""
In-memory result store.

Keeps hypothesis test outcomes under opaque labels so independent runs
can be merged later by the significance estimator.
"""

from __future__ import annotations

from typing import Iterator

from pylimits.hybrid._common import HypoTestOutcome


class MemoryResultStore:
    """Dict-backed ResultStore; iteration follows insertion order."""

    def __init__(self):
        self._outcomes: dict[str, HypoTestOutcome] = {}

    def save(self, outcome: HypoTestOutcome, label: str) -> None:
        if label in self._outcomes:
            raise KeyError(f"label {label!r} already stored")
        self._outcomes[label] = outcome

    def load_all_matching(self, prefix: str) -> Iterator[HypoTestOutcome]:
        for label, outcome in self._outcomes.items():
            if label.startswith(prefix):
                yield outcome

    def __contains__(self, label: object) -> bool:
        return label in self._outcomes

    def labels(self) -> list[str]:
        return list(self._outcomes)

    def __len__(self) -> int:
        return len(self._outcomes)

    def __repr__(self) -> str:
        return f"MemoryResultStore(n_outcomes={len(self)})"
