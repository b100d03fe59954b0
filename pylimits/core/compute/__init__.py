"""
Shared compute infrastructure for PyLimits.

IMPORTANT: This is NOT where domain-specific backends live. Those go in
{domain}/backends/. This module contains shared infrastructure only.

Submodules:
    timing: Execution timing utilities
"""

from pylimits.core.compute.timing import Timer, timed

__all__ = [
    "Timer",
    "timed",
]
