"""
PyLimits: hybrid CLs limits and significances for Python.

Drives a toy-based hypothesis test engine to find the signal strength at
which CLs (or CLs+b) crosses a target confidence level.

Submodules:
    hybrid: Limit search and significance estimation
    core: Exceptions, result envelope, engine and store protocols
"""

__version__ = "0.1.0"

from pylimits import hybrid
from pylimits.hybrid import hybrid_limit, hybrid_significance

__all__ = [
    "__version__",
    "hybrid",
    "hybrid_limit",
    "hybrid_significance",
]
