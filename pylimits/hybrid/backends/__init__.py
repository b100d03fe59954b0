"""
Hybrid limit backends.

Available backends:
    CPUHybridBackend: sequential reference implementation
"""

from pylimits.hybrid.backends.cpu import CPUHybridBackend

__all__ = [
    "CPUHybridBackend",
]
