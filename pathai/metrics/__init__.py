"""
Metrics Module
==============

Per-algorithm run summaries and multi-algorithm comparisons.
"""

from .comparison import AlgorithmRunSummary, ComparisonResult

__all__ = [
    'AlgorithmRunSummary',
    'ComparisonResult',
]
