"""
Pipeline Module
===============

Benchmark runner over random scenarios.
"""

from .runner import BenchmarkRunner, ScenarioResult, AggregatedResults

__all__ = [
    'BenchmarkRunner',
    'ScenarioResult',
    'AggregatedResults',
]
