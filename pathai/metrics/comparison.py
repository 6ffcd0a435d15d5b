"""
Comparison Metrics Module
=========================

Side-by-side summaries of several search strategies on the same grid.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from ..planning.result import PathfindingResult


@dataclass
class AlgorithmRunSummary:
    """Per-algorithm numbers from one search call"""
    algorithm: str
    nodes_expanded: int = 0
    path_cost: float = math.inf
    elapsed_time: float = 0.0  # ms
    path_length: int = 0
    path_found: bool = False

    @classmethod
    def from_result(cls, result: 'PathfindingResult') -> 'AlgorithmRunSummary':
        return cls(
            algorithm=result.algorithm,
            nodes_expanded=result.nodes_expanded,
            path_cost=result.path_cost,
            elapsed_time=result.elapsed_time,
            path_length=result.path_length,
            path_found=result.path_found,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'algorithm': self.algorithm,
            'nodes_expanded': self.nodes_expanded,
            'path_cost': self.path_cost if math.isfinite(self.path_cost) else None,
            'elapsed_time': self.elapsed_time,
            'path_length': self.path_length,
            'path_found': self.path_found,
        }


@dataclass
class ComparisonResult:
    """
    Results of several strategies on one grid.

    Tracks:
    - The full PathfindingResult of each strategy, in run order
    - Fastest (lowest elapsed time)
    - Most efficient (fewest nodes expanded among successful runs)
    - Cheapest (lowest finite path cost)
    """
    results: Dict[str, 'PathfindingResult'] = field(default_factory=dict)

    def add(self, result: 'PathfindingResult'):
        self.results[result.algorithm] = result

    @property
    def summaries(self) -> List[AlgorithmRunSummary]:
        return [AlgorithmRunSummary.from_result(r) for r in self.results.values()]

    def _best(self, key, successful_only: bool = True) -> Optional[str]:
        best_name = None
        best_value = math.inf
        for name, result in self.results.items():
            if successful_only and not result.path_found:
                continue
            value = key(result)
            if value < best_value:
                best_value = value
                best_name = name
        return best_name

    @property
    def fastest(self) -> Optional[str]:
        return self._best(lambda r: r.elapsed_time)

    @property
    def most_efficient(self) -> Optional[str]:
        return self._best(lambda r: r.nodes_expanded)

    @property
    def cheapest(self) -> Optional[str]:
        return self._best(lambda r: r.path_cost)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'algorithms': [s.to_dict() for s in self.summaries],
            'fastest': self.fastest,
            'most_efficient': self.most_efficient,
            'cheapest': self.cheapest,
        }
