"""
Planning Module
===============

Heuristics, the six search strategies, the search engine and the
dynamic local-repair replanner.
"""

from .heuristics import HeuristicKind, HeuristicFn, manhattan, euclidean, diagonal, get_heuristic
from .result import Step, PathfindingResult, SearchTrace, reconstruct_path
from .algorithms import (
    SearchNode,
    breadth_first_search,
    depth_first_search,
    dijkstra,
    a_star,
    greedy_best_first,
    d_star_lite,
)
from .engine import Algorithm, SearchEngine, run_search, compare_algorithms
from .replanner import DynamicReplanner, ObstacleChanges, ReplanningResult

__all__ = [
    'HeuristicKind',
    'HeuristicFn',
    'manhattan',
    'euclidean',
    'diagonal',
    'get_heuristic',
    'Step',
    'PathfindingResult',
    'SearchTrace',
    'reconstruct_path',
    'SearchNode',
    'breadth_first_search',
    'depth_first_search',
    'dijkstra',
    'a_star',
    'greedy_best_first',
    'd_star_lite',
    'Algorithm',
    'SearchEngine',
    'run_search',
    'compare_algorithms',
    'DynamicReplanner',
    'ObstacleChanges',
    'ReplanningResult',
]
