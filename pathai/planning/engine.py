"""
Search Engine Module
====================

Algorithm selection, input/output validation and multi-algorithm comparison.
The engine is stateless: every call owns its own open/closed structures,
so it is safe to call from several threads at once.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import List, Optional, Sequence, Union

from ..config import SearchConfig
from ..errors import UnknownAlgorithmError, validate_grid_state, validate_algorithm_result
from ..grid import Grid, Coordinate, as_coordinate
from ..metrics.comparison import ComparisonResult
from .heuristics import HeuristicFn, get_heuristic
from .result import PathfindingResult
from .algorithms import (
    breadth_first_search,
    depth_first_search,
    dijkstra,
    a_star,
    greedy_best_first,
    d_star_lite,
)

logger = logging.getLogger(__name__)


def _normalise(name: str) -> str:
    return re.sub(r'[^a-z0-9]', '', name.replace('*', 'star').lower())


class Algorithm(str, Enum):
    """Search strategies; values are the display names"""
    A_STAR = 'A*'
    DIJKSTRA = 'Dijkstra'
    BFS = 'BFS'
    DFS = 'DFS'
    GREEDY_BEST_FIRST = 'Greedy Best-First'
    D_STAR_LITE = 'D* Lite'

    @classmethod
    def from_name(cls, name: Union[str, 'Algorithm']) -> 'Algorithm':
        """
        Resolve display names and identifier spellings.

        'A*', 'astar', 'AStar', 'a_star', 'Greedy Best-First',
        'GreedyBestFirst', 'dstarlite' ... all resolve.
        """
        if isinstance(name, cls):
            return name
        key = _normalise(str(name))
        for member in cls:
            if key in (_normalise(member.value), _normalise(member.name)):
                return member
        raise UnknownAlgorithmError('UNKNOWN_ALGORITHM', f"Unknown algorithm: {name}",
                                    {'available': [m.value for m in cls]})


def _dispatch(algorithm: Algorithm, grid: Grid, start: Coordinate, end: Coordinate,
              heuristic: HeuristicFn, record_steps: bool,
              config: SearchConfig) -> PathfindingResult:
    if algorithm == Algorithm.A_STAR:
        return a_star(grid, start, end, heuristic, record_steps)
    elif algorithm == Algorithm.DIJKSTRA:
        return dijkstra(grid, start, end, heuristic, record_steps)
    elif algorithm == Algorithm.BFS:
        return breadth_first_search(grid, start, end, heuristic, record_steps)
    elif algorithm == Algorithm.DFS:
        return depth_first_search(grid, start, end, heuristic, record_steps)
    elif algorithm == Algorithm.GREEDY_BEST_FIRST:
        return greedy_best_first(grid, start, end, heuristic, record_steps)
    elif algorithm == Algorithm.D_STAR_LITE:
        return d_star_lite(grid, start, end, heuristic, record_steps,
                           iteration_factor=config.dstar_iteration_factor)
    else:
        raise UnknownAlgorithmError('UNKNOWN_ALGORITHM', f"Unknown algorithm: {algorithm}")


class SearchEngine:
    """
    Runs any of the six strategies on a grid.

    Features:
    - Name-based algorithm and heuristic selection
    - Validation of inputs before and results after each search
    - Optional parallel comparison of all strategies
    """

    def __init__(self, config: Optional[SearchConfig] = None):
        self.config = config or SearchConfig()

    def run(self, algorithm: Union[str, Algorithm], grid: Grid,
            start: Coordinate, end: Coordinate,
            heuristic: Optional[str] = None,
            record_steps: Optional[bool] = None) -> PathfindingResult:
        """
        Run one search.

        Args:
            algorithm: Algorithm member or name
            grid: Grid to search (never mutated)
            start: Start coordinate (row, col)
            end: End coordinate (row, col)
            heuristic: 'manhattan', 'euclidean' or 'diagonal'
                (default from config)
            record_steps: Record a Step before each finalization
                (default from config)

        Returns:
            PathfindingResult; an unreachable end gives an empty path
            with infinite cost

        Raises:
            InvalidGridError, MissingPointsError, UnknownAlgorithmError,
            UnknownHeuristicError, MalformedResultError
        """
        validate_grid_state(grid, start, end)
        algo = Algorithm.from_name(algorithm)
        h = get_heuristic(heuristic or self.config.default_heuristic, self.config.diagonal_cost)
        if record_steps is None:
            record_steps = self.config.record_steps

        start, end = as_coordinate(start), as_coordinate(end)
        result = _dispatch(algo, grid, start, end, h, record_steps, self.config)
        validate_algorithm_result(result)

        logger.debug("%s %s->%s: found=%s cost=%s expanded=%d %.2fms",
                     algo.value, start, end, result.path_found, result.path_cost,
                     result.nodes_expanded, result.elapsed_time)
        return result

    def compare(self, grid: Grid, start: Coordinate, end: Coordinate,
                heuristic: Optional[str] = None,
                algorithms: Optional[Sequence[Union[str, Algorithm]]] = None,
                record_steps: bool = False) -> ComparisonResult:
        """Run several strategies on the same grid and summarise them"""
        algos: List[Algorithm] = [Algorithm.from_name(a) for a in (algorithms or list(Algorithm))]
        comparison = ComparisonResult()

        if self.config.parallel_compare and len(algos) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                futures = [executor.submit(self.run, a, grid, start, end, heuristic, record_steps)
                           for a in algos]
                # Collected in submission order so the comparison stays deterministic
                for future in futures:
                    comparison.add(future.result())
        else:
            for a in algos:
                comparison.add(self.run(a, grid, start, end, heuristic, record_steps))

        return comparison


def run_search(algorithm: Union[str, Algorithm], grid: Grid,
               start: Coordinate, end: Coordinate,
               heuristic: str = 'manhattan',
               record_steps: bool = True,
               config: Optional[SearchConfig] = None) -> PathfindingResult:
    """Convenience wrapper around SearchEngine.run"""
    return SearchEngine(config).run(algorithm, grid, start, end, heuristic, record_steps)


def compare_algorithms(grid: Grid, start: Coordinate, end: Coordinate,
                       heuristic: str = 'manhattan',
                       algorithms: Optional[Sequence[Union[str, Algorithm]]] = None,
                       config: Optional[SearchConfig] = None) -> ComparisonResult:
    """Convenience wrapper around SearchEngine.compare"""
    return SearchEngine(config).compare(grid, start, end, heuristic, algorithms)
