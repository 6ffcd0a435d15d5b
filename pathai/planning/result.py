"""
Search Result Module
====================

Result, step snapshot and trace bookkeeping shared by every search strategy.
"""

import math
import time
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Set, Any

from ..grid import Coordinate


@dataclass(frozen=True)
class Step:
    """Snapshot taken immediately before a node is finalized"""
    current_node: Coordinate
    explored: FrozenSet[Coordinate]
    frontier: FrozenSet[Coordinate]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'current_node': list(self.current_node),
            'explored': sorted(list(p) for p in self.explored),
            'frontier': sorted(list(p) for p in self.frontier),
        }


@dataclass
class PathfindingResult:
    """
    Outcome of one search call.

    ``path_cost`` is the sum of the weights of the traversed cells (start
    excluded), or path length - 1 for BFS/DFS; ``inf`` when unreachable.
    ``elapsed_time`` is in milliseconds.
    """
    algorithm: str
    path: List[Coordinate] = field(default_factory=list)
    explored: Set[Coordinate] = field(default_factory=set)
    frontier: Set[Coordinate] = field(default_factory=set)
    nodes_expanded: int = 0
    path_cost: float = math.inf
    elapsed_time: float = 0.0
    steps: Optional[List[Step]] = None

    @property
    def path_found(self) -> bool:
        return len(self.path) > 0

    @property
    def path_length(self) -> int:
        return len(self.path)

    def to_dict(self, include_steps: bool = False) -> Dict[str, Any]:
        """JSON-friendly summary; infinite costs become None"""
        d = {
            'algorithm': self.algorithm,
            'path': [list(p) for p in self.path],
            'nodes_expanded': self.nodes_expanded,
            'path_cost': self.path_cost if math.isfinite(self.path_cost) else None,
            'elapsed_time': self.elapsed_time,
            'path_length': self.path_length,
            'path_found': self.path_found,
        }
        if include_steps and self.steps is not None:
            d['steps'] = [s.to_dict() for s in self.steps]
        return d


class SearchTrace:
    """
    Explored/frontier bookkeeping for a single search invocation.

    Keeps the two sets disjoint and records Step snapshots on request.
    """

    def __init__(self, algorithm: str, record_steps: bool = True):
        self.algorithm = algorithm
        self.record_steps = record_steps
        self.explored: Set[Coordinate] = set()
        self.frontier: Set[Coordinate] = set()
        self.steps: List[Step] = []
        self._t0 = time.perf_counter()

    def discover(self, pos: Coordinate):
        """Position known but not finalized"""
        if pos not in self.explored:
            self.frontier.add(pos)

    def reopen(self, pos: Coordinate):
        """Finalized position whose cost estimate changed again"""
        self.explored.discard(pos)
        self.frontier.add(pos)

    def snapshot(self, current: Coordinate):
        if self.record_steps:
            self.steps.append(Step(current, frozenset(self.explored), frozenset(self.frontier)))

    def finalize(self, pos: Coordinate):
        self.frontier.discard(pos)
        self.explored.add(pos)

    def result(self, path: Optional[List[Coordinate]] = None,
               path_cost: float = math.inf) -> PathfindingResult:
        """Package the trace; an empty path always reports infinite cost"""
        path = list(path) if path else []
        return PathfindingResult(
            algorithm=self.algorithm,
            path=path,
            explored=set(self.explored),
            frontier=set(self.frontier),
            nodes_expanded=len(self.explored),
            path_cost=float(path_cost) if path else math.inf,
            elapsed_time=(time.perf_counter() - self._t0) * 1000.0,
            steps=list(self.steps) if self.record_steps else None,
        )


def reconstruct_path(came_from: Dict[Coordinate, Coordinate], current: Coordinate) -> List[Coordinate]:
    """Reconstruct path from came_from dict"""
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path
