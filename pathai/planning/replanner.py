"""
Dynamic Replanner Module
========================

Obstacle-change detection and bounded local repair of a previously
computed path. The repair is a greedy walk toward the goal, cheaper than
a full re-search and not optimal.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Any, Dict

import numpy as np

from ..config import ReplanConfig
from ..errors import validate_grid_state
from ..grid import Grid, Coordinate, as_coordinate
from .heuristics import manhattan

logger = logging.getLogger(__name__)


@dataclass
class ObstacleChanges:
    """Wall cells that appeared or disappeared since the last snapshot"""
    added: List[Coordinate] = field(default_factory=list)
    removed: List[Coordinate] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.added) + len(self.removed)


@dataclass
class ReplanningResult:
    """Outcome of one replan call; ``elapsed_time`` is in milliseconds"""
    new_path: List[Coordinate]
    replanned: bool
    elapsed_time: float
    obstacle_delta_count: int
    added_walls: List[Coordinate] = field(default_factory=list)
    removed_walls: List[Coordinate] = field(default_factory=list)
    path_blocked: bool = False
    block_point: Optional[Coordinate] = None
    reaches_goal: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'new_path': [list(p) for p in self.new_path],
            'replanned': self.replanned,
            'elapsed_time': self.elapsed_time,
            'obstacle_delta_count': self.obstacle_delta_count,
            'added_walls': [list(p) for p in self.added_walls],
            'removed_walls': [list(p) for p in self.removed_walls],
            'path_blocked': self.path_blocked,
            'block_point': list(self.block_point) if self.block_point else None,
            'reaches_goal': self.reaches_goal,
        }


class DynamicReplanner:
    """
    Stateful local-repair replanner.

    Keeps the wall layout and path of the previous call so that the next
    call can report what changed. Every public method holds one re-entrant
    lock; a single instance may be shared between threads.
    """

    def __init__(self, config: Optional[ReplanConfig] = None):
        self.config = config or ReplanConfig()
        self._lock = threading.RLock()
        self._previous_grid: Optional[Grid] = None
        self._previous_path: List[Coordinate] = []
        self._replan_count = 0

    @property
    def replan_count(self) -> int:
        with self._lock:
            return self._replan_count

    @property
    def previous_path(self) -> List[Coordinate]:
        with self._lock:
            return list(self._previous_path)

    def detect_obstacle_changes(self, grid: Grid,
                                previous: Optional[Grid] = None) -> ObstacleChanges:
        """
        Diff wall cells against ``previous`` (default: stored snapshot).

        Without a comparable snapshot every current wall counts as added.
        """
        with self._lock:
            previous = previous if previous is not None else self._previous_grid
            current = grid.wall_mask

            if previous is None or previous.shape != grid.shape:
                added = np.argwhere(current)
                removed = np.empty((0, 2), dtype=int)
            else:
                before = previous.wall_mask
                added = np.argwhere(current & ~before)
                removed = np.argwhere(~current & before)

            return ObstacleChanges(
                added=[(int(r), int(c)) for r, c in added],
                removed=[(int(r), int(c)) for r, c in removed],
            )

    def is_path_blocked(self, grid: Grid,
                        path: Sequence[Coordinate]) -> Tuple[bool, Optional[int]]:
        """Return (blocked, index of the first wall cell on the path)"""
        with self._lock:
            for i, pos in enumerate(path):
                r, c = as_coordinate(pos)
                if not grid.in_bounds(r, c) or grid.is_wall(r, c):
                    return True, i
            return False, None

    def find_alternative_path(self, grid: Grid, path: Sequence[Coordinate],
                              start: Coordinate, end: Coordinate) -> List[Coordinate]:
        """
        Repair ``path`` from the cell before its first blocked position.

        Returns the prior path when nothing on it is blocked, an empty list
        when the anchor has no free neighbour, and otherwise the unblocked
        prefix followed by a greedy continuation (which may stop short of
        ``end`` at a dead end).
        """
        with self._lock:
            path = [as_coordinate(p) for p in path]
            start, end = as_coordinate(start), as_coordinate(end)

            blocked, block_index = self.is_path_blocked(grid, path)
            if not blocked:
                return path

            if block_index > 0:
                anchor = path[block_index - 1]
                prefix = path[:block_index]
            else:
                anchor = start
                prefix = [start] if grid.is_valid(*start) else []

            visited = set(prefix)
            visited.add(anchor)

            continuation = []
            current = anchor
            limit = grid.rows * grid.cols
            while current != end:
                next_step = None
                best = float('inf')
                for nb in self._neighbors(grid, current):
                    if nb in visited or grid.is_wall(*nb):
                        continue
                    d = manhattan(nb, end)
                    if d < best:
                        best = d
                        next_step = nb

                if next_step is None:
                    break

                visited.add(next_step)
                continuation.append(next_step)
                current = next_step

                if len(visited) > limit:
                    break

            if not continuation:
                if anchor == end:
                    return prefix
                logger.debug("No free neighbour around anchor %s", anchor)
                return []

            return prefix + continuation

    def _neighbors(self, grid: Grid, pos: Coordinate) -> List[Coordinate]:
        if self.config.diagonal_moves:
            return grid.neighbors(pos)
        return grid.orthogonal_neighbors(pos)

    def replan(self, grid: Grid, prior_path: Sequence[Coordinate],
               start: Coordinate, end: Coordinate) -> ReplanningResult:
        """
        Detect obstacle changes and repair ``prior_path`` if needed.

        Args:
            grid: Current grid (copied into the snapshot, never mutated)
            prior_path: Path computed before the change
            start: Start coordinate
            end: Goal coordinate

        Returns:
            ReplanningResult; ``replanned`` is False when neither the
            walls nor the path's traversability changed
        """
        with self._lock:
            validate_grid_state(grid, start, end)
            t0 = time.perf_counter()
            prior = [as_coordinate(p) for p in prior_path]
            end = as_coordinate(end)

            changes = self.detect_obstacle_changes(grid)
            blocked, block_index = self.is_path_blocked(grid, prior)

            new_path = prior
            replanned = False
            if blocked or changes.count > 0:
                new_path = self.find_alternative_path(grid, prior, start, end)
                replanned = True
                self._replan_count += 1

            elapsed = (time.perf_counter() - t0) * 1000.0

            self._previous_grid = grid.copy()
            self._previous_path = list(new_path)

            if replanned:
                logger.info("Replanned (%d wall changes, blocked=%s): %d -> %d cells",
                            changes.count, blocked, len(prior), len(new_path))

            return ReplanningResult(
                new_path=list(new_path),
                replanned=replanned,
                elapsed_time=elapsed,
                obstacle_delta_count=changes.count,
                added_walls=changes.added,
                removed_walls=changes.removed,
                path_blocked=blocked,
                block_point=prior[block_index] if blocked else None,
                reaches_goal=bool(new_path) and new_path[-1] == end,
            )

    def reset(self):
        """Forget the stored snapshot, path and counter"""
        with self._lock:
            self._previous_grid = None
            self._previous_path = []
            self._replan_count = 0
