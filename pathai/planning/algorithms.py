"""
Search Algorithms Module
========================

Six grid search strategies sharing one signature and one result shape:

- Breadth-First Search (FIFO, unit step cost)
- Depth-First Search (LIFO, unit step cost)
- Dijkstra (linear-scan minimum over all free cells)
- A* (minimum f = g + h)
- Greedy Best-First (minimum h)
- D* Lite (g/rhs consistency with lexicographic keys)

Every strategy moves 8-directionally, charges the weight of the cell being
entered, emits a Step before finalizing a node and reports an empty path
with infinite cost when the end is unreachable.
"""

import logging
import math
from collections import deque
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..grid import Grid, Coordinate
from .heuristics import HeuristicFn, manhattan
from .result import PathfindingResult, SearchTrace, reconstruct_path

logger = logging.getLogger(__name__)

INF = math.inf


@dataclass
class SearchNode:
    """Open-set entry; ``parent`` is a position, never a node reference"""
    position: Coordinate
    g: float
    h: float
    f: float
    parent: Optional[Coordinate] = None


def _endpoints_valid(grid: Grid, start: Coordinate, end: Coordinate) -> bool:
    return grid.is_valid(*start) and grid.is_valid(*end)


# ==================== Uninformed ====================

def breadth_first_search(grid: Grid, start: Coordinate, end: Coordinate,
                         heuristic: Optional[HeuristicFn] = None,
                         record_steps: bool = True) -> PathfindingResult:
    """FIFO expansion; optimal only when every step costs the same"""
    return _unweighted_search(grid, start, end, 'BFS', record_steps, lifo=False)


def depth_first_search(grid: Grid, start: Coordinate, end: Coordinate,
                       heuristic: Optional[HeuristicFn] = None,
                       record_steps: bool = True) -> PathfindingResult:
    """LIFO expansion; not optimal"""
    return _unweighted_search(grid, start, end, 'DFS', record_steps, lifo=True)


def _unweighted_search(grid: Grid, start: Coordinate, end: Coordinate,
                       name: str, record_steps: bool, lifo: bool) -> PathfindingResult:
    trace = SearchTrace(name, record_steps)
    if not _endpoints_valid(grid, start, end):
        return trace.result()

    pending = deque([start])
    visited = {start}
    came_from: Dict[Coordinate, Coordinate] = {}
    trace.discover(start)

    while pending:
        current = pending.pop() if lifo else pending.popleft()

        trace.snapshot(current)
        trace.finalize(current)

        if current == end:
            path = reconstruct_path(came_from, end)
            return trace.result(path, len(path) - 1)

        for nb in grid.neighbors(current):
            if nb in visited or grid.is_wall(*nb):
                continue
            visited.add(nb)
            came_from[nb] = current
            pending.append(nb)
            trace.discover(nb)

    return trace.result()


# ==================== Dijkstra ====================

def dijkstra(grid: Grid, start: Coordinate, end: Coordinate,
             heuristic: Optional[HeuristicFn] = None,
             record_steps: bool = True) -> PathfindingResult:
    """
    Dijkstra with every free cell registered up front.

    The minimum is found by a linear scan over the unsettled cells
    (O(V) per pop); the first cell in row-major order wins ties.
    """
    trace = SearchTrace('Dijkstra', record_steps)
    if not _endpoints_valid(grid, start, end):
        return trace.result()

    distances: Dict[Coordinate, float] = {start: 0.0}
    previous: Dict[Coordinate, Coordinate] = {}

    # dict keeps row-major insertion order for the scan
    unsettled = dict.fromkeys(grid.free_cells())
    for pos in unsettled:
        trace.discover(pos)

    while unsettled:
        current = None
        min_dist = INF
        for pos in unsettled:
            d = distances.get(pos, INF)
            if d < min_dist:
                min_dist = d
                current = pos

        if current is None:
            break

        trace.snapshot(current)
        del unsettled[current]
        trace.finalize(current)

        if current == end:
            return trace.result(reconstruct_path(previous, end), min_dist)

        for nb in grid.neighbors(current):
            if nb not in unsettled:
                continue
            alt = min_dist + grid.weight(*nb)
            if alt < distances.get(nb, INF):
                distances[nb] = alt
                previous[nb] = current
                trace.discover(nb)

    return trace.result()


# ==================== Best-first (A*, Greedy) ====================

def a_star(grid: Grid, start: Coordinate, end: Coordinate,
           heuristic: Optional[HeuristicFn] = None,
           record_steps: bool = True) -> PathfindingResult:
    """A*: minimum f = g + h, closed nodes are never re-expanded"""
    return _best_first(grid, start, end, heuristic or manhattan, 'A*', record_steps, greedy=False)


def greedy_best_first(grid: Grid, start: Coordinate, end: Coordinate,
                      heuristic: Optional[HeuristicFn] = None,
                      record_steps: bool = True) -> PathfindingResult:
    """Greedy best-first: minimum h; g is only tracked for the path cost"""
    return _best_first(grid, start, end, heuristic or manhattan, 'Greedy Best-First',
                       record_steps, greedy=True)


def _best_first(grid: Grid, start: Coordinate, end: Coordinate,
                heuristic: HeuristicFn, name: str,
                record_steps: bool, greedy: bool) -> PathfindingResult:
    trace = SearchTrace(name, record_steps)
    if not _endpoints_valid(grid, start, end):
        return trace.result()

    h0 = heuristic(start, end)
    # Insertion-ordered; re-admitting a position keeps its original slot
    open_nodes: Dict[Coordinate, SearchNode] = {start: SearchNode(start, 0.0, h0, h0)}
    closed = set()
    came_from: Dict[Coordinate, Coordinate] = {}
    trace.discover(start)

    while open_nodes:
        current: Optional[SearchNode] = None
        for node in open_nodes.values():
            if current is None or node.f < current.f:
                current = node

        pos = current.position
        trace.snapshot(pos)

        del open_nodes[pos]
        closed.add(pos)
        trace.finalize(pos)
        if current.parent is not None:
            came_from[pos] = current.parent

        if pos == end:
            return trace.result(reconstruct_path(came_from, pos), current.g)

        for nb in grid.neighbors(pos):
            if nb in closed or grid.is_wall(*nb):
                continue

            g = current.g + grid.weight(*nb)
            h = heuristic(nb, end)
            existing = open_nodes.get(nb)
            if existing is None or g < existing.g:
                f = h if greedy else g + h
                open_nodes[nb] = SearchNode(nb, g, h, f, parent=pos)
                trace.discover(nb)

    return trace.result()


# ==================== D* Lite ====================

def d_star_lite(grid: Grid, start: Coordinate, end: Coordinate,
                heuristic: Optional[HeuristicFn] = None,
                record_steps: bool = True,
                iteration_factor: int = 2) -> PathfindingResult:
    """
    D* Lite style search keeping g (best known) and rhs (one-step lookahead).

    A popped cell that is locally consistent (g == rhs) is finalized and
    relaxes its successors; an inconsistent one takes g := rhs and is
    re-queued. Runs at most ``iteration_factor * rows * cols`` pops.
    """
    heuristic = heuristic or manhattan
    trace = SearchTrace('D* Lite', record_steps)
    if not _endpoints_valid(grid, start, end):
        return trace.result()

    g: Dict[Coordinate, float] = {start: INF}
    rhs: Dict[Coordinate, float] = {start: 0.0}
    came_from: Dict[Coordinate, Coordinate] = {}

    def calculate_key(pos: Coordinate) -> Tuple[float, float]:
        m = min(g.get(pos, INF), rhs.get(pos, INF))
        return (m + heuristic(pos, end), m)

    open_keys: Dict[Coordinate, Tuple[float, float]] = {start: calculate_key(start)}
    trace.discover(start)

    def relax_successors(pos: Coordinate, base: float):
        for nb in grid.neighbors(pos):
            if grid.is_wall(*nb):
                continue
            old_rhs = rhs.get(nb, INF)
            new_rhs = min(old_rhs, base + grid.weight(*nb))
            if new_rhs != old_rhs:
                rhs[nb] = new_rhs
                came_from[nb] = pos
                open_keys[nb] = calculate_key(nb)
                trace.reopen(nb)

    max_iterations = iteration_factor * grid.rows * grid.cols
    iterations = 0

    while open_keys and iterations < max_iterations:
        iterations += 1

        pos = None
        min_key = (INF, INF)
        for candidate, key in open_keys.items():
            if key < min_key:
                min_key = key
                pos = candidate

        if pos is None:
            break

        g_val = g.get(pos, INF)
        rhs_val = rhs.get(pos, INF)
        trace.snapshot(pos)

        if g_val == rhs_val:
            del open_keys[pos]
            trace.finalize(pos)

            if pos == end:
                # Predecessors may have improved after end's rhs was set
                path = reconstruct_path(came_from, end)
                return trace.result(path, sum(grid.weight(*p) for p in path[1:]))

            relax_successors(pos, g_val)
        else:
            g[pos] = rhs_val
            open_keys[pos] = calculate_key(pos)
            if g_val > rhs_val:
                relax_successors(pos, rhs_val)

    if open_keys:
        logger.debug("D* Lite stopped at iteration cap %d with %d open cells",
                     max_iterations, len(open_keys))
    return trace.result()
