"""
Grid Generator Module
=====================

Random weighted obstacle grids and obstacle mutation for dynamic scenarios.
Single Responsibility: only produces grids, never searches them.
"""

import numpy as np
from scipy.ndimage import gaussian_filter
from typing import Tuple, Optional, Iterable

from .types import CellType, Coordinate, as_coordinate
from .model import Grid
from ..config import GridConfig


class GridGenerator:
    """
    Random grid generator.

    Creates grids with:
    - Walls scattered with probability ``wall_density``
    - Weight 1 cells mixed with integer weights in [2, max_weight]
    - Optional Gaussian-smoothed weight fields (clustered terrain)
    - Protected cells (start/end) that are always free
    """

    def __init__(self, config: Optional[GridConfig] = None, seed: Optional[int] = None):
        self.config = config or GridConfig()
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def generate(self, protected: Iterable[Coordinate] = ()) -> Grid:
        """Generate a grid; protected cells are cleared to free weight-1 cells"""
        rows, cols = self.config.rows, self.config.cols

        kinds = np.where(
            self.rng.random((rows, cols)) < self.config.wall_density,
            CellType.WALL, CellType.FREE
        ).astype(np.uint8)
        weights = self._generate_weights(rows, cols)

        for pos in protected:
            r, c = as_coordinate(pos)
            if 0 <= r < rows and 0 <= c < cols:
                kinds[r, c] = CellType.FREE
                weights[r, c] = 1.0

        return Grid(kinds, weights)

    def generate_scenario(self) -> Tuple[Grid, Coordinate, Coordinate]:
        """Generate start/end positions and a grid that keeps them free"""
        start, end = generate_start_end(self.config.rows, self.config.cols, rng=self.rng)
        return self.generate(protected=(start, end)), start, end

    def _generate_weights(self, rows: int, cols: int) -> np.ndarray:
        """Integer weight map with values in [1, max_weight]"""
        max_weight = max(1, int(self.config.max_weight))
        weighted = self.rng.random((rows, cols)) < self.config.weighted_fraction
        if max_weight >= 2:
            heavy = self.rng.integers(2, max_weight + 1, size=(rows, cols))
        else:
            heavy = np.ones((rows, cols), dtype=np.int64)
        weights = np.where(weighted, heavy, 1).astype(np.float64)

        if self.config.weight_smoothing > 0:
            smooth = gaussian_filter(weights, sigma=self.config.weight_smoothing)
            span = smooth.max() - smooth.min()
            if span > 1e-9:
                smooth = (smooth - smooth.min()) / span * (max_weight - 1) + 1.0
            else:
                smooth = np.ones_like(smooth)
            weights = np.clip(np.round(smooth), 1, max_weight)

        return weights


def generate_start_end(rows: int, cols: int,
                       seed: Optional[int] = None,
                       rng: Optional[np.random.Generator] = None) -> Tuple[Coordinate, Coordinate]:
    """
    Generate start and end positions.

    Start: top-left quadrant
    End: bottom-right quadrant
    """
    rng = rng if rng is not None else np.random.default_rng(seed)

    half_r = max(1, rows // 2)
    half_c = max(1, cols // 2)

    start = (int(rng.integers(0, half_r)), int(rng.integers(0, half_c)))
    end = (int(rng.integers(rows - half_r, rows)), int(rng.integers(cols - half_c, cols)))

    return start, end


def add_random_obstacles(grid: Grid, count: int,
                         protected: Iterable[Coordinate] = (),
                         seed: Optional[int] = None,
                         rng: Optional[np.random.Generator] = None) -> Grid:
    """
    Return a copy of ``grid`` with up to ``count`` extra walls.

    Walls land on distinct free cells; protected cells are never walled.
    """
    rng = rng if rng is not None else np.random.default_rng(seed)
    blocked = {as_coordinate(p) for p in protected}

    candidates = [pos for pos in grid.free_cells() if pos not in blocked]
    result = grid.copy()
    if count <= 0 or not candidates:
        return result

    picks = rng.choice(len(candidates), size=min(count, len(candidates)), replace=False)
    for idx in sorted(int(i) for i in picks):
        result.set_wall(*candidates[idx])
    return result


def remove_obstacles(grid: Grid, count: int) -> Grid:
    """Return a copy of ``grid`` with the first ``count`` walls (row-major) cleared"""
    result = grid.copy()
    if count <= 0:
        return result

    for r, c in np.argwhere(grid.wall_mask)[:count]:
        result.set_free(int(r), int(c), 1.0)
    return result
