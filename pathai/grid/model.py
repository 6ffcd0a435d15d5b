"""
Grid Model Module
=================

Weighted obstacle grid consumed by the search engine, the replanner
and the feature extractor.
"""

import numpy as np
from typing import Tuple, List, Dict, Any, Iterable, Sequence

from .types import CellType, Cell, Coordinate
from ..errors import InvalidGridError

# N, S, W, E, then diagonals
ORTHOGONAL_DIRECTIONS: Tuple[Coordinate, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
DIAGONAL_DIRECTIONS: Tuple[Coordinate, ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ALL_DIRECTIONS = ORTHOGONAL_DIRECTIONS + DIAGONAL_DIRECTIONS


class Grid:
    """
    Rectangular grid of free/wall cells with per-cell weights.

    Contains:
    - Cell kind map (CellType values)
    - Weight map (real >= 1)

    Provides:
    - Cell validity checking
    - 8- and 4-connected neighbour generation
    - Map statistics
    - Caller-side mutation helpers (search code never mutates a grid)
    """

    def __init__(self, kinds: np.ndarray, weights: np.ndarray):
        """
        Initialize grid.

        Args:
            kinds: 2D array of CellType values
            weights: 2D array of cell weights, same shape as kinds

        Raises:
            InvalidGridError: on empty, mismatched or sub-unit-weight input
        """
        kinds = np.asarray(kinds, dtype=np.uint8)
        weights = np.asarray(weights, dtype=np.float64)

        if kinds.ndim != 2 or kinds.size == 0:
            raise InvalidGridError('EMPTY_GRID', 'Grid has no cells',
                                   {'shape': tuple(kinds.shape)})
        if weights.shape != kinds.shape:
            raise InvalidGridError('INVALID_GRID', 'Weight map does not match cell map',
                                   {'kinds': tuple(kinds.shape), 'weights': tuple(weights.shape)})
        if np.any(kinds > CellType.WALL):
            raise InvalidGridError('INVALID_GRID', 'Unknown cell kind in grid')
        if np.any(~np.isfinite(weights)) or np.any(weights < 1.0):
            raise InvalidGridError('INVALID_GRID', 'Cell weights must be finite and >= 1')

        self._kinds = kinds.copy()
        self._weights = weights.copy()

    # ==================== Construction ====================

    @classmethod
    def empty(cls, rows: int, cols: int, weight: float = 1.0) -> 'Grid':
        """All-free grid of uniform weight"""
        if rows < 1 or cols < 1:
            raise InvalidGridError('EMPTY_GRID', 'Grid has no cells', {'rows': rows, 'cols': cols})
        return cls(
            np.full((rows, cols), CellType.FREE, dtype=np.uint8),
            np.full((rows, cols), float(weight))
        )

    @classmethod
    def from_cells(cls, cells: Sequence[Sequence[Any]]) -> 'Grid':
        """
        Build a grid from nested rows of cells.

        Each cell may be a Cell, an editor-style mapping
        {'type': 'free'|'wall', 'weight': w}, or a (kind, weight) pair.
        """
        if not cells or not cells[0]:
            raise InvalidGridError('EMPTY_GRID', 'Grid has no cells')

        cols = len(cells[0])
        if any(len(row) != cols for row in cells):
            raise InvalidGridError('INVALID_GRID', 'Grid rows have different lengths')

        parsed = []
        for row in cells:
            parsed_row = []
            for value in row:
                try:
                    parsed_row.append(Cell.from_value(value))
                except (KeyError, ValueError, TypeError):
                    raise InvalidGridError('INVALID_GRID', f"Malformed cell: {value!r}",
                                           {'cell': value}) from None
            parsed.append(parsed_row)
        kinds = np.array([[int(c.kind) for c in row] for row in parsed], dtype=np.uint8)
        weights = np.array([[c.weight for c in row] for row in parsed], dtype=np.float64)
        return cls(kinds, weights)

    @classmethod
    def from_strings(cls, lines: Iterable[str]) -> 'Grid':
        """
        Build a grid from text rows.

        '#' is a wall, '.' a free cell of weight 1 and a digit 1-9
        a free cell of that weight.
        """
        lines = [line.strip() for line in lines if line.strip()]
        if not lines:
            raise InvalidGridError('EMPTY_GRID', 'Grid has no cells')

        cells = []
        for line in lines:
            row = []
            for ch in line:
                if ch == '#':
                    row.append(Cell(CellType.WALL, 1.0))
                elif ch == '.':
                    row.append(Cell(CellType.FREE, 1.0))
                elif ch.isdigit() and ch != '0':
                    row.append(Cell(CellType.FREE, float(ch)))
                else:
                    raise InvalidGridError('INVALID_GRID', f"Unknown grid symbol {ch!r}")
            cells.append(row)
        return cls.from_cells(cells)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Grid':
        """Inverse of to_dict()"""
        if not isinstance(d, dict) or 'cells' not in d:
            raise InvalidGridError('INVALID_GRID', 'Grid state is invalid or not initialized')
        return cls.from_cells(d['cells'])

    def copy(self) -> 'Grid':
        return Grid(self._kinds, self._weights)

    # ==================== Property Access ====================

    @property
    def rows(self) -> int:
        return int(self._kinds.shape[0])

    @property
    def cols(self) -> int:
        return int(self._kinds.shape[1])

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def size(self) -> int:
        """Total number of cells"""
        return self.rows * self.cols

    @property
    def kinds(self) -> np.ndarray:
        """Read-only view of the cell kind map"""
        view = self._kinds.view()
        view.flags.writeable = False
        return view

    @property
    def weights(self) -> np.ndarray:
        """Read-only view of the weight map"""
        view = self._weights.view()
        view.flags.writeable = False
        return view

    @property
    def wall_mask(self) -> np.ndarray:
        return self._kinds == CellType.WALL

    # ==================== Cell Queries ====================

    def in_bounds(self, row: int, col: int) -> bool:
        """Check if cell is within grid bounds"""
        return 0 <= row < self.rows and 0 <= col < self.cols

    def is_wall(self, row: int, col: int) -> bool:
        return self._kinds[row, col] == CellType.WALL

    def is_valid(self, row: int, col: int) -> bool:
        """Check if cell is valid (in bounds and traversable)"""
        return self.in_bounds(row, col) and not self.is_wall(row, col)

    def weight(self, row: int, col: int) -> float:
        return float(self._weights[row, col])

    def cell(self, row: int, col: int) -> Cell:
        return Cell(CellType(int(self._kinds[row, col])), float(self._weights[row, col]))

    def neighbors(self, pos: Coordinate) -> List[Coordinate]:
        """In-bounds 8-connected neighbours (walls included)"""
        return self._neighbors(pos, ALL_DIRECTIONS)

    def orthogonal_neighbors(self, pos: Coordinate) -> List[Coordinate]:
        """In-bounds 4-connected neighbours (walls included)"""
        return self._neighbors(pos, ORTHOGONAL_DIRECTIONS)

    def _neighbors(self, pos: Coordinate, directions) -> List[Coordinate]:
        row, col = pos
        rows, cols = self._kinds.shape
        result = []
        for dr, dc in directions:
            nr, nc = row + dr, col + dc
            if 0 <= nr < rows and 0 <= nc < cols:
                result.append((nr, nc))
        return result

    def free_cells(self) -> List[Coordinate]:
        """All non-wall positions in row-major order"""
        return [(int(r), int(c)) for r, c in np.argwhere(self._kinds != CellType.WALL)]

    # ==================== Mutation ====================

    def set_wall(self, row: int, col: int):
        self._kinds[row, col] = CellType.WALL

    def set_free(self, row: int, col: int, weight: float = 1.0):
        self._kinds[row, col] = CellType.FREE
        self.set_weight(row, col, weight)

    def set_weight(self, row: int, col: int, weight: float):
        if not weight >= 1.0:
            raise InvalidGridError('INVALID_GRID', 'Cell weights must be >= 1',
                                   {'cell': (row, col), 'weight': weight})
        self._weights[row, col] = float(weight)

    # ==================== Statistics ====================

    @property
    def wall_count(self) -> int:
        return int(np.count_nonzero(self.wall_mask))

    @property
    def wall_density(self) -> float:
        return self.wall_count / self.size

    @property
    def average_weight(self) -> float:
        """Mean weight over every cell, walls included"""
        return float(self._weights.mean())

    def get_stats(self) -> Dict[str, Any]:
        return {
            'rows': self.rows,
            'cols': self.cols,
            'total_cells': self.size,
            'walls': self.wall_count,
            'wall_density': self.wall_density,
            'average_weight': self.average_weight,
            'max_weight': float(self._weights.max()),
        }

    # ==================== Serialization ====================

    def to_cells(self) -> List[List[Dict[str, Any]]]:
        return [[self.cell(r, c).to_dict() for c in range(self.cols)] for r in range(self.rows)]

    def to_dict(self) -> Dict[str, Any]:
        return {'rows': self.rows, 'cols': self.cols, 'cells': self.to_cells()}

    def save_to_npz(self, filepath: str):
        """Save grid to NPZ file"""
        np.savez_compressed(filepath, kinds=self._kinds, weights=self._weights)

    @classmethod
    def load_from_npz(cls, filepath: str) -> 'Grid':
        """Load grid from NPZ file"""
        with np.load(filepath) as data:
            return cls(data['kinds'], data['weights'])

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (self.shape == other.shape
                and np.array_equal(self._kinds, other._kinds)
                and np.array_equal(self._weights, other._weights))

    def __repr__(self) -> str:
        return f"Grid(rows={self.rows}, cols={self.cols}, walls={self.wall_count})"
