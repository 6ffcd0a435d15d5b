"""
Grid Module
===========

Weighted obstacle grid, cell types and random grid generation.
"""

from .types import CellType, Cell, Coordinate, as_coordinate
from .model import Grid, ORTHOGONAL_DIRECTIONS, DIAGONAL_DIRECTIONS, ALL_DIRECTIONS
from .generator import (
    GridGenerator,
    generate_start_end,
    add_random_obstacles,
    remove_obstacles,
)

__all__ = [
    'CellType',
    'Cell',
    'Coordinate',
    'as_coordinate',
    'Grid',
    'ORTHOGONAL_DIRECTIONS',
    'DIAGONAL_DIRECTIONS',
    'ALL_DIRECTIONS',
    'GridGenerator',
    'generate_start_end',
    'add_random_obstacles',
    'remove_obstacles',
]
