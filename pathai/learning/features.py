"""
Grid Features Module
====================

The fixed five-number description of a search problem used by every
classifier, and the labelled training sample built on top of it.
"""

import math
from dataclasses import dataclass, asdict
from typing import Dict, Any, Mapping

import numpy as np

from ..grid import Grid, Coordinate, as_coordinate

FEATURE_NAMES = (
    'grid_size',
    'wall_density',
    'average_weight',
    'path_length',
    'start_to_end_distance',
)

# Serialised (camelCase) spelling of each feature
_CAMEL_NAMES = {
    'gridSize': 'grid_size',
    'wallDensity': 'wall_density',
    'averageWeight': 'average_weight',
    'pathLength': 'path_length',
    'startToEndDistance': 'start_to_end_distance',
}


@dataclass(frozen=True)
class GridFeatures:
    """
    Feature vector of one (grid, start, end) problem.

    ``path_length`` is the Manhattan distance start -> end, not the
    length of any found path.
    """
    grid_size: float = 0.0
    wall_density: float = 0.0
    average_weight: float = 1.0
    path_length: float = 0.0
    start_to_end_distance: float = 0.0

    def as_array(self) -> np.ndarray:
        return np.array([getattr(self, name) for name in FEATURE_NAMES], dtype=np.float64)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, d: Mapping[str, Any]) -> 'GridFeatures':
        """Accepts snake_case or camelCase keys; missing features take defaults"""
        values = {}
        for key, value in d.items():
            name = _CAMEL_NAMES.get(key, key)
            if name in FEATURE_NAMES:
                values[name] = float(value)
        return cls(**values)


def extract_features(grid: Grid, start: Coordinate, end: Coordinate) -> GridFeatures:
    """Describe a search problem by its grid statistics and endpoint distances"""
    (sr, sc), (er, ec) = as_coordinate(start), as_coordinate(end)
    return GridFeatures(
        grid_size=float(grid.size),
        wall_density=grid.wall_density,
        average_weight=grid.average_weight,
        path_length=float(abs(er - sr) + abs(ec - sc)),
        start_to_end_distance=math.hypot(er - sr, ec - sc),
    )


@dataclass(frozen=True)
class TrainingData:
    """Labelled sample; ``performance`` lies in [0, 1]"""
    features: GridFeatures
    label: str
    performance: float = 0.5
