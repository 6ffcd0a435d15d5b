"""
Heuristics Module
=================

Pluggable distance estimators between grid coordinates.
"""

import math
from enum import Enum
from functools import partial
from typing import Callable, Union

from ..grid import Coordinate
from ..errors import UnknownHeuristicError

HeuristicFn = Callable[[Coordinate, Coordinate], float]


class HeuristicKind(str, Enum):
    MANHATTAN = 'manhattan'
    EUCLIDEAN = 'euclidean'
    DIAGONAL = 'diagonal'


def manhattan(a: Coordinate, b: Coordinate) -> float:
    return float(abs(a[0] - b[0]) + abs(a[1] - b[1]))


def euclidean(a: Coordinate, b: Coordinate) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def diagonal(a: Coordinate, b: Coordinate, diagonal_cost: float = 1.0) -> float:
    """
    Octile distance for 8-connected movement.

    With ``diagonal_cost`` = 1 (a diagonal step costs the same as an
    orthogonal one, which is how the search engine charges moves) this is
    the Chebyshev distance and never overestimates the remaining cost.
    """
    dr = abs(a[0] - b[0])
    dc = abs(a[1] - b[1])
    return float(dr + dc + (diagonal_cost - 2.0) * min(dr, dc))


def get_heuristic(name: Union[str, HeuristicKind], diagonal_cost: float = 1.0) -> HeuristicFn:
    """
    Resolve a heuristic by name (case-insensitive).

    Raises:
        UnknownHeuristicError: name is not manhattan, euclidean or diagonal
    """
    try:
        kind = HeuristicKind(name.value if isinstance(name, HeuristicKind) else str(name).strip().lower())
    except ValueError:
        raise UnknownHeuristicError('UNKNOWN_HEURISTIC', f"Unknown heuristic: {name}",
                                    {'available': [k.value for k in HeuristicKind]}) from None

    if kind == HeuristicKind.MANHATTAN:
        return manhattan
    if kind == HeuristicKind.EUCLIDEAN:
        return euclidean
    return partial(diagonal, diagonal_cost=diagonal_cost)
