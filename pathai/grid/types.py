"""
Grid Types Module
=================

Cell kinds, cells and coordinates.
"""

from enum import IntEnum
from dataclasses import dataclass
from typing import Tuple, Dict, Any, Sequence

Coordinate = Tuple[int, int]  # (row, col)


class CellType(IntEnum):
    """
    Cell kind enumeration.

    Values are integers for efficient numpy array storage.
    """
    FREE = 0
    WALL = 1

    @classmethod
    def from_name(cls, name: str) -> 'CellType':
        """Get cell type from string name"""
        return cls[name.upper()]

    @property
    def name_lower(self) -> str:
        """Get lowercase name"""
        return self.name.lower()


@dataclass(frozen=True)
class Cell:
    """A single grid cell. Weight multiplies the cost of stepping into it."""
    kind: CellType = CellType.FREE
    weight: float = 1.0

    @property
    def is_wall(self) -> bool:
        return self.kind == CellType.WALL

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.kind.name_lower, 'weight': self.weight}

    @classmethod
    def from_value(cls, value: Any) -> 'Cell':
        """
        Build a cell from a Cell, a mapping, or a (kind, weight) pair.

        Mappings follow the editor's shape: {'type': 'free'|'wall', 'weight': w}.
        """
        if isinstance(value, Cell):
            return value
        if isinstance(value, dict):
            kind = value.get('type', value.get('kind', 'free'))
            weight = value.get('weight', 1.0)
        else:
            kind, weight = value
        if isinstance(kind, str):
            kind = CellType.from_name(kind)
        return cls(CellType(int(kind)), float(weight))


def as_coordinate(value: Sequence[int]) -> Coordinate:
    """Normalise a list, tuple or numpy pair to a (row, col) tuple of ints"""
    row, col = value
    return (int(row), int(col))
