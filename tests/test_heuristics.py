import math

import pytest

from pathai.errors import UnknownHeuristicError
from pathai.planning.heuristics import (
    HeuristicKind,
    diagonal,
    euclidean,
    get_heuristic,
    manhattan,
)


def test_manhattan():
    assert manhattan((0, 0), (3, 4)) == 7.0
    assert manhattan((3, 4), (0, 0)) == 7.0


def test_euclidean():
    assert euclidean((0, 0), (3, 4)) == pytest.approx(5.0)


def test_diagonal_defaults_to_chebyshev():
    assert diagonal((0, 0), (3, 7)) == 7.0
    assert diagonal((2, 2), (2, 2)) == 0.0


def test_diagonal_octile_cost():
    assert diagonal((0, 0), (3, 7), diagonal_cost=math.sqrt(2)) == pytest.approx(4 + 3 * math.sqrt(2))


@pytest.mark.parametrize('name, expected', [
    ('manhattan', 7.0),
    ('MANHATTAN', 7.0),
    (' Euclidean ', 5.0),
    ('diagonal', 4.0),
    (HeuristicKind.DIAGONAL, 4.0),
])
def test_get_heuristic_by_name(name, expected):
    h = get_heuristic(name)
    assert h((0, 0), (3, 4)) == pytest.approx(expected)


def test_get_heuristic_unknown():
    with pytest.raises(UnknownHeuristicError) as exc:
        get_heuristic('chebyshev-ish')
    assert exc.value.code == 'UNKNOWN_HEURISTIC'
    assert 'manhattan' in exc.value.context['available']
