import math
from collections import deque

import pytest

from pathai.config import GridConfig, SearchConfig
from pathai.errors import InvalidGridError, MissingPointsError, UnknownAlgorithmError
from pathai.grid import Grid, GridGenerator
from pathai.planning import (
    Algorithm,
    SearchEngine,
    a_star,
    compare_algorithms,
    d_star_lite,
    dijkstra,
    run_search,
)

ALL = [a.value for a in Algorithm]
WEIGHTED = ['A*', 'Dijkstra', 'Greedy Best-First', 'D* Lite']


def reference_bfs_length(grid, start, end):
    """Number of cells on a shortest 8-connected path, or None"""
    dist = {start: 1}
    queue = deque([start])
    while queue:
        cur = queue.popleft()
        if cur == end:
            return dist[cur]
        for nb in grid.neighbors(cur):
            if nb not in dist and not grid.is_wall(*nb):
                dist[nb] = dist[cur] + 1
                queue.append(nb)
    return None


def assert_valid_path(grid, result, start, end):
    path = result.path
    assert path[0] == start
    assert path[-1] == end
    for (r1, c1), (r2, c2) in zip(path, path[1:]):
        assert max(abs(r1 - r2), abs(c1 - c2)) == 1
    assert all(not grid.is_wall(r, c) for r, c in path)
    assert len(set(path)) == len(path)


def random_scenarios(n=8, rows=14, cols=14, density=0.25):
    config = GridConfig(rows=rows, cols=cols, wall_density=density, max_weight=5)
    for seed in range(n):
        yield GridGenerator(config, seed=seed).generate_scenario()


@pytest.mark.parametrize('algorithm', ['BFS', 'A*', 'Dijkstra'])
def test_open_grid_diagonal_shortcut(open_grid, algorithm):
    result = run_search(algorithm, open_grid, (0, 0), (4, 4))

    assert result.path_cost == 4
    assert result.path_length == 5
    assert_valid_path(open_grid, result, (0, 0), (4, 4))


@pytest.mark.parametrize('algorithm', ALL)
def test_every_algorithm_reaches_goal_on_open_grid(open_grid, algorithm):
    result = run_search(algorithm, open_grid, (0, 0), (4, 4))

    assert result.path_found
    assert result.algorithm == algorithm
    assert_valid_path(open_grid, result, (0, 0), (4, 4))
    assert result.path_cost >= 4


@pytest.mark.parametrize('algorithm', ALL)
@pytest.mark.parametrize('blocked', ['start', 'end'])
def test_wall_endpoint_gives_empty_result(algorithm, blocked):
    grid = Grid.empty(5, 5)
    start, end = (0, 0), (4, 4)
    grid.set_wall(*(start if blocked == 'start' else end))

    result = run_search(algorithm, grid, start, end)

    assert result.path == []
    assert math.isinf(result.path_cost)
    assert result.nodes_expanded >= 0
    assert not result.path_found


@pytest.mark.parametrize('algorithm', ALL)
def test_out_of_bounds_endpoint_gives_empty_result(open_grid, algorithm):
    result = run_search(algorithm, open_grid, (0, 0), (9, 9))

    assert result.path == []
    assert result.nodes_expanded == 0


@pytest.mark.parametrize('algorithm', ALL)
def test_unreachable_goal(maze_grid, algorithm):
    result = run_search(algorithm, maze_grid, (0, 0), (4, 4))

    assert result.path == []
    assert math.isinf(result.path_cost)
    assert 0 < result.nodes_expanded <= maze_grid.size
    assert (4, 4) not in result.explored


@pytest.mark.parametrize('algorithm', ALL)
def test_start_equals_end(open_grid, algorithm):
    result = run_search(algorithm, open_grid, (2, 2), (2, 2))

    assert result.path == [(2, 2)]
    assert result.path_cost == 0


@pytest.mark.parametrize('algorithm', ['BFS', 'DFS', 'A*', 'Dijkstra', 'Greedy Best-First'])
def test_maze_paths_are_valid(maze_grid, algorithm):
    result = run_search(algorithm, maze_grid, (0, 0), (2, 2))

    assert result.path_found
    assert_valid_path(maze_grid, result, (0, 0), (2, 2))


def test_bfs_matches_reference_bfs(maze_grid, open_grid):
    assert run_search('BFS', maze_grid, (0, 0), (2, 2)).path_length == \
        reference_bfs_length(maze_grid, (0, 0), (2, 2))

    big = Grid.empty(9, 13)
    for start, end in [((0, 0), (8, 12)), ((4, 0), (4, 12)), ((8, 3), (0, 5))]:
        result = run_search('BFS', big, start, end)
        assert result.path_length == reference_bfs_length(big, start, end)
        assert result.path_cost == result.path_length - 1


def test_bfs_matches_reference_bfs_on_random_grids():
    for grid, start, end in random_scenarios():
        expected = reference_bfs_length(grid, start, end)
        result = run_search('BFS', grid, start, end)
        if expected is None:
            assert result.path == []
        else:
            assert result.path_length == expected


def test_weighted_grid_costs(weighted_grid):
    dijkstra_result = run_search('Dijkstra', weighted_grid, (0, 0), (4, 4))
    astar_result = run_search('A*', weighted_grid, (0, 0), (4, 4), heuristic='diagonal')
    bfs_result = run_search('BFS', weighted_grid, (0, 0), (4, 4))

    # Around the ring of 9s beats cutting through it
    assert dijkstra_result.path_cost == 7
    assert astar_result.path_cost == 7
    assert bfs_result.path_cost == 4


@pytest.mark.parametrize('algorithm', WEIGHTED)
def test_weighted_cost_is_sum_of_entered_cells(weighted_grid, algorithm):
    result = run_search(algorithm, weighted_grid, (0, 0), (4, 4))
    if result.path_found:
        assert result.path_cost == sum(weighted_grid.weight(r, c) for r, c in result.path[1:])


def test_astar_matches_dijkstra_with_admissible_heuristic():
    for grid, start, end in random_scenarios(n=12):
        d = run_search('Dijkstra', grid, start, end)
        a = run_search('A*', grid, start, end, heuristic='diagonal')
        assert a.path_cost == d.path_cost
        if d.path_found:
            assert_valid_path(grid, a, start, end)


def test_manhattan_astar_is_never_cheaper_than_dijkstra():
    # Manhattan overestimates diagonal steps, so A* may settle for a costlier path
    costlier = 0
    for grid, start, end in random_scenarios(n=60, rows=15, cols=15):
        d = run_search('Dijkstra', grid, start, end)
        a = run_search('A*', grid, start, end, heuristic='manhattan')
        assert a.path_found == d.path_found
        if a.path_found:
            assert a.path_cost >= d.path_cost
            costlier += a.path_cost > d.path_cost
    assert costlier > 0


def test_greedy_is_never_cheaper_than_dijkstra():
    for grid, start, end in random_scenarios():
        d = run_search('Dijkstra', grid, start, end)
        g = run_search('Greedy Best-First', grid, start, end)
        assert g.path_found == d.path_found
        if g.path_found:
            assert g.path_cost >= d.path_cost


@pytest.mark.parametrize('algorithm', ALL)
def test_nodes_expanded_bounded(algorithm):
    for grid, start, end in random_scenarios(n=5):
        result = run_search(algorithm, grid, start, end)
        assert 0 <= result.nodes_expanded <= grid.size


@pytest.mark.parametrize('algorithm', ALL)
def test_search_is_deterministic(algorithm):
    grid, start, end = next(random_scenarios(n=1, rows=18, cols=18))
    first = run_search(algorithm, grid, start, end)
    second = run_search(algorithm, grid, start, end)

    assert first.path == second.path
    assert first.path_cost == second.path_cost
    assert first.nodes_expanded == second.nodes_expanded
    assert [s.current_node for s in first.steps] == [s.current_node for s in second.steps]


@pytest.mark.parametrize('algorithm', ALL)
def test_search_never_mutates_grid(maze_grid, algorithm):
    before = maze_grid.copy()
    run_search(algorithm, maze_grid, (0, 0), (2, 2))
    assert maze_grid == before


@pytest.mark.parametrize('algorithm', ALL)
def test_step_snapshots(maze_grid, algorithm):
    result = run_search(algorithm, maze_grid, (0, 0), (2, 2))

    assert result.steps
    assert result.steps[0].explored == frozenset()
    for step in result.steps:
        assert isinstance(step.explored, frozenset)
        assert step.current_node not in step.explored
        assert not (step.explored & step.frontier)
    assert not (result.explored & result.frontier)


def test_snapshots_are_independent_copies(open_grid):
    result = run_search('BFS', open_grid, (0, 0), (4, 4))
    sizes = [len(s.explored) for s in result.steps]

    assert sizes == sorted(sizes)
    assert sizes[-1] < len(result.explored)


def test_record_steps_off(open_grid):
    result = run_search('A*', open_grid, (0, 0), (4, 4), record_steps=False)
    assert result.steps is None
    assert result.path_found


def test_dijkstra_registers_all_free_cells(maze_grid):
    result = dijkstra(maze_grid, (0, 0), (4, 4))
    free = set(maze_grid.free_cells())

    assert result.explored | result.frontier == free


def test_astar_prefers_first_found_on_ties(open_grid):
    # Along row 0 f stays at 4 while every detour scores 5 or more
    result = a_star(open_grid, (0, 0), (0, 4))
    assert result.path == [(0, 0), (0, 1), (0, 2), (0, 3), (0, 4)]


def test_dstar_iteration_cap():
    grid = Grid.empty(6, 6)
    capped = d_star_lite(grid, (0, 0), (5, 5), iteration_factor=1)
    full = d_star_lite(grid, (0, 0), (5, 5))

    assert full.path_found
    assert len(capped.steps) <= grid.size


def test_engine_defaults_from_config(open_grid):
    engine = SearchEngine(SearchConfig(default_heuristic='diagonal', record_steps=False))
    result = engine.run('astar', open_grid, [0, 0], [4, 4])

    assert result.steps is None
    assert result.path[0] == (0, 0)


def test_result_to_dict(open_grid):
    found = run_search('A*', open_grid, (0, 0), (4, 4)).to_dict(include_steps=True)
    assert found['path'][0] == [0, 0]
    assert found['path_cost'] == 4
    assert 'steps' in found

    grid = Grid.empty(3, 3)
    grid.set_wall(2, 2)
    missing = run_search('A*', grid, (0, 0), (2, 2)).to_dict()
    assert missing['path_cost'] is None
    assert missing['path_found'] is False


@pytest.mark.parametrize('name, expected', [
    ('A*', Algorithm.A_STAR),
    ('AStar', Algorithm.A_STAR),
    ('a_star', Algorithm.A_STAR),
    ('dijkstra', Algorithm.DIJKSTRA),
    ('bfs', Algorithm.BFS),
    ('DFS', Algorithm.DFS),
    ('GreedyBestFirst', Algorithm.GREEDY_BEST_FIRST),
    ('greedy best-first', Algorithm.GREEDY_BEST_FIRST),
    ('DStarLite', Algorithm.D_STAR_LITE),
    ('D* Lite', Algorithm.D_STAR_LITE),
    (Algorithm.BFS, Algorithm.BFS),
])
def test_algorithm_from_name(name, expected):
    assert Algorithm.from_name(name) is expected


def test_unknown_algorithm(open_grid):
    with pytest.raises(UnknownAlgorithmError):
        run_search('Bellman-Ford', open_grid, (0, 0), (4, 4))


def test_invalid_inputs_raise(open_grid):
    with pytest.raises(InvalidGridError) as exc:
        run_search('A*', None, (0, 0), (1, 1))
    assert exc.value.code == 'INVALID_GRID'

    with pytest.raises(MissingPointsError):
        run_search('A*', open_grid, None, (1, 1))


def test_compare_algorithms(weighted_grid):
    comparison = compare_algorithms(weighted_grid, (0, 0), (4, 4), heuristic='diagonal')

    assert list(comparison.results) == ALL
    # BFS/DFS report hop counts, so they undercut the weighted costs
    assert comparison.cheapest == 'BFS'
    assert comparison.results['A*'].path_cost == 7
    assert comparison.results['Dijkstra'].path_cost == 7
    assert comparison.most_efficient in ALL
    assert comparison.fastest in ALL

    d = comparison.to_dict()
    assert [s['algorithm'] for s in d['algorithms']] == ALL
    assert all(r.steps is None for r in comparison.results.values())


def test_compare_parallel_matches_sequential(maze_grid):
    sequential = compare_algorithms(maze_grid, (0, 0), (2, 2))
    parallel = SearchEngine(SearchConfig(parallel_compare=True, max_workers=3)).compare(
        maze_grid, (0, 0), (2, 2), heuristic='manhattan')

    assert list(parallel.results) == list(sequential.results)
    for name in ALL:
        assert parallel.results[name].path == sequential.results[name].path


def test_compare_with_no_path():
    grid = Grid.from_strings([".#.", "##.", "..."])
    comparison = compare_algorithms(grid, (0, 0), (2, 2))

    assert comparison.cheapest is None
    assert comparison.most_efficient is None
