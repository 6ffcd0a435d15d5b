import logging

import pytest

from pathai.grid import Grid


@pytest.fixture
def open_grid():
    """5x5, all free, weight 1"""
    return Grid.empty(5, 5)


@pytest.fixture
def maze_grid():
    return Grid.from_strings([
        "..........",
        ".########.",
        ".#......#.",
        ".#.####.#.",
        ".#.#..#.#.",
        ".#.#..#...",
        ".#.####.#.",
        ".#......#.",
        ".########.",
        "..........",
    ])


@pytest.fixture
def weighted_grid():
    return Grid.from_strings([
        ".....",
        ".999.",
        ".9.9.",
        ".999.",
        ".....",
    ])


@pytest.fixture
def clean_logger():
    """Restore the package logger after a test attaches handlers to it"""
    logger = logging.getLogger('pathai')
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)
