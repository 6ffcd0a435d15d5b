"""
PathAI - Pathfinding Lab
========================

Grid search algorithms with animation-ready traces, local-repair
replanning under changing obstacles, and an online ensemble that learns
which algorithm suits a given grid.

Key Features:
- Six interchangeable strategies: A*, Dijkstra, BFS, DFS,
  Greedy Best-First and D* Lite
- Step snapshots of explored/frontier sets for replay
- Obstacle-delta detection with greedy path repair
- Decision tree, naive Bayes and KNN voting ensemble trained online

Version: 1.0.0
"""

__version__ = "1.0.0"

from .config import Config, configure_logging
from .errors import (
    PathAIError,
    InvalidGridError,
    MissingPointsError,
    UnknownAlgorithmError,
    UnknownHeuristicError,
    MalformedResultError,
    handle_error,
    validate_grid_state,
    validate_algorithm_result,
)
from .grid import CellType, Cell, Grid, GridGenerator, add_random_obstacles, remove_obstacles
from .planning import (
    Algorithm,
    SearchEngine,
    PathfindingResult,
    Step,
    run_search,
    compare_algorithms,
    get_heuristic,
    DynamicReplanner,
    ReplanningResult,
)
from .learning import (
    GridFeatures,
    extract_features,
    EnsembleModel,
    ExecutionData,
    ModelMetrics,
    OnlineLearningSystem,
)
from .metrics import ComparisonResult
from .pipeline import BenchmarkRunner

__all__ = [
    'Config', 'configure_logging',
    'PathAIError', 'InvalidGridError', 'MissingPointsError',
    'UnknownAlgorithmError', 'UnknownHeuristicError', 'MalformedResultError',
    'handle_error', 'validate_grid_state', 'validate_algorithm_result',
    'CellType', 'Cell', 'Grid', 'GridGenerator', 'add_random_obstacles', 'remove_obstacles',
    'Algorithm', 'SearchEngine', 'PathfindingResult', 'Step',
    'run_search', 'compare_algorithms', 'get_heuristic',
    'DynamicReplanner', 'ReplanningResult',
    'GridFeatures', 'extract_features', 'EnsembleModel',
    'ExecutionData', 'ModelMetrics', 'OnlineLearningSystem',
    'ComparisonResult',
    'BenchmarkRunner',
]
