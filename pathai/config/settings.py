"""
Configuration Settings Module
==============================

Dataclass-based configuration with validation and defaults.
Follows Single Responsibility Principle - only handles configuration.
"""

from dataclasses import dataclass, field, fields, is_dataclass, asdict
from typing import Dict, Optional, Any


@dataclass
class SearchConfig:
    """Search engine parameters"""
    default_heuristic: str = 'manhattan'
    record_steps: bool = True

    # D* Lite iteration cap = factor * rows * cols
    dstar_iteration_factor: int = 2

    # Cost of a diagonal move relative to an orthogonal one (octile heuristic)
    diagonal_cost: float = 1.0

    # Algorithm comparison
    parallel_compare: bool = False
    max_workers: int = 4


@dataclass
class ReplanConfig:
    """Local-repair replanning parameters"""
    diagonal_moves: bool = False


@dataclass
class EnsembleConfig:
    """Classifier ensemble parameters"""
    # Decision tree
    max_depth: int = 5
    min_samples: int = 2

    # Naive Bayes
    variance_floor: float = 0.01

    # KNN: k = clamp(n // knn_divisor, 1, knn_max_k)
    knn_max_k: int = 5
    knn_divisor: int = 3

    default_label: str = 'A*'
    confidence_floor: float = 0.5
    confidence_ceiling: float = 0.99


@dataclass
class LearningConfig:
    """Online learning controller parameters"""
    batch_size: int = 2
    history_limit: int = 100

    # Performance score: runtime in ms, nodes in expansions
    runtime_scale: float = 100.0
    nodes_scale: float = 1000.0
    score_floor: float = 0.1
    failure_factor: float = 0.2


@dataclass
class GridConfig:
    """Random grid generation configuration"""
    rows: int = 20
    cols: int = 20
    wall_density: float = 0.25

    # Fraction of free cells that receive a weight above 1
    weighted_fraction: float = 0.5
    max_weight: int = 6

    # Gaussian smoothing of the weight field (0 disables)
    weight_smoothing: float = 0.0

    @property
    def grid_size(self) -> int:
        return self.rows * self.cols


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = 'WARNING'
    json_format: bool = False


@dataclass
class Config:
    """
    Master configuration class combining all sub-configurations.

    Usage:
        config = Config()
        config = Config(grid=GridConfig(rows=40, cols=40))
    """
    search: SearchConfig = field(default_factory=SearchConfig)
    replan: ReplanConfig = field(default_factory=ReplanConfig)
    ensemble: EnsembleConfig = field(default_factory=EnsembleConfig)
    learning: LearningConfig = field(default_factory=LearningConfig)
    grid: GridConfig = field(default_factory=GridConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Global settings
    random_seed: Optional[int] = None
    verbose: bool = False

    def __post_init__(self):
        self._validate()

    def _validate(self):
        """Reject settings the learning and search layers cannot work with"""
        if self.learning.batch_size < 1:
            raise ValueError("learning.batch_size must be >= 1")
        if self.learning.history_limit < self.learning.batch_size:
            raise ValueError("learning.history_limit must be >= learning.batch_size")
        if self.search.dstar_iteration_factor < 1:
            raise ValueError("search.dstar_iteration_factor must be >= 1")
        if not 0.0 <= self.grid.wall_density <= 1.0:
            raise ValueError("grid.wall_density must be within [0, 1]")
        if self.grid.rows < 1 or self.grid.cols < 1:
            raise ValueError("grid dimensions must be >= 1")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Config':
        """Create Config from dictionary"""
        config = cls()
        for key, value in d.items():
            if not hasattr(config, key):
                continue
            current = getattr(config, key)
            if is_dataclass(current) and isinstance(value, dict):
                known = {f.name for f in fields(current)}
                value = type(current)(**{k: v for k, v in value.items() if k in known})
            setattr(config, key, value)
        config._validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Export config to dictionary"""
        return asdict(self)
