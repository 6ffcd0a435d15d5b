"""
Online Learning Module
======================

Stateful controller that turns search executions into ensemble training
data, keeps per-algorithm statistics and derives recommendation metrics.

Flow per execution:
1. Append to the batch buffer and the rolling history (oldest evicted)
2. When the buffer holds ``batch_size`` records, run a training cycle:
   update statistics, retrain on the whole history, validate the batch
   and recompute ModelMetrics
"""

import json
import logging
import threading
import time
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..config import LearningConfig, EnsembleConfig
from ..planning.engine import Algorithm
from ..planning.result import PathfindingResult
from .classifiers import Prediction, FeatureInput, clamp
from .ensemble import EnsembleModel
from .features import GridFeatures, TrainingData

logger = logging.getLogger(__name__)

KNOWN_ALGORITHMS = [a.value for a in Algorithm]

BEST_FOR = {
    Algorithm.A_STAR.value: 'Weighted grids & long paths',
    Algorithm.DIJKSTRA.value: 'Weighted grids',
    Algorithm.BFS.value: 'Unweighted grids',
    Algorithm.D_STAR_LITE.value: 'Dynamic obstacles',
    Algorithm.GREEDY_BEST_FIRST.value: 'Fast approximations',
}
DEFAULT_BEST_FOR = 'General purpose'


def _pick(d: Mapping[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    if snake in d:
        return d[snake]
    if camel in d:
        return d[camel]
    if default is None:
        raise KeyError(snake)
    return default


@dataclass(frozen=True)
class ExecutionData:
    """One finished search, as consumed by the learner; ``runtime`` in ms"""
    grid_features: GridFeatures
    algorithm: str
    runtime: float
    nodes_expanded: int
    path_cost: float
    path_found: bool
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def from_result(cls, result: PathfindingResult, features: GridFeatures,
                    timestamp: Optional[float] = None) -> 'ExecutionData':
        return cls(
            grid_features=features,
            algorithm=result.algorithm,
            runtime=float(result.elapsed_time),
            nodes_expanded=int(result.nodes_expanded),
            path_cost=float(result.path_cost),
            path_found=result.path_found,
            timestamp=time.time() if timestamp is None else timestamp,
        )

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> 'ExecutionData':
        """Accepts snake_case or camelCase keys"""
        features = _pick(d, 'grid_features', 'gridFeatures')
        if not isinstance(features, GridFeatures):
            features = GridFeatures.from_mapping(features)
        return cls(
            grid_features=features,
            algorithm=str(_pick(d, 'algorithm', 'algorithm')),
            runtime=float(_pick(d, 'runtime', 'runtime')),
            nodes_expanded=int(_pick(d, 'nodes_expanded', 'nodesExpanded')),
            path_cost=float(_pick(d, 'path_cost', 'pathCost', float('inf'))),
            path_found=bool(_pick(d, 'path_found', 'pathFound')),
            timestamp=float(_pick(d, 'timestamp', 'timestamp', time.time())),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d['grid_features'] = self.grid_features.to_dict()
        return d


@dataclass
class ModelMetrics:
    """Derived recommendation metrics; replaced wholesale after each batch"""
    accuracy: float = 0.5
    loss: float = 0.5
    total_samples: int = 0
    best_algorithm: str = 'A*'
    recommendation_confidence: float = 0.5
    last_updated: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> 'ModelMetrics':
        """
        Accepts snake_case or camelCase keys.

        Raises:
            TypeError: ``d`` is not a mapping
            KeyError: a field is missing
            ValueError: a field has the wrong type
        """
        if not isinstance(d, Mapping):
            raise TypeError(f"metrics must be a mapping, got {type(d).__name__}")
        return cls(
            accuracy=float(_pick(d, 'accuracy', 'accuracy')),
            loss=float(_pick(d, 'loss', 'loss')),
            total_samples=int(_pick(d, 'total_samples', 'totalSamples')),
            best_algorithm=str(_pick(d, 'best_algorithm', 'bestAlgorithm')),
            recommendation_confidence=float(_pick(d, 'recommendation_confidence',
                                                  'recommendationConfidence')),
            last_updated=float(_pick(d, 'last_updated', 'lastUpdated')),
        )


@dataclass
class AlgorithmStats:
    """Rolling per-algorithm record; only grows until an explicit reset"""
    runtimes: List[float] = field(default_factory=list)
    nodes_expanded: List[int] = field(default_factory=list)
    success_count: int = 0

    @property
    def runs(self) -> int:
        return len(self.runtimes)

    @property
    def success_rate(self) -> float:
        return self.success_count / self.runs if self.runs else 0.0

    @property
    def avg_runtime(self) -> float:
        return sum(self.runtimes) / self.runs if self.runs else 0.0

    @property
    def avg_nodes_expanded(self) -> float:
        return sum(self.nodes_expanded) / len(self.nodes_expanded) if self.nodes_expanded else 0.0

    def record(self, execution: ExecutionData):
        self.runtimes.append(execution.runtime)
        self.nodes_expanded.append(execution.nodes_expanded)
        if execution.path_found:
            self.success_count += 1


@dataclass
class AlgorithmInsight:
    algorithm: str
    weight: float
    avg_runtime: float
    avg_nodes_expanded: float
    success_rate: float
    best_for: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def performance_score(execution: ExecutionData, config: Optional[LearningConfig] = None) -> float:
    """
    Score in [0, 1] favouring fast, low-expansion, successful runs.

    0.5 * (clamp(1 - runtime/runtime_scale, floor, 1) + clamp(1 - nodes/nodes_scale, floor, 1)),
    scaled by ``failure_factor`` when no path was found.
    """
    config = config or LearningConfig()
    runtime_score = clamp(1.0 - execution.runtime / config.runtime_scale, config.score_floor, 1.0)
    nodes_score = clamp(1.0 - execution.nodes_expanded / config.nodes_scale, config.score_floor, 1.0)
    found_factor = 1.0 if execution.path_found else config.failure_factor
    return 0.5 * (runtime_score + nodes_score) * found_factor


class OnlineLearningSystem:
    """
    Batched online trainer around an EnsembleModel.

    Every public method holds one re-entrant lock, so a single instance can
    be shared between request handlers.
    """

    def __init__(self, config: Optional[LearningConfig] = None,
                 ensemble_config: Optional[EnsembleConfig] = None):
        self.config = config or LearningConfig()
        self.ensemble_config = ensemble_config or EnsembleConfig()
        self._lock = threading.RLock()
        self.reset()

    def reset(self):
        """Drop history, statistics, metrics and the trained model"""
        with self._lock:
            self._buffer: List[ExecutionData] = []
            self._history: List[ExecutionData] = []
            self._ensemble = EnsembleModel(self.ensemble_config)
            self._metrics = ModelMetrics(best_algorithm=self.ensemble_config.default_label)
            self._stats: Dict[str, AlgorithmStats] = {name: AlgorithmStats() for name in KNOWN_ALGORITHMS}
            self._validation_correct = 0
            self._validation_total = 0

    # ==================== Intake ====================

    def add_execution(self, execution: ExecutionData):
        """Buffer one execution; trains when a full batch is buffered"""
        with self._lock:
            self._buffer.append(execution)
            self._history.append(execution)
            if len(self._history) > self.config.history_limit:
                del self._history[0]

            if len(self._buffer) >= self.config.batch_size:
                self._train_batch()

    def add_executions(self, executions: Iterable[ExecutionData]):
        with self._lock:
            for execution in executions:
                self.add_execution(execution)

    @property
    def history_size(self) -> int:
        with self._lock:
            return len(self._history)

    @property
    def buffered(self) -> int:
        with self._lock:
            return len(self._buffer)

    # ==================== Training ====================

    def _train_batch(self):
        batch = self._buffer[:self.config.batch_size]
        del self._buffer[:self.config.batch_size]
        if not batch:
            return

        for execution in batch:
            self._stats.setdefault(execution.algorithm, AlgorithmStats()).record(execution)

        if len(self._history) < self.config.batch_size:
            return

        training_data = [
            TrainingData(e.grid_features, e.algorithm, performance_score(e, self.config))
            for e in self._history
        ]
        self._ensemble.train(training_data)
        self._validate(batch)
        self._update_metrics(batch)

    def _leading_algorithm(self, fallback: str) -> str:
        """Algorithm with the strictly highest success rate so far"""
        best = fallback
        best_rate = 0.0
        for name, stats in self._stats.items():
            if stats.runs and stats.success_rate > best_rate:
                best_rate = stats.success_rate
                best = name
        return best

    def _validate(self, batch: List[ExecutionData]):
        for execution in batch:
            prediction = self._ensemble.predict(execution.grid_features)
            if prediction.label == self._leading_algorithm(execution.algorithm):
                self._validation_correct += 1
            self._validation_total += 1

    def _update_metrics(self, batch: List[ExecutionData]):
        floor = self.ensemble_config.confidence_floor
        ceiling = self.ensemble_config.confidence_ceiling

        batch_success = sum(1 for e in batch if e.path_found) / len(batch)
        validation_accuracy = (self._validation_correct / self._validation_total
                               if self._validation_total > 0 else 0.5)

        # History is never empty here: a batch was just appended to it
        best_algorithm = self._ensemble.predict(self._history[-1].grid_features).label
        sample_boost = min(0.3, len(self._history) / self.config.history_limit * 0.3)
        confidence = clamp(0.5 + sample_boost + batch_success * 0.2 + validation_accuracy * 0.5,
                           floor, ceiling)
        accuracy = clamp(validation_accuracy, floor, ceiling)

        self._metrics = ModelMetrics(
            accuracy=accuracy,
            loss=max(0.01, 1.0 - accuracy),
            total_samples=self._metrics.total_samples + len(batch),
            best_algorithm=best_algorithm,
            recommendation_confidence=confidence,
            last_updated=time.time(),
        )
        logger.info("Trained on %d samples: best=%s accuracy=%.3f confidence=%.3f",
                    len(self._history), best_algorithm, accuracy, confidence,
                    extra={'extra': {'event': 'model_trained', **self._metrics.to_dict()}})

    # ==================== Queries ====================

    def get_metrics(self) -> ModelMetrics:
        with self._lock:
            return ModelMetrics(**self._metrics.to_dict())

    def predict(self, features: FeatureInput) -> Prediction:
        with self._lock:
            return self._ensemble.predict(features)

    def predict_best_algorithm(self, features: FeatureInput) -> str:
        return self.predict(features).label

    def get_algorithm_insights(self) -> List[AlgorithmInsight]:
        """Per-algorithm averages, sorted by weight (success rate) descending"""
        with self._lock:
            uniform = 1.0 / len(KNOWN_ALGORITHMS)
            insights = [
                AlgorithmInsight(
                    algorithm=name,
                    weight=stats.success_rate if stats.runs else uniform,
                    avg_runtime=stats.avg_runtime,
                    avg_nodes_expanded=stats.avg_nodes_expanded,
                    success_rate=stats.success_rate,
                    best_for=BEST_FOR.get(name, DEFAULT_BEST_FOR),
                )
                for name, stats in self._stats.items()
            ]
            insights.sort(key=lambda i: i.weight, reverse=True)
            return insights

    def get_algorithm_stats(self, algorithm: str) -> AlgorithmStats:
        with self._lock:
            stats = self._stats.get(algorithm, AlgorithmStats())
            return AlgorithmStats(list(stats.runtimes), list(stats.nodes_expanded), stats.success_count)

    # ==================== Persistence ====================

    def export_model(self) -> str:
        """JSON text of the current metrics snapshot"""
        with self._lock:
            return json.dumps({'metrics': self._metrics.to_dict(), 'timestamp': time.time()})

    def import_model(self, model_json: str) -> bool:
        """
        Restore metrics from export_model() output.

        Malformed input is logged and ignored; the prior metrics stay.

        Returns:
            True if the metrics were replaced
        """
        with self._lock:
            try:
                model = json.loads(model_json)
                metrics = ModelMetrics.from_dict(model['metrics'])
            except (ValueError, KeyError, TypeError) as e:
                logger.error("Failed to import model: %s", e)
                return False

            self._metrics = metrics
            return True
