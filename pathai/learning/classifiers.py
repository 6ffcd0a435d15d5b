"""
Classifiers Module
==================

Three small classifiers that map a GridFeatures vector to an algorithm
name plus a confidence score:

- DecisionTreeClassifier: entropy splits on midpoint thresholds
- NaiveBayesClassifier: per-label Gaussian likelihoods
- KNNClassifier: Euclidean nearest neighbours with performance tie-break

Each ``train`` call replaces whatever the classifier learned before.
"""

import math
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Union

import numpy as np

from ..config import EnsembleConfig
from .features import GridFeatures, TrainingData, FEATURE_NAMES

FeatureInput = Union[GridFeatures, Dict[str, Any], Sequence[float], np.ndarray]


class Prediction(NamedTuple):
    label: str
    confidence: float


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def as_feature_vector(features: FeatureInput) -> np.ndarray:
    """GridFeatures, feature mapping or raw 5-vector -> float array"""
    if isinstance(features, GridFeatures):
        return features.as_array()
    if isinstance(features, dict):
        return GridFeatures.from_mapping(features).as_array()
    vector = np.asarray(features, dtype=np.float64)
    if vector.shape != (len(FEATURE_NAMES),):
        raise ValueError(f"Expected {len(FEATURE_NAMES)} features, got shape {vector.shape}")
    return vector


def _stack(data: Sequence[TrainingData]) -> np.ndarray:
    return np.array([d.features.as_array() for d in data], dtype=np.float64).reshape(-1, len(FEATURE_NAMES))


# ==================== Decision Tree ====================

@dataclass
class TreeNode:
    """Internal split (feature index + threshold) or leaf (label + confidence)"""
    feature: Optional[int] = None
    threshold: float = 0.0
    left: Optional['TreeNode'] = None
    right: Optional['TreeNode'] = None
    label: Optional[str] = None
    confidence: float = 0.5

    @property
    def is_leaf(self) -> bool:
        return self.feature is None


def entropy(labels: Sequence[str]) -> float:
    n = len(labels)
    if n == 0:
        return 0.0
    result = 0.0
    for count in Counter(labels).values():
        p = count / n
        result -= p * math.log2(p)
    return result


class DecisionTreeClassifier:
    """
    Information-gain decision tree.

    Splits consider only midpoints between sorted unique feature values;
    values <= threshold go left. The first strictly best split (features
    in FEATURE_NAMES order, thresholds ascending) wins. Growth stops at
    ``max_depth`` or below ``min_samples`` samples.
    """

    def __init__(self, config: Optional[EnsembleConfig] = None):
        self.config = config or EnsembleConfig()
        self.tree: Optional[TreeNode] = None

    @property
    def is_trained(self) -> bool:
        return self.tree is not None

    def train(self, data: Sequence[TrainingData]):
        self.tree = None
        if not data:
            return
        X = _stack(data)
        labels = [d.label for d in data]
        self.tree = self._build(X, labels, 0)

    def _build(self, X: np.ndarray, labels: List[str], depth: int) -> TreeNode:
        if depth >= self.config.max_depth or len(labels) < self.config.min_samples:
            return self._leaf(labels)

        split = self._best_split(X, labels)
        if split is None:
            return self._leaf(labels)

        feature, threshold = split
        mask = X[:, feature] <= threshold
        left_labels = [l for l, m in zip(labels, mask) if m]
        right_labels = [l for l, m in zip(labels, mask) if not m]
        if not left_labels or not right_labels:
            return self._leaf(labels)

        return TreeNode(
            feature=feature,
            threshold=threshold,
            left=self._build(X[mask], left_labels, depth + 1),
            right=self._build(X[~mask], right_labels, depth + 1),
        )

    def _best_split(self, X: np.ndarray, labels: List[str]):
        parent_entropy = entropy(labels)
        n = len(labels)
        best_gain = 0.0
        best = None

        for feature in range(X.shape[1]):
            values = np.unique(X[:, feature])
            for lo, hi in zip(values[:-1], values[1:]):
                threshold = float((lo + hi) / 2)
                mask = X[:, feature] <= threshold
                left = [l for l, m in zip(labels, mask) if m]
                right = [l for l, m in zip(labels, mask) if not m]
                if not left or not right:
                    continue

                weighted = len(left) / n * entropy(left) + len(right) / n * entropy(right)
                gain = parent_entropy - weighted
                if gain > best_gain:
                    best_gain = gain
                    best = (feature, threshold)

        return best

    def _leaf(self, labels: List[str]) -> TreeNode:
        if not labels:
            return TreeNode(label=self.config.default_label, confidence=0.5)
        # most_common keeps first-seen order among equal counts
        label, count = Counter(labels).most_common(1)[0]
        return TreeNode(label=label, confidence=count / len(labels))

    def predict(self, features: FeatureInput) -> Prediction:
        if self.tree is None:
            return Prediction(self.config.default_label, 0.5)

        x = as_feature_vector(features)
        node = self.tree
        while not node.is_leaf:
            node = node.left if x[node.feature] <= node.threshold else node.right
        return Prediction(node.label, node.confidence)

    def depth(self) -> int:
        """Depth of the trained tree (a lone leaf has depth 0)"""
        def _depth(node: Optional[TreeNode]) -> int:
            if node is None or node.is_leaf:
                return 0
            return 1 + max(_depth(node.left), _depth(node.right))
        return _depth(self.tree)


# ==================== Naive Bayes ====================

@dataclass
class ClassStats:
    mean: np.ndarray
    variance: np.ndarray
    count: int
    prior: float


def logistic(x: float) -> float:
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


class NaiveBayesClassifier:
    """
    Gaussian naive Bayes.

    The confidence is the logistic of the winning log-score clamped to
    [confidence_floor, confidence_ceiling]; it is a ranking proxy, not a
    posterior probability.
    """

    def __init__(self, config: Optional[EnsembleConfig] = None):
        self.config = config or EnsembleConfig()
        self.class_stats: Dict[str, ClassStats] = {}

    @property
    def is_trained(self) -> bool:
        return bool(self.class_stats)

    def train(self, data: Sequence[TrainingData]):
        self.class_stats = {}
        if not data:
            return

        grouped: Dict[str, List[np.ndarray]] = {}
        for d in data:
            grouped.setdefault(d.label, []).append(d.features.as_array())

        total = len(data)
        for label, rows in grouped.items():
            X = np.vstack(rows)
            self.class_stats[label] = ClassStats(
                mean=X.mean(axis=0),
                variance=np.maximum(X.var(axis=0), self.config.variance_floor),
                count=len(rows),
                prior=len(rows) / total,
            )

    def log_score(self, label: str, features: FeatureInput) -> float:
        stats = self.class_stats[label]
        x = as_feature_vector(features)
        var = stats.variance
        log_likelihood = -((x - stats.mean) ** 2) / (2 * var) - 0.5 * np.log(2 * math.pi * var)
        return float(math.log(stats.prior) + log_likelihood.sum())

    def predict(self, features: FeatureInput) -> Prediction:
        if not self.class_stats:
            return Prediction(self.config.default_label, 0.5)

        best_label = None
        best_score = -math.inf
        for label in self.class_stats:
            score = self.log_score(label, features)
            if best_label is None or score > best_score:
                best_label = label
                best_score = score

        confidence = clamp(logistic(best_score),
                           self.config.confidence_floor, self.config.confidence_ceiling)
        return Prediction(best_label, confidence)


# ==================== K-Nearest Neighbours ====================

class KNNClassifier:
    """
    Majority vote among the k nearest training samples.

    k = clamp(n // knn_divisor, 1, knn_max_k). Among labels with equal
    votes the one with the higher average recorded performance wins.
    """

    def __init__(self, config: Optional[EnsembleConfig] = None):
        self.config = config or EnsembleConfig()
        self.X = np.empty((0, len(FEATURE_NAMES)))
        self.labels: List[str] = []
        self.performance = np.empty(0)
        self.k = 1

    @property
    def is_trained(self) -> bool:
        return len(self.labels) > 0

    def train(self, data: Sequence[TrainingData]):
        self.X = _stack(data)
        self.labels = [d.label for d in data]
        self.performance = np.array([d.performance for d in data], dtype=np.float64)
        self.k = min(self.config.knn_max_k, max(1, len(data) // self.config.knn_divisor))

    def predict(self, features: FeatureInput) -> Prediction:
        if not self.labels:
            return Prediction(self.config.default_label, 0.5)

        x = as_feature_vector(features)
        distances = np.linalg.norm(self.X - x, axis=1)
        nearest = np.argsort(distances, kind='stable')[:self.k]

        # label -> [votes, performance sum], in order of first appearance
        votes: Dict[str, List[float]] = {}
        for i in nearest:
            entry = votes.setdefault(self.labels[i], [0, 0.0])
            entry[0] += 1
            entry[1] += float(self.performance[i])

        best_label = self.config.default_label
        best_count = 0
        best_perf = 0.0
        for label, (count, perf_sum) in votes.items():
            avg_perf = perf_sum / count
            if count > best_count or (count == best_count and avg_perf > best_perf):
                best_label = label
                best_count = count
                best_perf = avg_perf

        confidence = clamp(0.5 * best_count / self.k + 0.5 * best_perf,
                           self.config.confidence_floor, self.config.confidence_ceiling)
        return Prediction(best_label, confidence)
