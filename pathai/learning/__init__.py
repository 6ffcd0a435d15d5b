"""
Learning Module
===============

Grid features, the classifier ensemble and the online learning controller
that recommends a search algorithm.
"""

from .features import FEATURE_NAMES, GridFeatures, TrainingData, extract_features
from .classifiers import (
    Prediction,
    TreeNode,
    DecisionTreeClassifier,
    NaiveBayesClassifier,
    KNNClassifier,
    entropy,
    logistic,
)
from .ensemble import EnsembleModel
from .online import (
    ExecutionData,
    ModelMetrics,
    AlgorithmStats,
    AlgorithmInsight,
    OnlineLearningSystem,
    performance_score,
)

__all__ = [
    'FEATURE_NAMES',
    'GridFeatures',
    'TrainingData',
    'extract_features',
    'Prediction',
    'TreeNode',
    'DecisionTreeClassifier',
    'NaiveBayesClassifier',
    'KNNClassifier',
    'entropy',
    'logistic',
    'EnsembleModel',
    'ExecutionData',
    'ModelMetrics',
    'AlgorithmStats',
    'AlgorithmInsight',
    'OnlineLearningSystem',
    'performance_score',
]
