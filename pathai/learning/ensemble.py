"""
Ensemble Module
===============

Majority-vote combination of the decision tree, naive Bayes and KNN
classifiers.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..config import EnsembleConfig
from .classifiers import (
    Prediction,
    DecisionTreeClassifier,
    NaiveBayesClassifier,
    KNNClassifier,
    FeatureInput,
    clamp,
)
from .features import TrainingData

logger = logging.getLogger(__name__)


class EnsembleModel:
    """
    Three-classifier voting ensemble.

    The label with most votes wins, ties going to the higher average
    confidence. Combined confidence is
    ``clamp(0.5 * votes / 3 + 0.5 * avg_confidence, 0.5, 0.99)``.
    """

    def __init__(self, config: Optional[EnsembleConfig] = None):
        self.config = config or EnsembleConfig()
        self.decision_tree = DecisionTreeClassifier(self.config)
        self.naive_bayes = NaiveBayesClassifier(self.config)
        self.knn = KNNClassifier(self.config)
        self.training_data: List[TrainingData] = []

    @property
    def training_size(self) -> int:
        return len(self.training_data)

    @property
    def members(self):
        return [self.decision_tree, self.naive_bayes, self.knn]

    def train(self, data: Sequence[TrainingData]):
        self.training_data = list(data)
        for model in self.members:
            model.train(self.training_data)
        logger.debug("Ensemble trained on %d samples (%d labels)",
                     len(self.training_data), len({d.label for d in self.training_data}))

    def member_predictions(self, features: FeatureInput) -> List[Prediction]:
        return [model.predict(features) for model in self.members]

    def predict(self, features: FeatureInput) -> Prediction:
        if not self.training_data:
            return Prediction(self.config.default_label, 0.5)

        votes: Dict[str, List[float]] = {}
        for pred in self.member_predictions(features):
            votes.setdefault(pred.label, []).append(pred.confidence)

        best_label = self.config.default_label
        best_count = 0
        best_confidence = 0.5
        for label, confidences in votes.items():
            avg = sum(confidences) / len(confidences)
            if len(confidences) > best_count or (len(confidences) == best_count and avg > best_confidence):
                best_label = label
                best_count = len(confidences)
                best_confidence = avg

        n_models = len(self.members)
        confidence = clamp(0.5 * best_count / n_models + 0.5 * best_confidence,
                           self.config.confidence_floor, self.config.confidence_ceiling)
        return Prediction(best_label, confidence)
