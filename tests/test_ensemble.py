import pytest

from pathai.config import EnsembleConfig
from pathai.learning import EnsembleModel, GridFeatures, TrainingData
from pathai.learning.classifiers import Prediction


def sample(grid_size, label, performance=0.5):
    return TrainingData(GridFeatures(grid_size=grid_size), label, performance)


def test_empty_ensemble_returns_default():
    model = EnsembleModel()
    assert model.predict(GridFeatures()) == ('A*', 0.5)
    assert model.training_size == 0


def test_empty_ensemble_uses_configured_default():
    model = EnsembleModel(EnsembleConfig(default_label='Dijkstra'))
    assert model.predict(GridFeatures()).label == 'Dijkstra'


def test_unanimous_vote():
    model = EnsembleModel()
    model.train([sample(100, 'A*'), sample(120, 'A*'), sample(400, 'BFS'), sample(420, 'BFS')])

    predictions = model.member_predictions(GridFeatures(grid_size=110))
    assert [p.label for p in predictions] == ['A*', 'A*', 'A*']

    label, confidence = model.predict(GridFeatures(grid_size=110))
    assert label == 'A*'
    avg = sum(p.confidence for p in predictions) / 3
    assert confidence == pytest.approx(min(0.99, 0.5 + 0.5 * avg))
    assert 0.5 <= confidence <= 0.99


def test_single_sample_training():
    model = EnsembleModel()
    model.train([sample(64, 'Greedy Best-First')])

    assert model.training_size == 1
    assert model.predict(GridFeatures(grid_size=64)).label == 'Greedy Best-First'


def test_vote_tie_prefers_higher_confidence(monkeypatch):
    model = EnsembleModel()
    model.train([sample(1, 'A*')])

    votes = [Prediction('BFS', 0.6), Prediction('DFS', 0.9), Prediction('A*', 0.7)]
    monkeypatch.setattr(model, 'member_predictions', lambda features: votes)

    label, confidence = model.predict(GridFeatures())
    assert label == 'DFS'
    assert confidence == pytest.approx(0.5 * 1 / 3 + 0.5 * 0.9)


def test_majority_beats_confidence(monkeypatch):
    model = EnsembleModel()
    model.train([sample(1, 'A*')])

    votes = [Prediction('BFS', 0.55), Prediction('DFS', 0.99), Prediction('BFS', 0.65)]
    monkeypatch.setattr(model, 'member_predictions', lambda features: votes)

    label, confidence = model.predict(GridFeatures())
    assert label == 'BFS'
    assert confidence == pytest.approx(0.5 * 2 / 3 + 0.5 * 0.6)
