import json
import logging
import threading

import pytest

from pathai.config import JsonFormatter, LearningConfig
from pathai.learning import (
    ExecutionData,
    GridFeatures,
    ModelMetrics,
    OnlineLearningSystem,
    performance_score,
)
from pathai.planning import run_search


def execution(algorithm, found=True, grid_size=100, runtime=5.0, nodes=20):
    return ExecutionData(
        grid_features=GridFeatures(grid_size=grid_size, wall_density=0.2, path_length=10,
                                   start_to_end_distance=7.5),
        algorithm=algorithm,
        runtime=runtime,
        nodes_expanded=nodes,
        path_cost=12.0 if found else float('inf'),
        path_found=found,
        timestamp=1000.0,
    )


@pytest.fixture
def learner():
    return OnlineLearningSystem()


def test_untrained_defaults(learner):
    metrics = learner.get_metrics()

    assert metrics.total_samples == 0
    assert metrics.best_algorithm == 'A*'
    assert metrics.accuracy == 0.5
    assert learner.predict_best_algorithm(GridFeatures()) == 'A*'


def test_single_execution_is_only_buffered(learner):
    learner.add_execution(execution('BFS'))

    assert learner.buffered == 1
    assert learner.history_size == 1
    assert learner.get_metrics().total_samples == 0
    assert learner.get_algorithm_stats('BFS').runs == 0


def test_full_batch_trains(learner):
    learner.add_execution(execution('A*'))
    learner.add_execution(execution('A*'))

    metrics = learner.get_metrics()
    assert learner.buffered == 0
    assert metrics.total_samples == 2
    assert metrics.best_algorithm == 'A*'
    assert metrics.accuracy == 0.99
    assert metrics.loss == pytest.approx(0.01)
    assert metrics.recommendation_confidence == 0.99


def test_best_algorithm_follows_latest_execution(learner):
    last = execution('DFS', found=False, grid_size=400)
    learner.add_execution(execution('BFS', grid_size=100))
    learner.add_execution(last)

    metrics = learner.get_metrics()
    assert metrics.best_algorithm == learner.predict(last.grid_features).label == 'DFS'
    # BFS leads on success rate, so only the BFS sample validates
    assert metrics.accuracy == 0.5
    assert metrics.loss == pytest.approx(0.5)


def test_history_is_capped():
    learner = OnlineLearningSystem(LearningConfig(batch_size=2, history_limit=4))
    for i in range(6):
        learner.add_execution(execution('A*', grid_size=100 + i))

    assert learner.history_size == 4
    assert learner.get_metrics().total_samples == 6
    assert learner.get_algorithm_stats('A*').runs == 6


def test_insights_before_training(learner):
    insights = learner.get_algorithm_insights()

    assert len(insights) == 6
    assert all(i.weight == pytest.approx(1 / 6) for i in insights)
    by_name = {i.algorithm: i for i in insights}
    assert by_name['A*'].best_for == 'Weighted grids & long paths'
    assert by_name['BFS'].best_for == 'Unweighted grids'
    assert by_name['DFS'].best_for == 'General purpose'
    assert by_name['D* Lite'].avg_runtime == 0.0


def test_insights_sorted_by_success_rate(learner):
    learner.add_execution(execution('A*', runtime=4.0, nodes=30))
    learner.add_execution(execution('BFS', found=False, runtime=8.0, nodes=50))

    insights = learner.get_algorithm_insights()
    assert [i.algorithm for i in insights] == [
        'A*', 'Dijkstra', 'DFS', 'Greedy Best-First', 'D* Lite', 'BFS',
    ]
    assert insights[0].weight == 1.0
    assert insights[0].avg_runtime == 4.0
    assert insights[0].avg_nodes_expanded == 30.0
    assert insights[-1].weight == 0.0
    assert insights[-1].success_rate == 0.0


def test_get_metrics_returns_copy(learner):
    metrics = learner.get_metrics()
    metrics.accuracy = 0.0

    assert learner.get_metrics().accuracy == 0.5


def test_export_import_round_trip(learner):
    learner.add_execution(execution('A*'))
    learner.add_execution(execution('Dijkstra', grid_size=300))
    exported = learner.export_model()

    payload = json.loads(exported)
    assert set(payload) == {'metrics', 'timestamp'}

    other = OnlineLearningSystem()
    assert other.import_model(exported)
    assert other.get_metrics() == learner.get_metrics()


@pytest.mark.parametrize('payload', [
    'not json',
    '[1, 2]',
    '{}',
    '{"metrics": 5}',
    '{"metrics": {}}',
    '{"metrics": {"accuracy": "high", "loss": 0.1, "total_samples": 1, "best_algorithm": "A*",'
    ' "recommendation_confidence": 0.6, "last_updated": 0}}',
])
def test_malformed_import_keeps_metrics(learner, payload, caplog):
    before = learner.get_metrics()

    assert not learner.import_model(payload)
    assert learner.get_metrics() == before
    assert 'Failed to import model' in caplog.text


def test_import_accepts_camel_case(learner):
    model = {'metrics': {
        'accuracy': 0.8,
        'loss': 0.2,
        'totalSamples': 40,
        'bestAlgorithm': 'Dijkstra',
        'recommendationConfidence': 0.9,
        'lastUpdated': 1700000000000,
    }}
    assert learner.import_model(json.dumps(model))

    metrics = learner.get_metrics()
    assert metrics.best_algorithm == 'Dijkstra'
    assert metrics.total_samples == 40


def test_model_metrics_rejects_non_mapping():
    with pytest.raises(TypeError):
        ModelMetrics.from_dict([('accuracy', 0.5)])


def test_execution_from_camel_case_dict():
    data = ExecutionData.from_dict({
        'gridFeatures': {'gridSize': 400, 'wallDensity': 0.3, 'averageWeight': 2.0,
                         'pathLength': 20, 'startToEndDistance': 14.1},
        'algorithm': 'BFS',
        'runtime': 3.5,
        'nodesExpanded': 120,
        'pathCost': 21,
        'pathFound': True,
        'timestamp': 5.0,
    })

    assert data.grid_features.grid_size == 400
    assert data.grid_features.average_weight == 2.0
    assert data.nodes_expanded == 120
    assert data.path_found
    assert data.to_dict()['grid_features']['wall_density'] == 0.3


def test_execution_from_result(open_grid):
    result = run_search('A*', open_grid, (0, 0), (4, 4))
    data = ExecutionData.from_result(result, GridFeatures(grid_size=25), timestamp=123.0)

    assert data.algorithm == 'A*'
    assert data.path_found
    assert data.path_cost == 4.0
    assert data.nodes_expanded == result.nodes_expanded
    assert data.timestamp == 123.0


def test_performance_score():
    assert performance_score(execution('A*', runtime=50.0, nodes=500)) == pytest.approx(0.5)
    assert performance_score(execution('A*', found=False, runtime=1000.0, nodes=500)) == pytest.approx(0.06)
    assert performance_score(execution('A*', runtime=0.0, nodes=0)) == pytest.approx(1.0)


def test_reset(learner):
    learner.add_execution(execution('A*'))
    learner.add_execution(execution('BFS'))
    learner.add_execution(execution('DFS'))
    learner.reset()

    assert learner.history_size == 0
    assert learner.buffered == 0
    assert learner.get_metrics().total_samples == 0
    assert learner.get_algorithm_stats('A*').runs == 0


def test_concurrent_executions():
    learner = OnlineLearningSystem()
    algorithms = ['A*', 'BFS', 'Dijkstra', 'DFS']

    def worker(name):
        for i in range(25):
            learner.add_execution(execution(name, grid_size=50 + i))

    threads = [threading.Thread(target=worker, args=(name,)) for name in algorithms]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert learner.history_size == 100
    assert learner.buffered == 0
    assert learner.get_metrics().total_samples == 100


def test_performance_score_stays_within_unit_interval():
    # Negative inputs can arrive through ExecutionData.from_dict
    assert performance_score(execution('A*', runtime=-500.0, nodes=-2000)) == pytest.approx(1.0)
    assert performance_score(execution('A*', found=False, runtime=-1.0, nodes=0)) == pytest.approx(0.2)


def test_add_executions_trains_in_batches(learner):
    learner.add_executions([execution('A*'), execution('BFS'), execution('DFS')])

    assert learner.history_size == 3
    assert learner.buffered == 1
    assert learner.get_metrics().total_samples == 2
    assert learner.get_algorithm_stats('DFS').runs == 0


def test_training_emits_structured_log(learner, caplog):
    caplog.set_level(logging.INFO, logger='pathai.learning.online')
    learner.add_execution(execution('A*'))
    learner.add_execution(execution('A*'))

    records = [r for r in caplog.records if getattr(r, 'extra', None)]
    assert len(records) == 1
    payload = json.loads(JsonFormatter().format(records[0]))
    assert payload['event'] == 'model_trained'
    assert payload['best_algorithm'] == 'A*'
    assert payload['total_samples'] == 2
