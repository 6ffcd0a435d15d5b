"""
Pipeline Runner Module
======================

Benchmark runner: random scenarios -> every search algorithm -> online
learner, with per-algorithm aggregation and JSON output.
"""

import json
import logging
import math
import numpy as np
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field, asdict

from ..config import Config
from ..grid import GridGenerator
from ..planning import Algorithm, SearchEngine
from ..learning import OnlineLearningSystem, ExecutionData, extract_features

logger = logging.getLogger(__name__)


@dataclass
class ScenarioResult:
    """Result from a single scenario run"""
    seed: int
    start: List[int] = field(default_factory=list)
    end: List[int] = field(default_factory=list)
    grid_stats: Dict[str, Any] = field(default_factory=dict)
    algorithms: Dict[str, Dict] = field(default_factory=dict)
    recommended: Optional[str] = None
    success: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class AggregatedResults:
    """Aggregated results from multiple scenarios"""
    num_scenarios: int = 0
    algorithms: List[str] = field(default_factory=list)
    summary: Dict[str, Dict] = field(default_factory=dict)
    metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return asdict(self)


def _mean(values: List[float]) -> Optional[float]:
    return float(np.mean(values)) if values else None


def _std(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return float(np.std(values)) if len(values) > 1 else 0.0


class BenchmarkRunner:
    """
    Runs every search algorithm on a series of random grids.

    Each run is also handed to an OnlineLearningSystem, so a suite doubles
    as a training session for the algorithm recommender.
    """

    ALGORITHMS = [a.value for a in Algorithm]

    def __init__(self, config: Optional[Config] = None,
                 learner: Optional[OnlineLearningSystem] = None):
        """
        Initialize benchmark runner.

        Args:
            config: Configuration object (uses default if None)
            learner: Learner fed with every execution (a new one if None)
        """
        self.config = config or Config()
        self.engine = SearchEngine(self.config.search)
        self.learner = learner or OnlineLearningSystem(self.config.learning, self.config.ensemble)

    def run_single_scenario(self,
                            seed: int,
                            algorithms: Optional[List[str]] = None,
                            verbose: bool = False) -> ScenarioResult:
        """
        Run a single scenario with all algorithms.

        Args:
            seed: Random seed for the scenario grid and endpoints
            algorithms: Algorithms to run (default: all)
            verbose: Print progress

        Returns:
            ScenarioResult with per-algorithm summaries
        """
        algorithms = algorithms or self.ALGORITHMS
        result = ScenarioResult(seed=seed)

        try:
            generator = GridGenerator(self.config.grid, seed=seed)
            grid, start, end = generator.generate_scenario()
            features = extract_features(grid, start, end)

            result.start = list(start)
            result.end = list(end)
            result.grid_stats = grid.get_stats()
            result.recommended = self.learner.predict_best_algorithm(features)

            if verbose:
                print(f"[Seed {seed}] Grid {grid.rows}x{grid.cols}: "
                      f"start={start}, end={end}, walls={grid.wall_count}")

            for name in algorithms:
                run = self.engine.run(name, grid, start, end, record_steps=False)
                result.algorithms[run.algorithm] = run.to_dict()
                self.learner.add_execution(ExecutionData.from_result(run, features))

                if verbose:
                    status = "found" if run.path_found else "no path"
                    print(f"[Seed {seed}] {run.algorithm}: {status}, "
                          f"{run.nodes_expanded} nodes ({run.elapsed_time:.2f}ms)")

            result.success = True

        except Exception as e:
            # One bad scenario must not abort the suite
            logger.exception("Scenario %d failed", seed)
            result.error = str(e)
            result.success = False

        return result

    def run_suite(self,
                  num_scenarios: int = 10,
                  seed_base: int = 42,
                  algorithms: Optional[List[str]] = None,
                  output_dir: Optional[str] = 'results',
                  verbose: bool = True) -> AggregatedResults:
        """
        Run full benchmark suite.

        Args:
            num_scenarios: Number of scenarios to run
            seed_base: Base seed for reproducibility
            algorithms: Algorithms to compare
            output_dir: Output directory (None: nothing is written)
            verbose: Print progress

        Returns:
            AggregatedResults with all statistics
        """
        algorithms = algorithms or self.ALGORITHMS
        all_results: List[ScenarioResult] = []

        if verbose:
            print(f"Running {num_scenarios} scenarios...")
            print(f"Algorithms: {algorithms}")

        for i in range(num_scenarios):
            seed = seed_base + i
            if verbose:
                print(f"\n[{i+1}/{num_scenarios}] Running seed {seed}...")
            all_results.append(self.run_single_scenario(seed, algorithms, verbose))

        aggregated = self._aggregate_results(all_results, algorithms)
        aggregated.metrics = self.learner.get_metrics().to_dict()

        if output_dir:
            output_path = Path(output_dir)
            output_path.mkdir(parents=True, exist_ok=True)
            with open(output_path / 'aggregated_results.json', 'w') as f:
                json.dump(aggregated.to_dict(), f, indent=2, default=str)
            with open(output_path / 'scenarios.json', 'w') as f:
                json.dump([r.to_dict() for r in all_results], f, indent=2, default=str)
            with open(output_path / 'model.json', 'w') as f:
                f.write(self.learner.export_model())
            logger.info("Wrote suite results to %s", output_path)

        if verbose:
            self._print_summary(aggregated)

        return aggregated

    def _aggregate_results(self,
                           results: List[ScenarioResult],
                           algorithms: List[str]) -> AggregatedResults:
        """Aggregate results from multiple scenarios"""
        names = [Algorithm.from_name(a).value for a in algorithms]
        agg = AggregatedResults(num_scenarios=len(results), algorithms=names)

        for name in names:
            runtimes = []
            nodes = []
            costs = []
            successes = 0

            for result in results:
                run = result.algorithms.get(name)
                if run is None:
                    continue
                runtimes.append(float(run['elapsed_time']))
                nodes.append(float(run['nodes_expanded']))
                if run['path_found']:
                    successes += 1
                    if run['path_cost'] is not None and math.isfinite(run['path_cost']):
                        costs.append(float(run['path_cost']))

            n = len(results)
            agg.summary[name] = {
                'success_rate': successes / n if n > 0 else 0,
                'runtime_mean_ms': _mean(runtimes),
                'runtime_std_ms': _std(runtimes),
                'nodes_mean': _mean(nodes),
                'nodes_std': _std(nodes),
                'cost_mean': _mean(costs),
                'cost_std': _std(costs),
                'n_success': successes,
                'n_total': n,
            }

        return agg

    def _print_summary(self, agg: AggregatedResults):
        """Print summary table"""
        print("\n" + "=" * 80)
        print("BENCHMARK SUMMARY")
        print("=" * 80)
        print(f"Total scenarios: {agg.num_scenarios}")
        print()

        print(f"{'Algorithm':<22} {'Success':>10} {'Nodes':>10} {'Cost':>10} {'Runtime(ms)':>14}")
        print("-" * 70)

        for name in agg.algorithms:
            s = agg.summary.get(name, {})
            rate = s.get('success_rate', 0) * 100
            nodes = s.get('nodes_mean')
            cost = s.get('cost_mean')
            runtime = s.get('runtime_mean_ms')

            nodes_str = f"{nodes:.1f}" if nodes is not None else "N/A"
            cost_str = f"{cost:.1f}" if cost is not None else "N/A"
            runtime_str = f"{runtime:.3f}" if runtime is not None else "N/A"

            print(f"{name:<22} {rate:>9.1f}% {nodes_str:>10} {cost_str:>10} {runtime_str:>14}")

        print("-" * 70)
        m = agg.metrics
        if m:
            print(f"Recommender: best={m.get('best_algorithm')} "
                  f"accuracy={m.get('accuracy', 0):.3f} "
                  f"confidence={m.get('recommendation_confidence', 0):.3f} "
                  f"samples={m.get('total_samples')}")
        print("=" * 80)
