#!/usr/bin/env python3
"""
PathAI - Main Entry Point
=========================

Usage:
    # Single algorithm on a random grid
    python -m pathai.main run --algorithm "A*" --heuristic diagonal --seed 42

    # All six algorithms on the same grid
    python -m pathai.main compare --seed 42

    # Benchmark suite (also trains the recommender)
    python -m pathai.main suite --num_scenarios 10 --seed_base 42 --output results/

    # Dynamic obstacle demo
    python -m pathai.main replan --seed 42 --obstacles 8

    # Train on random scenarios, then recommend an algorithm
    python -m pathai.main predict --rows 30 --cols 30 --wall_density 0.3 --train 12

As a library:
    from pathai import Grid, run_search

    grid = Grid.from_strings(["....", ".##.", "...."])
    result = run_search("A*", grid, (0, 0), (2, 3), heuristic="diagonal")
"""

import argparse
import sys
import json


def _build_config(args):
    from pathai import Config, configure_logging

    config = Config()
    config.random_seed = getattr(args, 'seed', None)
    config.verbose = getattr(args, 'verbose', False)

    for name in ('rows', 'cols', 'wall_density', 'max_weight'):
        value = getattr(args, name, None)
        if value is not None:
            setattr(config.grid, name, value)
    config._validate()

    if config.verbose:
        config.logging.level = 'DEBUG'
    if getattr(args, 'json_logs', False):
        config.logging.json_format = True
    configure_logging(config=config.logging)
    return config


def _scenario(config, seed):
    from pathai import GridGenerator
    return GridGenerator(config.grid, seed=seed).generate_scenario()


def _fmt_cost(cost):
    return f"{cost:.1f}" if cost != float('inf') else "inf"


def run_single(args):
    """Run one algorithm on a random grid"""
    from pathai import SearchEngine

    config = _build_config(args)
    grid, start, end = _scenario(config, args.seed)
    engine = SearchEngine(config.search)

    result = engine.run(args.algorithm, grid, start, end, heuristic=args.heuristic)

    print("\n" + "=" * 60)
    print(f"SEARCH RESULT (seed={args.seed})")
    print("=" * 60)
    print(f"Grid: {grid.rows}x{grid.cols}, walls={grid.wall_count}, start={start}, end={end}")
    status_icon = "✓" if result.path_found else "✗"
    print(f"{status_icon} {result.algorithm}: cost={_fmt_cost(result.path_cost)} "
          f"length={result.path_length} nodes={result.nodes_expanded} "
          f"steps={len(result.steps or [])} time={result.elapsed_time:.2f}ms")
    print("=" * 60)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))

    return 0 if result.path_found else 1


def run_compare(args):
    """Run every algorithm on the same random grid"""
    from pathai import SearchEngine

    config = _build_config(args)
    config.search.parallel_compare = args.parallel
    grid, start, end = _scenario(config, args.seed)
    comparison = SearchEngine(config.search).compare(grid, start, end, heuristic=args.heuristic)

    print("\n" + "=" * 70)
    print(f"ALGORITHM COMPARISON (seed={args.seed}, {grid.rows}x{grid.cols}, heuristic={args.heuristic})")
    print("=" * 70)
    print(f"{'Algorithm':<22} {'Found':>6} {'Cost':>8} {'Length':>8} {'Nodes':>8} {'Time(ms)':>10}")
    print("-" * 70)
    for s in comparison.summaries:
        found = "yes" if s.path_found else "no"
        print(f"{s.algorithm:<22} {found:>6} {_fmt_cost(s.path_cost):>8} {s.path_length:>8} "
              f"{s.nodes_expanded:>8} {s.elapsed_time:>10.3f}")
    print("-" * 70)
    print(f"Fastest: {comparison.fastest}  Most efficient: {comparison.most_efficient}  "
          f"Cheapest: {comparison.cheapest}")
    print("=" * 70)

    return 0


def run_suite(args):
    """Run benchmark suite"""
    from pathai import BenchmarkRunner

    config = _build_config(args)
    runner = BenchmarkRunner(config)

    algorithms = args.algorithms.split(',') if args.algorithms else None

    runner.run_suite(
        num_scenarios=args.num_scenarios,
        seed_base=args.seed_base,
        algorithms=algorithms,
        output_dir=args.output,
        verbose=True
    )

    print(f"\nResults saved to: {args.output}")

    return 0


def run_replan(args):
    """Plan, drop random obstacles on the grid, then repair the path"""
    from pathai import SearchEngine, DynamicReplanner, add_random_obstacles

    config = _build_config(args)
    grid, start, end = _scenario(config, args.seed)

    initial = SearchEngine(config.search).run(args.algorithm, grid, start, end, record_steps=False)
    if not initial.path_found:
        print(f"No initial path from {start} to {end}; try another seed")
        return 1

    replanner = DynamicReplanner(config.replan)
    replanner.replan(grid, initial.path, start, end)

    # Walls land on the path first so the repair is exercised
    changed = add_random_obstacles(grid, args.obstacles, protected=(start, end), seed=args.seed)
    for r, c in initial.path[1:-1][:args.on_path]:
        changed.set_wall(r, c)

    result = replanner.replan(changed, initial.path, start, end)

    print("\n" + "=" * 60)
    print(f"REPLANNING (seed={args.seed})")
    print("=" * 60)
    print(f"Initial {initial.algorithm} path: {initial.path_length} cells")
    print(f"Wall changes: +{len(result.added_walls)} / -{len(result.removed_walls)}")
    print(f"Path blocked: {result.path_blocked} at {result.block_point}")
    print(f"Replanned: {result.replanned} ({result.elapsed_time:.3f}ms)")
    print(f"Repaired path: {len(result.new_path)} cells, reaches goal: {result.reaches_goal}")
    print(f"Total replans: {replanner.replan_count}")
    print("=" * 60)

    return 0


def run_predict(args):
    """Train the recommender on random scenarios, then predict for a new grid"""
    from pathai import BenchmarkRunner, extract_features

    config = _build_config(args)
    runner = BenchmarkRunner(config)
    for i in range(args.train):
        runner.run_single_scenario(args.seed + 1 + i)

    grid, start, end = _scenario(config, args.seed)
    features = extract_features(grid, start, end)
    prediction = runner.learner.predict(features)
    metrics = runner.learner.get_metrics()

    print("\n" + "=" * 70)
    print(f"RECOMMENDATION (trained on {args.train} scenarios, {metrics.total_samples} samples)")
    print("=" * 70)
    for name, value in features.to_dict().items():
        print(f"  {name:<24} {value:>10.3f}")
    print(f"\nRecommended: {prediction.label} (confidence {prediction.confidence:.2f})")
    print(f"Model accuracy: {metrics.accuracy:.2f}, loss: {metrics.loss:.2f}")
    print()
    print(f"{'Algorithm':<22} {'Weight':>8} {'Success':>8} {'Nodes':>8} {'Time(ms)':>10}  Best for")
    print("-" * 70)
    for ins in runner.learner.get_algorithm_insights():
        print(f"{ins.algorithm:<22} {ins.weight:>8.2f} {ins.success_rate:>8.2f} "
              f"{ins.avg_nodes_expanded:>8.1f} {ins.avg_runtime:>10.3f}  {ins.best_for}")
    print("=" * 70)

    return 0


def main():
    parser = argparse.ArgumentParser(
        description='PathAI pathfinding lab',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    def add_grid_args(p):
        p.add_argument('--seed', type=int, default=42, help='Random seed')
        p.add_argument('--rows', type=int, help='Grid rows')
        p.add_argument('--cols', type=int, help='Grid columns')
        p.add_argument('--wall_density', type=float, help='Wall probability per cell')
        p.add_argument('--max_weight', type=int, help='Maximum cell weight')
        p.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
        p.add_argument('--json_logs', action='store_true', help='Log as JSON lines')

    # Run command
    run_parser = subparsers.add_parser('run', help='Run one algorithm')
    add_grid_args(run_parser)
    run_parser.add_argument('--algorithm', type=str, default='A*', help='Algorithm name')
    run_parser.add_argument('--heuristic', type=str, default='manhattan', help='Heuristic name')
    run_parser.add_argument('--json', action='store_true', help='Print result as JSON')

    # Compare command
    cmp_parser = subparsers.add_parser('compare', help='Compare all algorithms')
    add_grid_args(cmp_parser)
    cmp_parser.add_argument('--heuristic', type=str, default='manhattan', help='Heuristic name')
    cmp_parser.add_argument('--parallel', action='store_true', help='Run algorithms on a thread pool')

    # Suite command
    suite_parser = subparsers.add_parser('suite', help='Run benchmark suite')
    add_grid_args(suite_parser)
    suite_parser.add_argument('--num_scenarios', type=int, default=10, help='Number of scenarios')
    suite_parser.add_argument('--seed_base', type=int, default=42, help='Base seed')
    suite_parser.add_argument('--algorithms', type=str, help='Comma-separated algorithms')
    suite_parser.add_argument('--output', type=str, default='results', help='Output directory')

    # Replan command
    replan_parser = subparsers.add_parser('replan', help='Dynamic obstacle demo')
    add_grid_args(replan_parser)
    replan_parser.add_argument('--algorithm', type=str, default='A*', help='Initial planner')
    replan_parser.add_argument('--obstacles', type=int, default=8, help='Random walls to add')
    replan_parser.add_argument('--on_path', type=int, default=1, help='Walls placed on the path')

    # Predict command
    predict_parser = subparsers.add_parser('predict', help='Recommend an algorithm')
    add_grid_args(predict_parser)
    predict_parser.add_argument('--train', type=int, default=12, help='Training scenarios')

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 1

    from pathai import PathAIError

    try:
        if args.command == 'run':
            return run_single(args)
        elif args.command == 'compare':
            return run_compare(args)
        elif args.command == 'suite':
            return run_suite(args)
        elif args.command == 'replan':
            return run_replan(args)
        elif args.command == 'predict':
            return run_predict(args)
        else:
            parser.print_help()
            return 1
    except (PathAIError, ValueError) as e:
        print(f"Error: {e}")
        return 2


if __name__ == '__main__':
    sys.exit(main())
