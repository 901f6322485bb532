"""
Main Entry Point for kdindex

This script provides a command-line interface around the KD-tree. It can:

1. Run a small demo of build / nearest / insert / rebalance
2. Generate a uniform random point set and save it as CSV
3. Build a tree from a CSV point set and answer nearest-neighbor queries
4. Run the brute force vs KD-tree benchmarks

Usage:
    # Demo on the four corners of the unit square
    python -m kdindex.main --demo

    # Generate 10,000 random 3-D points
    python -m kdindex.main --generate-data --num-points 10000 --dimensions 3 --output data/points.csv

    # Query a point set
    python -m kdindex.main --input data/points.csv --query 0.5,0.5,0.5 --query 0.1,0.9,0.2

    # Run benchmarks
    python -m kdindex.main --benchmark --num-points 1000 --trials 10
"""

import argparse
import csv
import sys
from pathlib import Path
from typing import List

from .geometry.kd_tree import KDTree, KDTreeError
from .synthetic_data import generate_uniform_points, save_points_to_csv, load_points_from_csv
from .benchmark.timing import Timer
from .benchmark.suites import (
    BenchmarkMismatchError,
    benchmark_nearest,
    benchmark_growing,
    print_comparison,
    results_to_rows
)


def print_header():
    """Print application header."""
    print("=" * 70)
    print("  KDINDEX - k-d Tree Nearest-Neighbor Search")
    print("=" * 70)
    print()


def parse_point(text: str) -> List[float]:
    """
    Parse a comma-separated coordinate list such as ``"1,2.5,-3"``.

    Integers stay integers so that integer point sets return integer points.
    """
    coords = []
    for part in text.split(','):
        part = part.strip()
        if not part:
            raise ValueError(f"Empty coordinate in point {text!r}")
        try:
            coords.append(int(part))
        except ValueError:
            coords.append(float(part))
    return coords


def run_demo(args) -> None:
    """Walk through the basic operations on a four-point tree."""
    print("Demo:")
    print("-" * 40)

    points = [[0, 0], [1, 1], [1, 0], [0, 1]]
    tree = KDTree(points)
    print(f"  Built tree over {points}")
    print(f"  Size: {tree.size()}, height: {tree.height()}")

    for query in ([0, 0], [1, 1], [-3, 5], [25, -4]):
        print(f"  nearest({query}) = {tree.nearest(query)}")

    tree.insert([25, 0])
    print("  Inserted (25, 0)")
    print(f"  nearest([25, -4]) = {tree.nearest([25, -4])}")

    tree.rebalance()
    print(f"  Rebalanced: size {tree.size()}, height {tree.height()}")
    print(f"  Elements: {tree.elements()}")
    print()


def generate_data(args) -> None:
    """Generate a uniform point set and write it to CSV."""
    print("Generating Synthetic Data...")
    print("-" * 40)
    print(f"  Points: {args.num_points}")
    print(f"  Dimensions: {args.dimensions}")
    print(f"  Random seed: {args.seed}")

    point_set = generate_uniform_points(args.num_points, args.dimensions, seed=args.seed)
    path = save_points_to_csv(point_set, args.output)

    print(f"Data saved to: {path}")
    print()


def run_queries(args) -> None:
    """Build a tree from a CSV point set and answer the requested queries."""
    print(f"Loading data from: {args.input}")
    print("-" * 40)

    point_set = load_points_from_csv(args.input)
    print(f"  Points: {len(point_set)}")
    print(f"  Dimensions: {point_set.dimensions}")

    with Timer("  Build", verbose=not args.quiet):
        tree = KDTree(point_set.points, dimensions=point_set.dimensions)

    for text in args.insert or []:
        point = parse_point(text)
        tree.insert(point)
        print(f"  Inserted {tuple(point)}")

    if args.rebalance:
        with Timer("  Rebalance", verbose=not args.quiet):
            tree.rebalance()

    print(f"  Tree size: {tree.size()}, height: {tree.height()}")
    print()

    for text in args.query or []:
        query = parse_point(text)
        result = tree.nearest(query)
        print(f"  nearest({tuple(query)}) = {result}")
    print()


def run_benchmark(args) -> None:
    """Run the nearest and growing benchmark suites."""
    print("Running Performance Benchmarks...")
    print("-" * 40)
    print(f"  Points: {args.num_points}")
    print(f"  Queries: {args.num_queries}")
    print(f"  Trials: {args.trials}")
    print(f"  Rebalance every: {args.rebalance_every}")

    nearest_results = benchmark_nearest(
        n_points=args.num_points,
        n_queries=args.num_queries,
        dimensions=args.dimensions,
        trials=args.trials,
        seed=args.seed
    )
    print_comparison("Nearest (build + query)", nearest_results)

    growing_results = benchmark_growing(
        n_points=args.num_points,
        dimensions=args.growing_dimensions,
        rebalance_every=args.rebalance_every,
        trials=1,
        seed=args.seed
    )
    print_comparison("Growing (insert + query)", growing_results)

    if args.save_benchmark:
        rows = (results_to_rows('nearest', nearest_results)
                + results_to_rows('growing', growing_results))
        fieldnames = []
        for row in rows:
            for key in row:
                if key not in fieldnames:
                    fieldnames.append(key)

        output_path = Path(args.benchmark_output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(rows)

        print(f"Results saved to: {output_path}")
        print()


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description='k-d tree nearest-neighbor search',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Demo
  python -m kdindex.main --demo

  # Generate data
  python -m kdindex.main --generate-data --num-points 1000 --dimensions 2

  # Query an existing point set
  python -m kdindex.main --input data/points.csv --query 0.5,0.5

  # Run benchmarks
  python -m kdindex.main --benchmark --num-points 1000 --trials 10
        """
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument('--demo', action='store_true',
                            help='Run the built-in demo (default)')
    mode_group.add_argument('--generate-data', '-g', action='store_true',
                            help='Generate a random point set CSV')
    mode_group.add_argument('--input', '-i', type=str,
                            help='Path to a point set CSV to query')
    mode_group.add_argument('--benchmark', '-b', action='store_true',
                            help='Run performance benchmarks')

    gen_group = parser.add_argument_group('Data Generation')
    gen_group.add_argument('--num-points', '-n', type=int, default=1000,
                           help='Number of points (default: 1000)')
    gen_group.add_argument('--dimensions', '-k', type=int, default=3,
                           help='Coordinates per point (default: 3)')
    gen_group.add_argument('--seed', type=int, default=42,
                           help='Random seed (default: 42)')

    query_group = parser.add_argument_group('Queries')
    query_group.add_argument('--query', '-q', action='append', metavar='X,Y,...',
                             help='Query point; may be repeated')
    query_group.add_argument('--insert', action='append', metavar='X,Y,...',
                             help='Point to insert before querying; may be repeated')
    query_group.add_argument('--rebalance', action='store_true',
                             help='Rebalance after insertions')

    bench_group = parser.add_argument_group('Benchmarking')
    bench_group.add_argument('--num-queries', type=int, default=100,
                             help='Queries in the nearest benchmark (default: 100)')
    bench_group.add_argument('--growing-dimensions', type=int, default=5,
                             help='Dimensions in the growing benchmark (default: 5)')
    bench_group.add_argument('--trials', type=int, default=10,
                             help='Timing trials for the nearest benchmark (default: 10)')
    bench_group.add_argument('--rebalance-every', type=int, default=100000,
                             help='Rebalance interval in the growing benchmark (default: 100000)')
    bench_group.add_argument('--save-benchmark', action='store_true',
                             help='Save benchmark results to CSV')
    bench_group.add_argument('--benchmark-output', type=str,
                             default='benchmarks/benchmark_results.csv',
                             help='Benchmark CSV path (default: benchmarks/benchmark_results.csv)')

    out_group = parser.add_argument_group('Output')
    out_group.add_argument('--output', '-o', type=str, default='data/points.csv',
                           help='Output CSV for generated data (default: data/points.csv)')
    out_group.add_argument('--quiet', action='store_true',
                           help='Minimal output')

    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.quiet:
        print_header()

    try:
        if args.generate_data:
            generate_data(args)
        elif args.input:
            run_queries(args)
        elif args.benchmark:
            run_benchmark(args)
        else:
            run_demo(args)
    except (KDTreeError, BenchmarkMismatchError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
