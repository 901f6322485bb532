#!/usr/bin/env python3
"""
Benchmark Script: Brute Force vs KD-Tree Scaling

This script runs the nearest and growing benchmark suites over a range of
problem sizes to show how the KD-tree's advantage over a linear scan grows
with the number of points:

1. Nearest: brute force vs bulk-built tree vs insertion-built tree
2. Growing: interleaved insert + query, with and without periodic rebalance

Each suite cross-checks that all implementations found the same neighbors.

Usage:
    python benchmarks/benchmark_kdtree.py
    python benchmarks/benchmark_kdtree.py --sizes 100,1000,10000 --trials 5

Output:
    - Console table with timing results
    - CSV file with detailed results (with --save)
"""

import argparse
import csv
import sys
from pathlib import Path
from typing import List, Dict, Any

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from kdindex.benchmark.suites import (
    benchmark_nearest,
    benchmark_growing,
    results_to_rows
)
from kdindex.benchmark.timing import compute_speedup


def run_scaling(
    sizes: List[int],
    n_queries: int,
    dimensions: int,
    trials: int,
    rebalance_every: int,
    seed: int
) -> List[Dict[str, Any]]:
    """Run both suites for every size and collect flat result rows."""
    rows: List[Dict[str, Any]] = []

    for size in sizes:
        print(f"\nBenchmarking size: {size}")

        nearest = benchmark_nearest(size, n_queries, dimensions, trials, seed)
        naive_ms = nearest['naive'].mean_ms
        for name, result in nearest.items():
            print(f"  nearest/{result.summary()}  "
                  f"({compute_speedup(naive_ms, result.mean_ms):.2f}x vs naive)")
        rows.extend(results_to_rows('nearest', nearest))

        growing = benchmark_growing(size, dimensions, rebalance_every, 1, seed)
        naive_ms = growing['naive'].mean_ms
        for name, result in growing.items():
            print(f"  growing/{result.summary()}  "
                  f"({compute_speedup(naive_ms, result.mean_ms):.2f}x vs naive)")
        rows.extend(results_to_rows('growing', growing))

    return rows


def print_summary(rows: List[Dict[str, Any]]) -> None:
    """Print summary table."""
    print("\n" + "=" * 70)
    print("BENCHMARK SUMMARY")
    print("=" * 70)
    print(f"{'Suite':<10} {'Implementation':<18} {'Points':>10} {'Mean(ms)':>12} {'Std(ms)':>10}")
    print("-" * 70)

    for r in rows:
        print(f"{r['suite']:<10} {r['name']:<18} {r['n_points']:>10} "
              f"{r['mean_ms']:>12.2f} {r['std_ms']:>10.2f}")


def save_results(rows: List[Dict[str, Any]], output_path: Path) -> None:
    """Write result rows to CSV."""
    fieldnames: List[str] = []
    for row in rows:
        for key in row:
            if key not in fieldnames:
                fieldnames.append(key)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)

    print(f"\nResults saved to: {output_path}")


def main():
    parser = argparse.ArgumentParser(description='Brute force vs KD-tree scaling benchmark')
    parser.add_argument('--sizes', type=str, default='100,1000,5000',
                        help='Comma-separated point counts (default: 100,1000,5000)')
    parser.add_argument('--queries', type=int, default=100,
                        help='Queries per nearest benchmark (default: 100)')
    parser.add_argument('--dimensions', type=int, default=3,
                        help='Coordinates per point (default: 3)')
    parser.add_argument('--trials', type=int, default=3,
                        help='Timing trials (default: 3)')
    parser.add_argument('--rebalance-every', type=int, default=100,
                        help='Rebalance interval for the growing suite (default: 100)')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed (default: 42)')
    parser.add_argument('--save', action='store_true',
                        help='Save results to CSV')
    parser.add_argument('--output', type=str, default='benchmarks/benchmark_results.csv',
                        help='CSV output path')
    args = parser.parse_args()

    sizes = [int(s.strip()) for s in args.sizes.split(',')]

    print("=" * 70)
    print("  BRUTE FORCE vs KD-TREE")
    print("=" * 70)
    print(f"  Problem sizes: {sizes}")
    print(f"  Dimensions: {args.dimensions}")
    print(f"  Trials per size: {args.trials}")

    rows = run_scaling(sizes, args.queries, args.dimensions, args.trials,
                       args.rebalance_every, args.seed)
    print_summary(rows)

    if args.save:
        save_results(rows, Path(args.output))

    return 0


if __name__ == "__main__":
    sys.exit(main())
