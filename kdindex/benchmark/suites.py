"""
Benchmark Suites: Brute Force vs KD-Tree

Two scenarios are measured:

1. Nearest: a fixed data set and a batch of queries, answered by a
   brute-force scan, by a bulk-built KD-tree and by a KD-tree grown with
   repeated insertion (build time included).
2. Growing: points arrive one at a time and each arrival is followed by a
   query, answered by a brute-force scan over the points seen so far, by a
   tree grown with plain insertion, and by a tree that is additionally
   rebalanced every ``rebalance_every`` insertions.

Every implementation sums the first coordinate of each answer. The sums must
agree, otherwise one of the implementations returned a wrong neighbor and
``BenchmarkMismatchError`` is raised.
"""

from typing import Callable, Dict, List, Optional

import numpy as np

from ..geometry.kd_tree import KDTree, brute_force_nearest
from ..synthetic_data import generate_benchmark_data, generate_uniform_points
from .timing import Timer, BenchmarkResult, compute_speedup


class BenchmarkMismatchError(RuntimeError):
    """Raised when competing implementations disagree on query answers."""


def nearest_naive(points: np.ndarray, queries: np.ndarray) -> float:
    """Answer every query by scanning all points."""
    total = 0.0
    for query in queries:
        total += brute_force_nearest(points, query)[0]
    return total


def nearest_kdtree(points: np.ndarray, queries: np.ndarray) -> float:
    """Bulk-build a tree, then answer every query."""
    tree = KDTree(points)
    total = 0.0
    for query in queries:
        total += tree.nearest(query)[0]
    return total


def nearest_kdtree_insert(points: np.ndarray, queries: np.ndarray) -> float:
    """Grow a tree by insertion, then answer every query."""
    tree = KDTree(dimensions=points.shape[1])
    for point in points:
        tree.insert(point)
    total = 0.0
    for query in queries:
        total += tree.nearest(query)[0]
    return total


def growing_naive(points: np.ndarray, queries: np.ndarray) -> float:
    """After each arrival, scan the prefix of points seen so far."""
    total = 0.0
    for i in range(len(points)):
        total += brute_force_nearest(points[:i + 1], queries[i])[0]
    return total


def growing_insert(points: np.ndarray, queries: np.ndarray) -> float:
    """Insert each arrival into the tree, then query it."""
    tree = KDTree(dimensions=points.shape[1])
    total = 0.0
    for i in range(len(points)):
        tree.insert(points[i])
        total += tree.nearest(queries[i])[0]
    return total


def make_growing_rebalance(rebalance_every: int) -> Callable[[np.ndarray, np.ndarray], float]:
    """Like ``growing_insert`` but rebalance after insertion i when i % rebalance_every == 0."""
    if rebalance_every < 1:
        raise ValueError(f"rebalance_every must be positive, got {rebalance_every}")

    def growing_rebalance(points: np.ndarray, queries: np.ndarray) -> float:
        tree = KDTree(dimensions=points.shape[1])
        total = 0.0
        for i in range(len(points)):
            tree.insert(points[i])
            if i % rebalance_every == 0:
                tree.rebalance()
            total += tree.nearest(queries[i])[0]
        return total

    return growing_rebalance


def _run_suite(
    implementations: Dict[str, Callable[[np.ndarray, np.ndarray], float]],
    points: np.ndarray,
    queries: np.ndarray,
    trials: int,
    metadata: Dict[str, int]
) -> Dict[str, BenchmarkResult]:
    """Time each implementation and check that all checksums agree."""
    if trials < 1:
        raise ValueError(f"trials must be positive, got {trials}")

    results: Dict[str, BenchmarkResult] = {}
    for name, func in implementations.items():
        result = BenchmarkResult(name, metadata=dict(metadata))
        for _ in range(trials):
            with Timer(verbose=False) as t:
                result.checksum = func(points, queries)
            result.add_trial(t.elapsed_ms)
        results[name] = result

    baseline_name = next(iter(results))
    expected = results[baseline_name].checksum
    for name, result in results.items():
        if not np.isclose(result.checksum, expected, rtol=1e-12, atol=0.0):
            raise BenchmarkMismatchError(
                f"{name} checksum {result.checksum!r} differs from "
                f"{baseline_name} checksum {expected!r}"
            )

    return results


def benchmark_nearest(
    n_points: int = 1000,
    n_queries: int = 100,
    dimensions: int = 3,
    trials: int = 10,
    seed: int = 42
) -> Dict[str, BenchmarkResult]:
    """
    Compare brute force, bulk-built tree and insertion-built tree on one query batch.

    Returns:
        Dictionary mapping implementation names to results (brute force first)

    Raises:
        BenchmarkMismatchError: If the implementations disagree
    """
    data, query_set = generate_benchmark_data(n_points, n_queries, dimensions, seed)

    return _run_suite(
        {
            'naive': nearest_naive,
            'kdtree': nearest_kdtree,
            'kdtree_insert': nearest_kdtree_insert
        },
        data.as_array(),
        query_set.as_array(),
        trials,
        {'n_points': n_points, 'n_queries': n_queries, 'dimensions': dimensions}
    )


def benchmark_growing(
    n_points: int = 1000,
    dimensions: int = 5,
    rebalance_every: int = 100000,
    trials: int = 1,
    seed: int = 42
) -> Dict[str, BenchmarkResult]:
    """
    Compare brute force, plain insertion and insertion with periodic rebalance
    on an insert-then-query workload.

    Raises:
        BenchmarkMismatchError: If the implementations disagree
    """
    data = generate_uniform_points(n_points, dimensions, seed)
    queries = generate_uniform_points(n_points, dimensions, seed + 1)

    return _run_suite(
        {
            'naive': growing_naive,
            'insert': growing_insert,
            'insert_rebalance': make_growing_rebalance(rebalance_every)
        },
        data.as_array(),
        queries.as_array(),
        trials,
        {'n_points': n_points, 'dimensions': dimensions, 'rebalance_every': rebalance_every}
    )


def print_comparison(
    title: str,
    results: Dict[str, BenchmarkResult],
    baseline: Optional[str] = None
) -> None:
    """
    Print comparison table of results.

    Args:
        title: Heading for the table
        results: Output of one of the benchmark functions
        baseline: Name of baseline implementation for speedup calculation
    """
    print(f"\nBenchmark: {title}")
    print("=" * 60)

    if baseline is None:
        baseline = next(iter(results))
    baseline_time = results[baseline].mean_ms

    print(f"{'Implementation':<20} {'Mean (ms)':>12} {'Std (ms)':>10} {'Speedup':>10}")
    print("-" * 60)

    for name, result in results.items():
        speedup = compute_speedup(baseline_time, result.mean_ms)
        speedup_str = f"{speedup:.2f}x" if name != baseline else "(baseline)"
        print(f"{name:<20} {result.mean_ms:>12.2f} {result.std_ms:>10.2f} {speedup_str:>10}")

    print()
    for result in results.values():
        print(result.summary())
    print()


def results_to_rows(suite: str, results: Dict[str, BenchmarkResult]) -> List[dict]:
    """Flatten results into CSV-ready rows."""
    rows = []
    for result in results.values():
        row = result.to_dict()
        metadata = row.pop('metadata')
        row['suite'] = suite
        row.update(metadata)
        rows.append(row)
    return rows
