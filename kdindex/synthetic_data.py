"""
Synthetic Data Generator for kdindex

This module generates point sets for tests, demos and benchmarks.
There is NO external dataset - all data is created programmatically.

Points are drawn uniformly from an axis-aligned box (the unit hypercube by
default), matching how nearest-neighbor benchmarks are usually set up.

Key Features:
- Uniform points in any dimensionality
- Separate query streams that do not repeat the data points
- Reproducible results via random seed control
- CSV export/import for persistence

Example Usage:
    >>> from kdindex.synthetic_data import generate_uniform_points
    >>> point_set = generate_uniform_points(1000, dimensions=3, seed=42)
    >>> point_set.save_to_csv("data/points.csv")
"""

from pathlib import Path
from typing import Optional, Tuple
import numpy as np

from .data_models import PointSet


def generate_uniform_points(
    n_points: int,
    dimensions: int = 3,
    seed: Optional[int] = None,
    low: float = 0.0,
    high: float = 1.0
) -> PointSet:
    """
    Generate points uniformly distributed in ``[low, high)^dimensions``.

    Args:
        n_points: Number of points to generate
        dimensions: Coordinates per point
        seed: Random seed for reproducibility
        low: Lower bound of every coordinate
        high: Upper bound of every coordinate (exclusive)

    Returns:
        PointSet: Generated points

    Complexity:
        Time: O(n × k)
        Space: O(n × k)
    """
    if n_points < 0:
        raise ValueError(f"n_points must be non-negative, got {n_points}")
    if high <= low:
        raise ValueError(f"high ({high}) must be greater than low ({low})")

    rng = np.random.default_rng(seed)
    coords = rng.uniform(low, high, size=(n_points, dimensions))

    return PointSet(
        points=[tuple(row) for row in coords.tolist()],
        dimensions=dimensions,
        source=f"uniform(n={n_points}, k={dimensions}, seed={seed})"
    )


def generate_query_points(
    n_queries: int,
    dimensions: int = 3,
    seed: Optional[int] = None,
    low: float = 0.0,
    high: float = 1.0
) -> PointSet:
    """
    Generate query points from the same distribution as the data.

    The seed is offset so a data set and its queries generated with the
    same seed are independent streams.
    """
    query_seed = None if seed is None else seed + 1
    return generate_uniform_points(n_queries, dimensions, query_seed, low, high)


def generate_benchmark_data(
    n_points: int,
    n_queries: int,
    dimensions: int = 3,
    seed: int = 42
) -> Tuple[PointSet, PointSet]:
    """Generate a (data, queries) pair for benchmarking."""
    return (
        generate_uniform_points(n_points, dimensions, seed),
        generate_query_points(n_queries, dimensions, seed)
    )


def save_points_to_csv(point_set: PointSet, filepath: str) -> str:
    """
    Export a point set to CSV, creating parent directories as needed.

    Returns:
        str: Path of the written file
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    point_set.save_to_csv(str(path))
    return str(path)


def load_points_from_csv(filepath: str) -> PointSet:
    """Load a point set from a CSV file with an x0..x{k-1} header."""
    return PointSet.load_from_csv(filepath)
