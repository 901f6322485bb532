"""
kdindex: In-Memory k-d Tree for Exact Nearest-Neighbor Search

This package implements a k-dimensional binary search tree over fixed
dimensionality points, with balanced bulk construction, incremental
insertion, branch-and-bound nearest-neighbor search and on-demand
rebalancing.

Main modules:
- geometry: median selection and the KD-tree itself
- data_models: point set container with CSV import/export
- synthetic_data: random point generation
- benchmark: timing utilities and benchmark suites
- main: command-line interface
"""

from .geometry import (
    KDTree,
    KDNode,
    KDTreeError,
    EmptyTreeError,
    DimensionMismatchError,
    build,
    insert,
    nearest,
    rebalance,
    size,
    elements,
    partition,
    squared_distance,
    brute_force_nearest
)

__version__ = "1.0.0"

__all__ = [
    'KDTree',
    'KDNode',
    'KDTreeError',
    'EmptyTreeError',
    'DimensionMismatchError',
    'build',
    'insert',
    'nearest',
    'rebalance',
    'size',
    'elements',
    'partition',
    'squared_distance',
    'brute_force_nearest'
]
