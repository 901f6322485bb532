"""
Geometry Module for k-Dimensional Point Indexing

This module provides the spatial search structures:
- In-place median selection along one axis (quickselect)
- KD-tree for exact nearest-neighbor search with insertion and rebalancing
- Brute-force nearest neighbor baseline

The selection primitive is what keeps bulk construction balanced without
sorting the whole point set at every level.
"""

from .partition import partition, select_median
from .kd_tree import (
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
    squared_distance,
    brute_force_nearest,
    brute_force_nearest_batch,
    validate_kdtree
)

__all__ = [
    'partition',
    'select_median',
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
    'squared_distance',
    'brute_force_nearest',
    'brute_force_nearest_batch',
    'validate_kdtree'
]
