"""
In-Place Median Selection Along One Axis

This module provides the selection primitive used to build balanced KD-trees.
Rather than sorting the whole point set at every level of the tree (the
textbook O(n log² n) construction), each level only needs the median along
the splitting axis, which a quickselect finds in expected linear time.

Key Features:
- Works in place on a window [start, end) of a list (no copies)
- Partition order guaranteed around the selected rank
- Early exit when duplicate axis values straddle the target rank

Complexity Analysis:
- Expected: O(n) per call
- Worst case: O(n²) for adversarial axis-value distributions
- Space: O(1) auxiliary

Reference:
    Hoare, C. A. R. (1961). Algorithm 65: Find. Communications of the ACM,
    4(7), 321-322.
"""

from typing import List, Optional, Sequence


def partition(
    points: List[Sequence],
    axis: int,
    target_rank: int,
    start: int = 0,
    end: Optional[int] = None
) -> None:
    """
    Rearrange ``points[start:end]`` in place around the element of a given rank.

    Afterwards ``points[target_rank]`` holds the point whose ``axis`` coordinate
    would sit at ``target_rank`` if the window were sorted on that axis. Every
    point in ``[start, target_rank)`` has an axis value <= it, every point in
    ``(target_rank, end)`` has an axis value >= it. Order is otherwise
    unspecified.

    Each round uses the value currently at ``target_rank`` as the pivot and
    splits the window three ways (less / equal / greater). When the target
    rank falls inside the run of values equal to the pivot the selection is
    finished; otherwise the window shrinks to the side containing it.

    Args:
        points: Mutable list of points (each indexable by axis)
        axis: Coordinate index to select on
        target_rank: Absolute index in ``points`` to fill with the median
        start: First index of the window (inclusive)
        end: Last index of the window (exclusive), defaults to ``len(points)``

    Raises:
        IndexError: If ``target_rank`` lies outside the window
        ValueError: If ``axis`` is negative

    Example:
        >>> pts = [(5, 0), (1, 0), (4, 0), (2, 0), (3, 0)]
        >>> partition(pts, axis=0, target_rank=2)
        >>> pts[2]
        (3, 0)
    """
    if end is None:
        end = len(points)
    if end - start < 2:
        return
    if not start <= target_rank < end:
        raise IndexError(
            f"target_rank {target_rank} outside window [{start}, {end})"
        )
    if axis < 0:
        raise ValueError(f"axis must be non-negative, got {axis}")

    while end - start > 1:
        pivot = points[target_rank][axis]

        # Dijkstra three-way split: [start, lt) < pivot, [lt, i) == pivot,
        # [gt, end) > pivot
        lt = start
        i = start
        gt = end
        while i < gt:
            value = points[i][axis]
            if value < pivot:
                points[lt], points[i] = points[i], points[lt]
                lt += 1
                i += 1
            elif value > pivot:
                gt -= 1
                points[gt], points[i] = points[i], points[gt]
            else:
                i += 1

        if target_rank < lt:
            end = lt
        elif target_rank >= gt:
            start = gt
        else:
            # Median value spans the target rank
            return


def select_median(
    points: List[Sequence],
    axis: int,
    start: int = 0,
    end: Optional[int] = None
) -> int:
    """
    Partition a window around its median and return the median's index.

    The median rank is ``start + (end - start) // 2``, i.e. the upper median
    for even-length windows, which gives ``floor(n/2)`` points before it.
    """
    if end is None:
        end = len(points)
    median = start + (end - start) // 2
    partition(points, axis, median, start, end)
    return median
