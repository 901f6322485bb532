"""
Tests for KD-Tree Implementation

This module tests the KD-tree against brute-force nearest neighbor search
and checks the structural properties construction and insertion promise.

Test Categories:
1. Construction (empty, single point, balance, splitting rule)
2. Insertion
3. Nearest neighbor correctness vs brute force
4. Rebalancing
5. Size / elements
6. Errors (empty tree, dimension mismatch)
7. Edge cases (duplicates, integers, degenerate trees)

Run with: pytest tests/test_kd_tree.py -v
"""

import pytest
import numpy as np
from collections import Counter
from typing import Optional

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from kdindex.geometry.kd_tree import (
    KDTree,
    KDNode,
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
import kdindex.geometry.kd_tree as kd_tree_module


def count_nodes(node: Optional[KDNode]) -> int:
    if node is None:
        return 0
    return 1 + count_nodes(node.left) + count_nodes(node.right)


def subtree_points(node: Optional[KDNode]):
    if node is None:
        return []
    return subtree_points(node.left) + [node.point] + subtree_points(node.right)


def assert_splitting_invariant(node: Optional[KDNode], k: int, depth: int = 0) -> None:
    """Every left descendant is <= the node on its axis, every right one >=."""
    if node is None:
        return
    axis = depth % k
    for p in subtree_points(node.left):
        assert p[axis] <= node.point[axis]
    for p in subtree_points(node.right):
        assert p[axis] >= node.point[axis]
    assert_splitting_invariant(node.left, k, depth + 1)
    assert_splitting_invariant(node.right, k, depth + 1)


class TestKDTreeConstruction:
    """Tests for KD-tree construction."""

    def test_build_empty(self):
        """Test building tree with an empty list."""
        tree = build([])
        assert tree.root is None
        assert size(tree) == 0
        assert elements(tree) == []

    def test_build_empty_array_keeps_dimensions(self):
        """Test that an empty (0, k) array fixes the dimensionality."""
        tree = KDTree(np.array([]).reshape(0, 2))
        assert tree.root is None
        assert tree.n_dimensions == 2

    def test_build_single_point(self):
        """Test building tree with single point."""
        tree = build([[5.0, 3.0]])

        assert tree.root is not None
        assert tree.root.point == (5.0, 3.0)
        assert tree.root.left is None
        assert tree.root.right is None

    def test_build_two_points(self):
        """Test building tree with two points."""
        tree = build([[0.0, 0.0], [10.0, 10.0]])

        # Median of two is the upper one, the other goes left
        assert tree.root.point == (10.0, 10.0)
        assert tree.root.left.point == (0.0, 0.0)
        assert tree.root.right is None

    def test_build_is_balanced(self):
        """Test that the root splits the points floor(n/2) / ceil(n/2)-1."""
        np.random.seed(42)
        for n in (2, 3, 10, 101, 256):
            tree = build(np.random.rand(n, 3))
            assert count_nodes(tree.root.left) == n // 2
            assert count_nodes(tree.root.right) == n - n // 2 - 1

    def test_build_root_is_median_on_first_axis(self):
        """Test that the root holds the median x-coordinate."""
        points = [[x, 0] for x in (7, 3, 9, 1, 5)]
        tree = build(points)
        assert tree.root.point == (5, 0)

    def test_build_height_logarithmic(self):
        """Test that bulk construction gives O(log n) height."""
        np.random.seed(1)
        n = 1000
        tree = build(np.random.rand(n, 2))
        assert tree.height() == int(np.floor(np.log2(n))) + 1

    def test_build_splitting_invariant(self):
        """Test the splitting rule at every node after construction."""
        np.random.seed(7)
        points = np.random.randint(0, 5, size=(200, 3))
        tree = build(points)
        assert_splitting_invariant(tree.root, 3)

    def test_build_does_not_reorder_input(self):
        """Test that the caller's list is left untouched."""
        points = [[3, 1], [1, 2], [2, 3], [0, 0]]
        original = [list(p) for p in points]
        build(points)
        assert points == original

    def test_build_grid(self):
        """Test building tree with grid of points."""
        xx, yy = np.meshgrid(np.arange(3), np.arange(3))
        points = np.column_stack([xx.ravel(), yy.ravel()])

        tree = build(points)

        assert size(tree) == 9
        assert_splitting_invariant(tree.root, 2)


class TestInsertion:
    """Tests for incremental insertion."""

    def test_insert_into_empty(self):
        """Test that the first inserted point becomes the root."""
        tree = KDTree()
        insert(tree, [1.0, 2.0])
        assert tree.root.point == (1.0, 2.0)
        assert tree.n_dimensions == 2

    def test_insert_strictly_less_goes_left(self):
        """Test the comparison on the root's axis."""
        tree = build([[5, 5]])
        insert(tree, [4, 100])
        assert tree.root.left.point == (4, 100)

    def test_insert_equal_goes_right(self):
        """Test that ties on the splitting axis go right."""
        tree = build([[5, 5]])
        insert(tree, [5, -100])
        assert tree.root.right.point == (5, -100)
        assert tree.root.left is None

    def test_insert_uses_axis_of_depth(self):
        """Test that depth 1 compares on the y axis."""
        tree = build([[5, 5]])
        insert(tree, [6, 5])   # right of root
        insert(tree, [7, 1])   # right of root, then y=1 < 5 -> left
        assert tree.root.right.left.point == (7, 1)

    def test_insert_does_not_move_existing_nodes(self):
        """Test that insertion only attaches leaves."""
        tree = build([[0, 0], [1, 1], [1, 0], [0, 1]])
        before = tree.root.point
        insert(tree, [25, 0])
        assert tree.root.point == before

    def test_insert_size(self):
        """Test size after n insertions."""
        np.random.seed(3)
        tree = KDTree(dimensions=3)
        for point in np.random.rand(500, 3):
            insert(tree, point)
        assert size(tree) == 500

    def test_insert_splitting_invariant(self):
        """Test the splitting rule after insertion with many ties."""
        np.random.seed(11)
        tree = build(np.random.randint(0, 4, size=(50, 2)))
        for point in np.random.randint(0, 4, size=(150, 2)):
            insert(tree, point)
        assert size(tree) == 200
        assert_splitting_invariant(tree.root, 2)


class TestNearestNeighbor:
    """Tests for nearest neighbor queries."""

    def test_reference_example(self):
        """Test the four-corner example."""
        tree = build([[0, 0], [1, 1], [1, 0], [0, 1]])

        assert nearest(tree, [0, 0]) == (0, 0)
        assert nearest(tree, [1, 1]) == (1, 1)
        assert nearest(tree, [-3, 5]) == (0, 1)
        assert nearest(tree, [25, -4]) == (1, 0)

        insert(tree, [25, 0])
        assert nearest(tree, [25, -4]) == (25, 0)

    def test_nn_single_point(self):
        """Test NN with single point in tree."""
        tree = build([[5.0, 5.0]])
        assert nearest(tree, [0.0, 0.0]) == (5.0, 5.0)

    def test_nn_exact_match(self):
        """Test NN query that exactly matches a point."""
        tree = build([[0.0, 0.0], [10.0, 0.0], [5.0, 5.0]])
        assert nearest(tree, [10.0, 0.0]) == (10.0, 0.0)

    def test_exact_match_stops_search(self, monkeypatch):
        """Test that the search visits no more nodes once the distance is 0."""
        visited = []

        def counting_distance(a, b):
            visited.append(a)
            return squared_distance(a, b)

        monkeypatch.setattr(kd_tree_module, "squared_distance", counting_distance)

        tree = KDTree()
        tree.insert([1, 1])
        tree.insert([1, 1])
        tree.insert([2, 5])
        # Both later points sit in the root's right subtree, the near side
        assert tree.root.right is not None

        result = nearest(tree, [1, 1])
        assert result is tree.root.point
        assert visited == [(1, 1)]

    def test_nn_vs_brute_force_3d(self):
        """Test NN matches brute force for 1000 points and 1000 queries in 3-D."""
        np.random.seed(42)
        points = np.random.rand(1000, 3)
        queries = np.random.rand(1000, 3)
        tree = build(points)

        for query in queries:
            assert nearest(tree, query) == brute_force_nearest(points, query)

    def test_nn_vs_brute_force_high_dimension(self):
        """Test NN matches brute force in 6-D, where pruning is weaker."""
        np.random.seed(123)
        points = np.random.randn(300, 6)
        tree = build(points)

        for query in np.random.randn(100, 6):
            assert nearest(tree, query) == brute_force_nearest(points, query)

    def test_nn_query_outside_data(self):
        """Test NN for queries far outside the point cloud."""
        np.random.seed(5)
        points = np.random.rand(200, 2)
        tree = build(points)

        for query in ([100.0, 100.0], [-50.0, 0.5], [0.5, -1e6]):
            assert nearest(tree, query) == brute_force_nearest(points, query)

    def test_nn_grid_points(self):
        """Test NN on regular integer grid with many equidistant candidates."""
        points = [[i * 10, j * 10] for i in range(10) for j in range(10)]
        tree = build(points)

        result = nearest(tree, [45, 45])
        assert squared_distance(result, [45, 45]) == 50.0

    def test_nn_deterministic(self):
        """Test that repeated queries on the same tree return the same point."""
        points = [[i * 10, j * 10] for i in range(10) for j in range(10)]
        tree = build(points)
        first = nearest(tree, [45, 45])
        for _ in range(5):
            assert nearest(tree, [45, 45]) == first

    def test_nn_1d(self):
        """Test a one-dimensional tree."""
        tree = build([[v] for v in (8, 1, 4, 9, 2)])
        assert nearest(tree, [5]) == (4,)
        assert nearest(tree, [8.6]) == (9,)


class TestInsertionEquivalence:
    """Insertion-built trees must answer like brute force."""

    def test_insert_vs_brute_force(self):
        """Test NN on a tree grown by insertion in random order."""
        np.random.seed(99)
        points = np.random.rand(1000, 3)
        queries = np.random.rand(1000, 3)

        tree = KDTree(dimensions=3)
        for i in np.random.permutation(len(points)):
            insert(tree, points[i])

        for query in queries:
            assert nearest(tree, query) == brute_force_nearest(points, query)

    def test_build_and_insert_agree(self):
        """Test that bulk-built and insertion-built trees give the same answers."""
        np.random.seed(2024)
        points = np.random.rand(400, 2)
        built = build(points)
        grown = KDTree()
        for point in points:
            insert(grown, point)

        for query in np.random.rand(200, 2):
            assert nearest(built, query) == nearest(grown, query)


class TestRebalance:
    """Tests for rebalancing."""

    def test_rebalance_preserves_contents(self):
        """Test that size and content multiset survive a rebalance."""
        np.random.seed(8)
        tree = KDTree()
        points = np.random.randint(0, 10, size=(300, 3))
        for point in points:
            insert(tree, point)

        before = Counter(elements(tree))
        rebalance(tree)

        assert size(tree) == 300
        assert Counter(elements(tree)) == before

    def test_rebalance_preserves_answers(self):
        """Test that nearest results are identical before and after."""
        np.random.seed(13)
        points = np.random.rand(1000, 3)
        queries = np.random.rand(500, 3)

        tree = KDTree()
        for point in points:
            insert(tree, point)
        before = [nearest(tree, q) for q in queries]

        rebalance(tree)

        assert [nearest(tree, q) for q in queries] == before

    def test_rebalance_restores_height(self):
        """Test that sorted insertion degrades height and rebalance fixes it."""
        n = 3000
        tree = KDTree()
        for i in range(n):
            insert(tree, [i, i])
        assert tree.height() == n

        # Degenerate trees are still searchable
        assert nearest(tree, [1500.2, 1499.9]) == (1500, 1500)

        rebalance(tree)
        assert tree.height() <= int(np.ceil(np.log2(n + 1)))
        assert size(tree) == n
        assert nearest(tree, [1500.2, 1499.9]) == (1500, 1500)

    def test_rebalance_replaces_nodes(self):
        """Test that the old node structure is discarded."""
        tree = build([[1, 1], [2, 2], [3, 3]])
        old_root = tree.root
        rebalance(tree)
        assert tree.root is not old_root

    def test_rebalance_empty(self):
        """Test rebalancing an empty tree."""
        tree = KDTree()
        rebalance(tree)
        assert tree.root is None


class TestSizeAndElements:
    """Tests for size and elements."""

    def test_elements_multiset_with_duplicates(self):
        """Test that elements returns exactly the input multiset."""
        np.random.seed(21)
        points = np.random.randint(0, 3, size=(100, 2)).tolist()
        tree = build(points)
        assert Counter(elements(tree)) == Counter(tuple(p) for p in points)

    def test_elements_in_order(self):
        """Test that elements follows left, node, right order."""
        tree = build([[0, 0], [1, 1], [1, 0], [0, 1]])
        assert elements(tree) == subtree_points(tree.root)

    def test_elements_is_a_snapshot(self):
        """Test that the returned list does not alias the tree."""
        tree = build([[1, 2], [3, 4]])
        snapshot = elements(tree)
        snapshot.clear()
        assert size(tree) == 2

    def test_len_and_iter(self):
        """Test the container protocol."""
        tree = build([[1, 2], [3, 4], [5, 6]])
        assert len(tree) == 3
        assert sorted(tree) == [(1, 2), (3, 4), (5, 6)]
        assert bool(tree)
        assert not KDTree()


class TestErrors:
    """Tests for error conditions."""

    def test_nn_empty_raises(self):
        """Test that NN on empty tree raises EmptyTreeError."""
        tree = build([])
        for query in ([0.0, 0.0], [1.0, -1.0], [1e9, 3.0]):
            with pytest.raises(EmptyTreeError):
                nearest(tree, query)

    def test_empty_tree_error_is_value_error(self):
        """Test the exception hierarchy."""
        with pytest.raises(ValueError):
            KDTree(dimensions=3).nearest([0.0, 0.0, 0.0])

    def test_build_mixed_dimensions_raises(self):
        """Test that points of different lengths are rejected."""
        with pytest.raises(DimensionMismatchError):
            build([[0, 0], [1, 2, 3]])

    def test_insert_wrong_dimension_raises(self):
        """Test that insertion checks the point length."""
        tree = build([[0, 0]])
        with pytest.raises(DimensionMismatchError):
            insert(tree, [1, 2, 3])

    def test_query_wrong_dimension_raises(self):
        """Test that queries check the point length."""
        tree = build([[0, 0, 0]])
        with pytest.raises(DimensionMismatchError):
            nearest(tree, [1, 2])

    def test_explicit_dimensions_enforced_on_first_insert(self):
        """Test that an empty tree with fixed k rejects other lengths."""
        tree = KDTree(dimensions=2)
        with pytest.raises(DimensionMismatchError):
            insert(tree, [1, 2, 3])

    def test_invalid_dimensions(self):
        """Test that k must be positive."""
        with pytest.raises(DimensionMismatchError):
            KDTree(dimensions=0)

    def test_zero_length_point(self):
        """Test that empty points are rejected."""
        with pytest.raises(DimensionMismatchError):
            KDTree().insert([])


class TestEdgeCases:
    """Tests for edge cases and special scenarios."""

    def test_duplicate_points(self):
        """Test handling of duplicate points."""
        tree = build([[5.0, 5.0], [5.0, 5.0], [5.0, 5.0], [0.0, 0.0]])

        assert nearest(tree, [5.0, 5.0]) == (5.0, 5.0)
        assert nearest(tree, [0.1, 0.0]) == (0.0, 0.0)
        assert size(tree) == 4

    def test_heavy_duplicates_vs_brute_force(self):
        """Test NN distances on small-integer data with many ties."""
        np.random.seed(17)
        points = np.random.randint(0, 6, size=(300, 3))
        tree = build(points)

        for query in np.random.uniform(-1, 7, size=(200, 3)):
            found = nearest(tree, query)
            expected = brute_force_nearest(points, query)
            assert squared_distance(found, query) == pytest.approx(
                squared_distance(expected, query)
            )

    def test_all_identical_points(self):
        """Test a tree where every point is the same."""
        tree = build([[2, 2]] * 50)
        assert size(tree) == 50
        assert nearest(tree, [0, 0]) == (2, 2)

    def test_collinear_points(self):
        """Test with collinear points."""
        tree = build([[float(x), 0.0] for x in range(5)])
        result = nearest(tree, [2.4, 0.0])
        assert result == (2.0, 0.0)

    def test_integer_points_stay_integers(self):
        """Test that integer coordinates are returned as ints."""
        tree = build(np.array([[0, 0], [1, 1]], dtype=np.int64))
        result = nearest(tree, [1, 2])
        assert result == (1, 1)
        assert all(type(c) is int for c in result)

    def test_mixed_int_float_point_keeps_types(self):
        """Test that an int next to a float in a list point stays an int."""
        tree = build([[1, 2.5], [3, 4]])
        stored = sorted(elements(tree))
        assert stored == [(1, 2.5), (3, 4)]
        assert type(stored[0][0]) is int
        assert type(stored[0][1]) is float
        assert all(type(c) is int for c in stored[1])

        insert(tree, [7, 0.5])
        result = nearest(tree, [7, 0])
        assert result == (7, 0.5)
        assert type(result[0]) is int

    def test_large_integer_coordinates(self):
        """Test that distance accumulation does not overflow."""
        big = 2 ** 40
        tree = build([[big, big], [-big, -big]])
        assert nearest(tree, [big - 1, big]) == (big, big)

    def test_negative_coordinates(self):
        """Test with negative coordinates."""
        tree = build([[-10.0, -10.0], [-5.0, -5.0], [0.0, 0.0]])
        assert nearest(tree, [-4.0, -4.0]) == (-5.0, -5.0)


class TestSquaredDistance:
    """Tests for the distance helper."""

    def test_squared_distance(self):
        assert squared_distance((0, 0), (3, 4)) == 25.0
        assert squared_distance((1.5,), (1.5,)) == 0.0

    def test_returns_float(self):
        assert isinstance(squared_distance((1, 2), (3, 4)), float)


class TestBruteForce:
    """Tests for the baseline."""

    def test_first_minimum_wins(self):
        """Test that ties go to the earliest point."""
        points = [[1, 0], [-1, 0]]
        assert brute_force_nearest(points, [0, 0]) == (1, 0)

    def test_batch(self):
        """Test batch queries."""
        points = [[0, 0], [10, 10]]
        assert brute_force_nearest_batch(points, [[1, 1], [9, 9]]) == [(0, 0), (10, 10)]

    def test_empty_raises(self):
        with pytest.raises(EmptyTreeError):
            brute_force_nearest([], [0, 0])

    def test_dimension_mismatch_raises(self):
        with pytest.raises(DimensionMismatchError):
            brute_force_nearest([[0, 0]], [0, 0, 0])


class TestValidation:
    """Integration tests using the validation function."""

    def test_validate_small(self):
        """Validate KD-tree with small dataset."""
        assert validate_kdtree(n_points=50, n_queries=20, dimensions=2, seed=42)

    def test_validate_default(self):
        """Validate KD-tree with 1000 3-D points and 1000 queries."""
        assert validate_kdtree()

    def test_validate_incremental(self):
        """Validate an insertion-built tree."""
        assert validate_kdtree(n_points=500, n_queries=200, dimensions=4,
                               seed=456, incremental=True)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
