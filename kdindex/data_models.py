"""
Data Models for kdindex

This module defines the point set container passed between the data
generators, the command-line interface and the benchmarks.
Uses Python dataclasses for clean, type-hinted data containers.

Data Flow:
    CSV file / random generator → PointSet → KDTree
"""

from dataclasses import dataclass
from typing import List, Dict, Optional, Any, Tuple
import csv
import numpy as np

from .geometry.kd_tree import DimensionMismatchError, as_point


def _parse_coordinate(text: str):
    """Parse a CSV cell as int when it is one, otherwise as float."""
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


@dataclass
class PointSet:
    """
    A collection of points sharing one dimensionality.

    Attributes:
        points: List of point tuples
        dimensions: Number of coordinates per point
        source: Optional description of where the points came from
            (file path, generator settings)

    Space Complexity: O(n × k)
    """
    points: List[Tuple]
    dimensions: int
    source: Optional[str] = None

    def __post_init__(self):
        if self.dimensions < 1:
            raise DimensionMismatchError(
                f"dimensions must be positive, got {self.dimensions}"
            )
        checked = []
        for coords in self.points:
            point = as_point(coords)
            if len(point) != self.dimensions:
                raise DimensionMismatchError(
                    f"Expected {self.dimensions} coordinates, got {len(point)}: {point}"
                )
            checked.append(point)
        self.points = checked

    def __len__(self) -> int:
        return len(self.points)

    def as_array(self) -> np.ndarray:
        """
        Extract all points as a NumPy array for vectorized operations.

        Returns:
            np.ndarray: Shape (n, k) float64 array
        """
        return np.array(self.points, dtype=np.float64).reshape(len(self.points), self.dimensions)

    def header(self) -> List[str]:
        """Column names used for CSV export: x0, x1, ..."""
        return [f"x{axis}" for axis in range(self.dimensions)]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "points": [list(p) for p in self.points],
            "dimensions": self.dimensions,
            "source": self.source
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PointSet":
        """Create from dictionary (JSON deserialization)."""
        return cls(
            points=[tuple(p) for p in data["points"]],
            dimensions=int(data["dimensions"]),
            source=data.get("source")
        )

    def save_to_csv(self, filepath: str) -> None:
        """Write the points to CSV with an x0..x{k-1} header row."""
        with open(filepath, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(self.header())
            writer.writerows(self.points)

    @classmethod
    def load_from_csv(cls, filepath: str) -> "PointSet":
        """
        Load points from a CSV file.

        The first row is a header; its width fixes the dimensionality.
        Blank lines are skipped.

        Raises:
            DimensionMismatchError: If a row's width differs from the header's
            ValueError: If the file is empty or a cell is not numeric
        """
        with open(filepath, 'r', newline='') as f:
            reader = csv.reader(f)
            header = next(reader, None)
            if not header:
                raise ValueError(f"{filepath}: missing CSV header")
            dimensions = len(header)

            points = []
            for line_no, row in enumerate(reader, start=2):
                if not row or all(not cell.strip() for cell in row):
                    continue
                if len(row) != dimensions:
                    raise DimensionMismatchError(
                        f"{filepath}:{line_no}: expected {dimensions} columns, got {len(row)}"
                    )
                points.append(tuple(_parse_coordinate(cell) for cell in row))

        return cls(points=points, dimensions=dimensions, source=str(filepath))
