"""
Timing and Benchmarking Utilities

This module provides utilities for measuring how long tree construction,
insertion and queries take, and for comparing them with the brute-force
baseline.

Features:
- Timer context manager for easy timing
- Benchmark result containers with trial statistics
- Speedup calculation

Example:
    >>> with Timer("Build 10k points") as t:
    ...     tree = KDTree(points)
    >>> print(f"Took {t.elapsed_ms:.2f} ms")
"""

import time
from dataclasses import dataclass, field
from typing import Optional, Any, List, Dict
import statistics


class Timer:
    """
    Context manager for timing code blocks.

    Provides high-resolution timing using time.perf_counter().

    Attributes:
        name: Optional name for the timed operation
        elapsed: Elapsed time in seconds
        elapsed_ms: Elapsed time in milliseconds

    Example:
        >>> with Timer("Nearest x1000") as t:
        ...     for q in queries:
        ...         tree.nearest(q)
        Nearest x1000: 4.87 ms
    """

    def __init__(self, name: Optional[str] = None, verbose: bool = True):
        """
        Initialize timer.

        Args:
            name: Optional name to print with timing
            verbose: Whether to print timing on exit
        """
        self.name = name
        self.verbose = verbose
        self._start: float = 0
        self.elapsed: float = 0

    def __enter__(self) -> 'Timer':
        self._start = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        self.elapsed = time.perf_counter() - self._start

        if self.verbose and self.name:
            print(f"{self.name}: {self.elapsed_ms:.2f} ms")

    @property
    def elapsed_ms(self) -> float:
        """Elapsed time in milliseconds."""
        return self.elapsed * 1000


def compute_speedup(baseline_time: float, optimized_time: float) -> float:
    """
    Compute speedup ratio between baseline and optimized times.

    Speedup = baseline_time / optimized_time, so a value > 1 means the
    optimized version is faster.

    Example:
        >>> compute_speedup(100.0, 25.0)
        4.0
    """
    if optimized_time <= 0:
        return float('inf')
    return baseline_time / optimized_time


@dataclass
class BenchmarkResult:
    """
    Container for benchmark results.

    Stores multiple timing trials and computes statistics.

    Attributes:
        name: Name of the benchmarked operation
        times_ms: List of timing results in milliseconds
        checksum: Value computed by the benchmarked code, used to check that
            competing implementations produced the same answers
        metadata: Optional additional information
    """
    name: str
    times_ms: List[float] = field(default_factory=list)
    checksum: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_trial(self, time_ms: float) -> None:
        """Add a timing trial result."""
        self.times_ms.append(time_ms)

    @property
    def mean_ms(self) -> float:
        if not self.times_ms:
            return 0.0
        return statistics.mean(self.times_ms)

    @property
    def std_ms(self) -> float:
        if len(self.times_ms) < 2:
            return 0.0
        return statistics.stdev(self.times_ms)

    @property
    def min_ms(self) -> float:
        if not self.times_ms:
            return 0.0
        return min(self.times_ms)

    @property
    def max_ms(self) -> float:
        if not self.times_ms:
            return 0.0
        return max(self.times_ms)

    @property
    def median_ms(self) -> float:
        if not self.times_ms:
            return 0.0
        return statistics.median(self.times_ms)

    @property
    def num_trials(self) -> int:
        return len(self.times_ms)

    def summary(self) -> str:
        """One-line summary: timing spread plus the answer checksum."""
        text = (f"{self.name}: {self.mean_ms:.2f} ± {self.std_ms:.2f} ms "
                f"(n={self.num_trials}, min={self.min_ms:.2f}, max={self.max_ms:.2f})")
        if self.checksum is not None:
            text += f" checksum={self.checksum:.6f}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (one CSV row per result)."""
        return {
            'name': self.name,
            'mean_ms': self.mean_ms,
            'std_ms': self.std_ms,
            'min_ms': self.min_ms,
            'max_ms': self.max_ms,
            'median_ms': self.median_ms,
            'num_trials': self.num_trials,
            'checksum': self.checksum,
            'metadata': self.metadata
        }
