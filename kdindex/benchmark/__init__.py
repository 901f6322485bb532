"""
Benchmarking Module

This module provides performance measurement for the KD-tree against the
brute-force baseline.

Components:
- timing: Timer, benchmark result containers and speedup helpers
- suites: nearest and growing benchmark scenarios
"""

from .timing import (
    Timer,
    compute_speedup,
    BenchmarkResult
)
from .suites import (
    BenchmarkMismatchError,
    benchmark_nearest,
    benchmark_growing,
    print_comparison
)

__all__ = [
    'Timer',
    'compute_speedup',
    'BenchmarkResult',
    'BenchmarkMismatchError',
    'benchmark_nearest',
    'benchmark_growing',
    'print_comparison'
]
