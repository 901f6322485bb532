"""
Test Suite for kdindex

This package contains unit tests and integration tests for:
- Median selection (partition) correctness
- KD-tree construction, insertion, search and rebalancing
- Point sets, CSV I/O and synthetic data
- Benchmark suites and the command-line interface

Run tests with: pytest -v
"""
