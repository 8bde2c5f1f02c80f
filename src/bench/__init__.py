"""Archive encoding benchmarks.

This module measures tar writer throughput and memory on synthetic
entries, independently of any object store.
"""
