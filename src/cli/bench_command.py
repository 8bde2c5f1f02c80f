"""Benchmark command wiring for bucket-tar CLI."""

from __future__ import annotations

import argparse
from typing import Any

from bench.benchmark_plot import default_plot_path, save_benchmark_plot
from bench.tar_benchmark import parse_byte_size, run_tar_benchmark
from core.config import ArchiverConfig
from core.types import BenchmarkOptions


def add_bench_command(subparsers: Any) -> None:
    """Register bench subcommand."""
    parser = subparsers.add_parser(
        "bench",
        help="Measure tar writer memory on generated entries",
    )
    parser.add_argument("-n", type=int, required=True, help="Number of files to tar")
    parser.add_argument("--size", required=True, help="Size of each file, e.g. 512KB or 1MiB")
    parser.add_argument(
        "--discard",
        action="store_true",
        help="Tar the files to a discarding sink instead of a memory buffer",
    )
    parser.add_argument("--plot-dir", help="Optional directory for an SVG memory plot")


def run_bench_command(config: ArchiverConfig, args: argparse.Namespace) -> int:
    """Execute the tar benchmark and print byte counts."""
    options = BenchmarkOptions(
        entry_count=args.n,
        entry_size=parse_byte_size(args.size),
        discard=args.discard,
    )
    result = run_tar_benchmark(options)
    print(f"payload_bytes={result.payload_bytes}")
    print(f"tar_bytes={result.tar_bytes}")
    print(f"duration_seconds={result.duration_seconds:.3f}")
    if args.plot_dir:
        plot_path = default_plot_path(args.plot_dir, options.entry_count, args.size)
        print(f"plot_path={save_benchmark_plot(result, plot_path)}")
    return 0
