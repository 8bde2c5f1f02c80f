"""Benchmark memory plots.

This module renders per-entry memory samples of a tar benchmark
as an SVG line chart.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from core.constants import BENCHMARK_PLOT_FILE_TEMPLATE
from core.errors import BucketTarDependencyError
from core.types import BenchmarkResult

_BYTES_PER_MEBIBYTE = 1024 * 1024


def default_plot_path(output_dir: str | Path, entry_count: int, size_label: str) -> Path:
    """Build the default SVG path for a benchmark run."""
    file_name = BENCHMARK_PLOT_FILE_TEMPLATE.format(count=entry_count, size=size_label)
    return Path(output_dir).expanduser() / file_name


def save_benchmark_plot(result: BenchmarkResult, plot_path: str | Path) -> Path:
    """Save before/after memory curves as SVG.

    Args:
        result: Benchmark measurements.
        plot_path: Destination SVG path.

    Returns:
        Written plot path.

    Raises:
        BucketTarDependencyError: If matplotlib is missing.
    """
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plot
    except ImportError as error:
        raise BucketTarDependencyError(
            "Benchmark plot generation requires matplotlib. "
            "Install matplotlib to produce memory graphs."
        ) from error
    figure = _build_plot_figure(plot, result)
    output_path = Path(plot_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    figure.tight_layout()
    figure.savefig(output_path, format="svg")
    plot.close(figure)
    return output_path


def _build_plot_figure(plot: Any, result: BenchmarkResult) -> Any:
    """Build the memory-per-entry figure."""
    figure, axis = plot.subplots(1, 1, figsize=(9, 4.8))
    indexes = [sample.index for sample in result.samples]
    before = [sample.before_bytes / _BYTES_PER_MEBIBYTE for sample in result.samples]
    after = [sample.after_bytes / _BYTES_PER_MEBIBYTE for sample in result.samples]
    axis.plot(indexes, before, color="#0c8e7c", linewidth=1.8, label="before_entry")
    axis.plot(indexes, after, color="#cf5f2f", linewidth=1.8, label="after_entry")
    axis.axhline(
        result.start_bytes / _BYTES_PER_MEBIBYTE,
        color="#777777",
        linestyle="--",
        linewidth=1.0,
        label="start",
    )
    axis.set_title(
        f"Tar Memory: {result.options.entry_count} entries of {result.options.entry_size} bytes"
    )
    axis.set_xlabel("Entry")
    axis.set_ylabel("Resident Memory (MiB)")
    axis.grid(alpha=0.3)
    axis.legend()
    return figure
