"""Unit tests for CLI command handling."""

from __future__ import annotations

from pathlib import Path
import tarfile

import pytest

from cli.main import main
from fake_object_store import FakeObjectStore
from ingest.pipeline import archive_bucket


def test_cli_archive_writes_tarball(monkeypatch, tmp_path: Path, capsys) -> None:
    """CLI archive should persist the archive and print a summary."""
    store = FakeObjectStore({"root/x": b"hello", "root/sub/y": b"world"})
    monkeypatch.setattr(
        "cli.archive_command.archive_bucket",
        lambda options, config: archive_bucket(options, config, store=store),
    )
    output_path = tmp_path / "bucket.tar.gz"

    exit_code = main(["archive", "s3://bucket/root", "--output", str(output_path)])

    output = capsys.readouterr().out
    with tarfile.open(output_path, "r:gz") as archive:
        names = archive.getnames()
    assert (exit_code, names) == (0, ["x", "sub/y"])
    assert "objects=2" in output


def test_cli_archive_reports_failures_with_exit_code(tmp_path: Path, capsys) -> None:
    """Domain errors should print a diagnostic and exit with code 2."""
    exit_code = main(["archive", "gs://bucket/root", "--output", str(tmp_path / "out.tar.gz")])

    captured = capsys.readouterr()
    assert exit_code == 2
    assert "error=Invalid S3 URI 'gs://bucket/root'" in captured.err


def test_cli_rejects_invalid_environment(monkeypatch, capsys) -> None:
    """Invalid environment config should fail before running a command."""
    monkeypatch.setenv("BUCKET_TAR_MAX_FETCH_WORKERS", "many")

    exit_code = main(["bench", "-n", "1", "--size", "1KB", "--discard"])

    assert exit_code == 2
    assert "BUCKET_TAR_MAX_FETCH_WORKERS" in capsys.readouterr().err


def test_cli_bench_prints_byte_counts(capsys) -> None:
    """CLI bench should print payload and tar byte counts."""
    exit_code = main(["--log-level", "error", "bench", "-n", "2", "--size", "1KB", "--discard"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "payload_bytes=2000" in output


def test_cli_requires_a_command() -> None:
    """Running without a subcommand should be a usage error."""
    with pytest.raises(SystemExit) as exit_info:
        main([])

    assert exit_info.value.code == 2
