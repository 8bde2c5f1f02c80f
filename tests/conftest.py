"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
for _import_root in (_PROJECT_ROOT / "src", _PROJECT_ROOT / "tests"):
    if str(_import_root) not in sys.path:
        sys.path.insert(0, str(_import_root))

from fake_object_store import FakeObjectStore  # noqa: E402


class FakeLogger:
    """Structured logger double that records events."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, object]]] = []

    def debug(self, event: str, **fields: object) -> None:
        self.events.append(("debug", event, fields))

    def info(self, event: str, **fields: object) -> None:
        self.events.append(("info", event, fields))

    def warning(self, event: str, **fields: object) -> None:
        self.events.append(("warning", event, fields))

    def error(self, event: str, **fields: object) -> None:
        self.events.append(("error", event, fields))

    def names(self) -> list[str]:
        return [event for _, event, _ in self.events]


@pytest.fixture
def fake_logger() -> FakeLogger:
    """Return a fresh recording logger."""
    return FakeLogger()


@pytest.fixture
def nested_store() -> FakeObjectStore:
    """Store with leaves at the root and one level below it."""
    return FakeObjectStore(
        {
            "root/x": b"hello",
            "root/sub/y": b"world",
        }
    )
