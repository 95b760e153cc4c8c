"""Pytest configuration and fixtures for test suite."""

import csv
import json
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

# Add src directory to path for imports
SRC_PATH = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_PATH))

from tabmerge.models import SourceCollection  # noqa: E402


@pytest.fixture
def make_collection() -> Callable[..., SourceCollection]:
    """Factory for in-memory source collections.

    Columns default to the keys of the first row, as the loader does.
    """

    def _factory(
        rows: Sequence[dict[str, Any]],
        *,
        name: str = "source.csv",
        columns: Sequence[str] | None = None,
    ) -> SourceCollection:
        return SourceCollection.from_rows(rows, id=f"id-{name}", name=name, columns=columns)

    return _factory


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    """Write rows to a CSV file under tmp_path and return its path."""

    def _writer(name: str, header: Sequence[str], rows: Sequence[Sequence[Any]]) -> Path:
        path = tmp_path / name
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(header)
            writer.writerows(rows)
        return path

    return _writer


@pytest.fixture
def write_jsonl(tmp_path: Path) -> Callable[..., Path]:
    """Write objects to a JSONL file under tmp_path and return its path."""

    def _writer(name: str, rows: Sequence[dict[str, Any]]) -> Path:
        path = tmp_path / name
        with path.open("w", encoding="utf-8") as f:
            for row in rows:
                f.write(json.dumps(row) + "\n")
        return path

    return _writer
