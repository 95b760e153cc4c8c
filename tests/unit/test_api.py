"""Tests for the public API."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest

import tabmerge
from tabmerge import (
    LoadError,
    available_key_columns,
    load_collection,
    merge_collections,
    merge_files,
    write_table,
)


@pytest.fixture
def files(write_csv: Callable[..., Path], write_jsonl: Callable[..., Path]) -> list[Path]:
    """A CSV and a JSONL file keyed on code."""
    a = write_csv("parts.csv", ["code", "desc"], [["007", "Gear"], ["HOUS-200", "Housing"]])
    b = write_jsonl(
        "stock.jsonl",
        [{"code": 7, "qty": 12}, {"code": "HOUS-201", "qty": 0}, {"code": "ZZ", "qty": 3}],
    )
    return [a, b]


@pytest.mark.unit
def test_public_exports() -> None:
    """The package exposes the documented API."""
    for name in (
        "ExportError",
        "LoadError",
        "SourceCollection",
        "available_key_columns",
        "column_union",
        "is_match",
        "load_collection",
        "merge_collections",
        "merge_files",
        "similarity",
        "write_table",
    ):
        assert hasattr(tabmerge, name), name
    assert tabmerge.__version__


@pytest.mark.unit
def test_available_key_columns(files: list[Path]) -> None:
    """Column union spans all files in first-seen order."""
    assert available_key_columns(files) == ["code", "desc", "qty"]


@pytest.mark.unit
def test_merge_files(files: list[Path]) -> None:
    """Numeric and fuzzy keys are matched across file formats."""
    result = merge_files(files, "code")

    assert result.success
    assert result.total_rows == 5
    assert result.total_entities == 3
    assert result.entities_multi_source == 2
    assert result.table is not None
    assert result.table.rows[0]["2_qty"] == 12
    assert result.table.rows[1]["2_code"] == "HOUS-201"
    assert result.table.rows[2] == {"1_code": "", "1_desc": "", "2_code": "ZZ", "2_qty": 3}


@pytest.mark.unit
def test_merge_files_strict_threshold(files: list[Path]) -> None:
    """A strict threshold keeps near-identical codes apart."""
    result = merge_files(files, "code", threshold=1.0)

    assert result.total_entities == 4
    assert result.entities_multi_source == 1


@pytest.mark.unit
def test_merge_files_writes_output(files: list[Path], tmp_path: Path) -> None:
    """The output argument exports the table."""
    output = tmp_path / "merged.json"

    result = merge_files(files, "code", output=output)

    assert result.output_path == str(output)
    assert len(json.loads(output.read_text(encoding="utf-8"))) == 3


@pytest.mark.unit
def test_merge_files_unknown_key_raises(files: list[Path]) -> None:
    """A key column missing from every file raises ValueError."""
    with pytest.raises(ValueError, match="Key column 'sku' not found"):
        merge_files(files, "sku")


@pytest.mark.unit
def test_merge_files_unreadable_file_raises(files: list[Path], tmp_path: Path) -> None:
    """A file that cannot be parsed raises LoadError naming the file."""
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")

    with pytest.raises(LoadError) as exc_info:
        merge_files([files[0], broken], "code")

    assert Path(exc_info.value.file).name == "broken.json"


@pytest.mark.unit
def test_merge_files_too_many_files_raises(files: list[Path]) -> None:
    """More than five files raises ValueError."""
    with pytest.raises(ValueError, match="Expected between 2 and 5 files, got 6"):
        merge_files(files * 3, "code")


@pytest.mark.unit
def test_merge_files_invalid_threshold(files: list[Path]) -> None:
    """Out-of-range thresholds raise ValueError before loading."""
    with pytest.raises(ValueError, match="similarity_threshold"):
        merge_files(files, "code", threshold=0.1)


@pytest.mark.unit
def test_in_memory_workflow(files: list[Path], tmp_path: Path) -> None:
    """load_collection, merge_collections and write_table compose."""
    collections = [load_collection(p) for p in files]

    table = merge_collections(collections, "code", 0.85)
    written = write_table(table, tmp_path / "merged.tsv")

    assert written == len(table) == 3
