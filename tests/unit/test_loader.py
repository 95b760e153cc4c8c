"""Tests for table file loading."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from tabmerge.tables import (
    MAX_SOURCES,
    MIN_SOURCES,
    LoadError,
    load_collection,
    load_collections,
    load_file,
)
from tabmerge.tables.loader import detect_encoding

# ---------------------------------------------------------------------------
# Encoding detection
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (b"\xef\xbb\xbfsku\n", "utf-8-sig"),
        ("sku,café\n".encode(), "utf-8"),
        ("sku,café\n".encode("latin-1"), "latin-1"),
    ],
)
def test_detect_encoding(data: bytes, expected: str) -> None:
    """BOM, valid UTF-8 and fallback are detected."""
    assert detect_encoding(data) == expected


# ---------------------------------------------------------------------------
# CSV / TSV
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_load_csv_columns_and_rows(write_csv: Callable[..., Path]) -> None:
    """Header row defines columns; cells load as strings."""
    path = write_csv("prices.csv", ["sku", "name", "price"], [["A1", "Bolt", "0.20"]])

    collection = load_collection(path)

    assert collection.name == "prices.csv"
    assert collection.columns == ("sku", "name", "price")
    assert collection.rows == ({"sku": "A1", "name": "Bolt", "price": "0.20"},)


@pytest.mark.unit
def test_load_csv_empty_cells_become_none(write_csv: Callable[..., Path]) -> None:
    """Empty cells load as None."""
    path = write_csv("a.csv", ["sku", "name"], [["A1", ""]])

    collection = load_collection(path)

    assert collection.rows[0] == {"sku": "A1", "name": None}


@pytest.mark.unit
def test_load_csv_discards_blank_rows(write_csv: Callable[..., Path]) -> None:
    """Rows with no values are dropped and counted."""
    path = write_csv(
        "a.csv",
        ["sku", "name"],
        [["A1", "Bolt"], ["", ""], ["  ", ""], ["A2", "Nut"]],
    )

    collection, result = load_file(path)

    assert [r["sku"] for r in collection.rows] == ["A1", "A2"]
    assert result.rows_loaded == 2
    assert result.rows_discarded == 2


@pytest.mark.unit
def test_load_csv_with_bom(tmp_path: Path) -> None:
    """A UTF-8 BOM does not leak into the first column name."""
    path = tmp_path / "bom.csv"
    path.write_bytes(b"\xef\xbb\xbfsku,name\r\nA1,Bolt\r\n")

    collection, result = load_file(path)

    assert collection.columns == ("sku", "name")
    assert result.encoding_used == "utf-8-sig"


@pytest.mark.unit
def test_load_csv_extra_cells_dropped(tmp_path: Path) -> None:
    """Cells beyond the header are ignored."""
    path = tmp_path / "ragged.csv"
    path.write_text("sku,name\nA1,Bolt,surplus\n", encoding="utf-8")

    collection = load_collection(path)

    assert collection.rows[0] == {"sku": "A1", "name": "Bolt"}


@pytest.mark.unit
def test_load_tsv(tmp_path: Path) -> None:
    """Tab-separated files use the tab delimiter."""
    path = tmp_path / "a.tsv"
    path.write_text("sku\tname\nA1\tHex, bolt\n", encoding="utf-8")

    collection = load_collection(path)

    assert collection.rows[0] == {"sku": "A1", "name": "Hex, bolt"}


# ---------------------------------------------------------------------------
# JSON / JSONL
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_load_json_array(tmp_path: Path) -> None:
    """JSON arrays keep native scalar types; columns come from the first row."""
    path = tmp_path / "a.json"
    path.write_text(
        json.dumps([{"sku": 7, "ok": True, "tags": ["x"]}, {"sku": 8, "other": 1}]),
        encoding="utf-8",
    )

    collection = load_collection(path)

    assert collection.columns == ("sku", "ok", "tags")
    assert collection.rows[0] == {"sku": 7, "ok": True, "tags": '["x"]'}
    assert collection.rows[1] == {"sku": 8, "other": 1}


@pytest.mark.unit
def test_load_jsonl(write_jsonl: Callable[..., Path]) -> None:
    """JSONL files load one object per line."""
    path = write_jsonl("a.jsonl", [{"sku": "A1"}, {"sku": "A2"}])

    collection = load_collection(path)

    assert [r["sku"] for r in collection.rows] == ["A1", "A2"]


@pytest.mark.unit
def test_collection_id_is_content_digest(tmp_path: Path) -> None:
    """Identical content yields identical collection ids."""
    a = tmp_path / "a.csv"
    b = tmp_path / "b.csv"
    a.write_text("sku\nA1\n", encoding="utf-8")
    b.write_text("sku\nA1\n", encoding="utf-8")

    _, result_a = load_file(a)

    assert load_collection(a).id == load_collection(b).id
    assert result_a.sha256.startswith("sha256:")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_unsupported_extension(tmp_path: Path) -> None:
    """Unknown extensions raise LoadError with the file attached."""
    path = tmp_path / "book.xlsx"
    path.write_bytes(b"PK")

    with pytest.raises(LoadError, match="Unsupported file type") as exc_info:
        load_collection(path)

    assert exc_info.value.file == str(path)


@pytest.mark.unit
def test_missing_file(tmp_path: Path) -> None:
    """A missing file raises LoadError."""
    with pytest.raises(LoadError, match="Failed to read"):
        load_collection(tmp_path / "missing.csv")


@pytest.mark.unit
@pytest.mark.parametrize(
    ("name", "content"),
    [
        ("bad.json", "{not json"),
        ("object.json", '{"sku": 1}'),
        ("scalars.json", "[1, 2]"),
        ("bad.jsonl", '{"sku": 1}\n[1]\n'),
    ],
)
def test_malformed_content(tmp_path: Path, name: str, content: str) -> None:
    """Malformed JSON content raises LoadError."""
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")

    with pytest.raises(LoadError, match="Failed to parse"):
        load_collection(path)


@pytest.mark.unit
@pytest.mark.parametrize("content", ["", "sku,name\n", "sku,name\n,\n"])
def test_no_rows(tmp_path: Path, content: str) -> None:
    """Files without usable rows raise LoadError."""
    path = tmp_path / "empty.csv"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(LoadError, match="No rows found"):
        load_collection(path)


# ---------------------------------------------------------------------------
# load_collections
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_load_collections_preserves_order(write_csv: Callable[..., Path]) -> None:
    """Collections come back in the order the paths were given."""
    b = write_csv("b.csv", ["sku"], [["B1"]])
    a = write_csv("a.csv", ["sku"], [["A1"]])

    collections, results = load_collections([b, a])

    assert [c.name for c in collections] == ["b.csv", "a.csv"]
    assert [r.filename for r in results] == ["b.csv", "a.csv"]


@pytest.mark.unit
def test_load_collections_source_bounds(write_csv: Callable[..., Path]) -> None:
    """Between MIN_SOURCES and MAX_SOURCES files are required."""
    paths = [write_csv(f"s{i}.csv", ["sku"], [[str(i)]]) for i in range(MAX_SOURCES + 1)]

    with pytest.raises(ValueError, match="Expected between"):
        load_collections(paths[: MIN_SOURCES - 1])

    with pytest.raises(ValueError, match="Expected between"):
        load_collections(paths)

    collections, _ = load_collections(paths[:MAX_SOURCES])
    assert len(collections) == MAX_SOURCES
