"""Tabular file loading.

Reads delimited text and JSON files into SourceCollection objects. Each
file becomes one collection whose columns are the fields of its first row.
Rows without any non-empty value are discarded.
"""

import csv
import io
import json
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tabmerge.models import Row, Scalar, SourceCollection
from tabmerge.utils import file_mtime, sha256_digest, short_digest

__all__ = [
    "MAX_SOURCES",
    "MIN_SOURCES",
    "SUPPORTED_EXTENSIONS",
    "FileLoadResult",
    "LoadError",
    "detect_encoding",
    "load_collection",
    "load_collections",
    "load_file",
]

MIN_SOURCES = 2
MAX_SOURCES = 5

SUPPORTED_EXTENSIONS: dict[str, str] = {
    ".csv": "csv",
    ".tsv": "tsv",
    ".json": "json",
    ".jsonl": "jsonl",
}


class LoadError(Exception):
    """Raised when a table file cannot be loaded."""

    def __init__(
        self,
        message: str,
        file: str | None = None,
    ) -> None:
        """Initialize load error.

        Parameters
        ----------
        message : str
            Error message.
        file : str | None, optional
            File where error occurred.
        """
        super().__init__(message)
        self.file = file


@dataclass(frozen=True)
class FileLoadResult:
    """Immutable metadata about one loaded file.

    Attributes
    ----------
    filename : str
        Name of the file (basename).
    format : str
        Format derived from the extension (csv|tsv|json|jsonl).
    file_size : int
        Size of file in bytes.
    file_mtime : str | None
        ISO8601 modification time.
    sha256 : str
        SHA256 digest of file bytes with "sha256:" prefix.
    encoding_used : str
        Encoding used to decode file.
    rows_loaded : int
        Rows kept in the collection.
    rows_discarded : int
        Rows dropped because every value was empty.
    columns : tuple[str, ...]
        Column names in declared order.
    """

    filename: str
    format: str
    file_size: int
    file_mtime: str | None
    sha256: str
    encoding_used: str
    rows_loaded: int
    rows_discarded: int
    columns: tuple[str, ...]


def detect_encoding(file_bytes: bytes) -> str:
    """Detect encoding of file bytes.

    Parameters
    ----------
    file_bytes : bytes
        Complete file content as bytes.

    Returns
    -------
    str
        "utf-8-sig" when a BOM is present, "utf-8" if the content decodes,
        otherwise "latin-1".
    """
    if file_bytes.startswith(b"\xef\xbb\xbf"):
        return "utf-8-sig"

    try:
        file_bytes.decode("utf-8")
        return "utf-8"
    except UnicodeDecodeError:
        pass

    return "latin-1"


def _to_scalar(value: Any) -> Scalar:
    """Flatten a parsed JSON value into a cell scalar."""
    if value is None or isinstance(value, str | int | float | bool):
        return value
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def _is_blank_row(row: Row) -> bool:
    """Check whether a row holds no non-empty value."""
    for value in row.values():
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return False
    return True


def _read_delimited(content: str, delimiter: str) -> list[dict[str, Scalar]]:
    """Read delimited text with a header row; empty cells become None."""
    reader = csv.DictReader(io.StringIO(content, newline=""), delimiter=delimiter)
    rows: list[dict[str, Scalar]] = []
    for raw in reader:
        # Cells past the header land under the None key
        rows.append(
            {
                column: value if value != "" else None
                for column, value in raw.items()
                if column is not None
            }
        )
    return rows


def _read_json(content: str) -> list[dict[str, Scalar]]:
    """Read a JSON array of objects."""
    data = json.loads(content)
    if not isinstance(data, list):
        raise ValueError("expected a JSON array of objects")
    rows: list[dict[str, Scalar]] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"item {index} is not an object")
        rows.append({str(k): _to_scalar(v) for k, v in item.items()})
    return rows


def _read_jsonl(content: str) -> list[dict[str, Scalar]]:
    """Read one JSON object per non-blank line."""
    rows: list[dict[str, Scalar]] = []
    for line_no, line in enumerate(content.splitlines(), start=1):
        if not line.strip():
            continue
        item = json.loads(line)
        if not isinstance(item, dict):
            raise ValueError(f"line {line_no} is not an object")
        rows.append({str(k): _to_scalar(v) for k, v in item.items()})
    return rows


def load_file(file_path: Path | str) -> tuple[SourceCollection, FileLoadResult]:
    """Load one table file.

    Parameters
    ----------
    file_path : Path | str
        Path to a .csv, .tsv, .json or .jsonl file.

    Returns
    -------
    tuple[SourceCollection, FileLoadResult]
        - Loaded collection
        - File metadata and row counters

    Raises
    ------
    LoadError
        If the file cannot be read, decoded or parsed, has an unsupported
        extension, or contains no usable rows.
    """
    path = Path(file_path)
    extension = path.suffix.lower()
    format_name = SUPPORTED_EXTENSIONS.get(extension)
    if format_name is None:
        raise LoadError(f"Unsupported file type: {path.name}", file=str(path))

    try:
        file_bytes = path.read_bytes()
    except OSError as e:
        raise LoadError(f"Failed to read {path.name}: {e}", file=str(path)) from e

    encoding = detect_encoding(file_bytes)
    content = file_bytes.decode(encoding)

    try:
        if format_name == "csv":
            parsed = _read_delimited(content, ",")
        elif format_name == "tsv":
            parsed = _read_delimited(content, "\t")
        elif format_name == "json":
            parsed = _read_json(content)
        else:
            parsed = _read_jsonl(content)
    except (ValueError, csv.Error) as e:
        raise LoadError(f"Failed to parse {path.name}: {e}", file=str(path)) from e

    rows = [row for row in parsed if not _is_blank_row(row)]
    if not rows:
        raise LoadError(f"No rows found in {path.name}", file=str(path))

    collection = SourceCollection.from_rows(
        rows,
        id=short_digest(file_bytes),
        name=path.name,
    )

    result = FileLoadResult(
        filename=path.name,
        format=format_name,
        file_size=len(file_bytes),
        file_mtime=file_mtime(path),
        sha256=sha256_digest(file_bytes),
        encoding_used=encoding,
        rows_loaded=len(rows),
        rows_discarded=len(parsed) - len(rows),
        columns=collection.columns,
    )

    return collection, result


def load_collection(file_path: Path | str) -> SourceCollection:
    """Load one table file into a SourceCollection.

    Parameters
    ----------
    file_path : Path | str
        Path to a supported table file.

    Returns
    -------
    SourceCollection
        Loaded collection.

    Raises
    ------
    LoadError
        If loading fails.

    Examples
    --------
        >>> from tabmerge import load_collection
        >>> prices = load_collection("vendor_a.csv")
        >>> prices.columns
        ('sku', 'name', 'price')
    """
    collection, _ = load_file(file_path)
    return collection


def load_collections(
    paths: Sequence[Path | str],
) -> tuple[list[SourceCollection], list[FileLoadResult]]:
    """Load between MIN_SOURCES and MAX_SOURCES table files in order.

    Parameters
    ----------
    paths : Sequence[Path | str]
        Table files; their order defines source indexes.

    Returns
    -------
    tuple[list[SourceCollection], list[FileLoadResult]]
        Collections and per-file results, both in input order.

    Raises
    ------
    ValueError
        If fewer than MIN_SOURCES or more than MAX_SOURCES paths are given.
    LoadError
        If any file fails to load.
    """
    if not MIN_SOURCES <= len(paths) <= MAX_SOURCES:
        raise ValueError(
            f"Expected between {MIN_SOURCES} and {MAX_SOURCES} files, got {len(paths)}"
        )

    collections: list[SourceCollection] = []
    results: list[FileLoadResult] = []
    for path in paths:
        collection, result = load_file(path)
        collections.append(collection)
        results.append(result)

    return collections, results
