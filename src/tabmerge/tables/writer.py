"""Merged table export.

Writes one row per entity with columns in schema order. Output is written
to a temporary file and renamed into place so a failed export never leaves
a partial file behind.
"""

import csv
import json
from pathlib import Path
from typing import TextIO

from tabmerge.merge.models import MergedTable

__all__ = ["EXPORT_FORMATS", "ExportError", "write_table"]

EXPORT_FORMATS: dict[str, str] = {
    ".csv": "csv",
    ".tsv": "tsv",
    ".json": "json",
    ".jsonl": "jsonl",
}


class ExportError(Exception):
    """Raised when a merged table cannot be written.

    The merged table itself is unaffected, so the export can be retried.
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
    ) -> None:
        """Initialize export error.

        Parameters
        ----------
        message : str
            Error message.
        path : str | None, optional
            Destination path.
        """
        super().__init__(message)
        self.path = path


def _write_delimited(table: MergedTable, f: TextIO, delimiter: str) -> None:
    writer = csv.DictWriter(f, fieldnames=table.schema, delimiter=delimiter)
    writer.writeheader()
    for row in table:
        writer.writerow(row)


def _write_jsonl(table: MergedTable, f: TextIO) -> None:
    for row in table.rows:
        ordered = {key: row.get(key, "") for key in table.schema}
        f.write(json.dumps(ordered, ensure_ascii=False) + "\n")


def _write_json(table: MergedTable, f: TextIO) -> None:
    ordered = [{key: row.get(key, "") for key in table.schema} for row in table.rows]
    json.dump(ordered, f, ensure_ascii=False, indent=2)
    f.write("\n")


def write_table(table: MergedTable, path: Path | str) -> int:
    """Write a merged table to disk.

    Parameters
    ----------
    table : MergedTable
        Table to export.
    path : Path | str
        Destination file; the extension selects the format
        (.csv, .tsv, .json or .jsonl).

    Returns
    -------
    int
        Number of entity rows written.

    Raises
    ------
    ExportError
        If the format is unsupported or writing fails.

    Examples
    --------
        >>> from tabmerge import write_table
        >>> write_table(table, "comparison.csv")
        42
    """
    file_path = Path(path)
    format_name = EXPORT_FORMATS.get(file_path.suffix.lower())
    if format_name is None:
        raise ExportError(f"Unsupported export format: {file_path.name}", path=str(file_path))

    temp_path = file_path.with_name(file_path.name + ".tmp")
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with temp_path.open("w", encoding="utf-8", newline="") as f:
            if format_name == "csv":
                _write_delimited(table, f, ",")
            elif format_name == "tsv":
                _write_delimited(table, f, "\t")
            elif format_name == "json":
                _write_json(table, f)
            else:
                _write_jsonl(table, f)
        temp_path.replace(file_path)
    except (OSError, UnicodeError, csv.Error, ValueError) as e:
        if temp_path.exists():
            temp_path.unlink()
        raise ExportError(f"Failed to write {file_path.name}: {e}", path=str(file_path)) from e

    return len(table.rows)
