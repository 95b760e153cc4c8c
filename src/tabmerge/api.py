"""Public API for tabmerge.

This module provides the main public API, enabling:
- Loading table files into SourceCollection objects
- Listing candidate key columns
- Merging collections or files into one table
- Exporting merged tables
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from tabmerge.merge import DEFAULT_SIMILARITY_THRESHOLD, column_union, merge_collections
from tabmerge.tables import ExportError, LoadError, load_collection, write_table

if TYPE_CHECKING:
    from tabmerge.engine.config import PipelineResult

__all__ = [
    "ExportError",
    "LoadError",
    "available_key_columns",
    "column_union",
    "load_collection",
    "merge_collections",
    "merge_files",
    "write_table",
]


def available_key_columns(paths: Sequence[str | Path]) -> list[str]:
    """List the columns that can serve as key column for a set of files.

    Parameters
    ----------
    paths : Sequence[str | Path]
        Table files.

    Returns
    -------
    list[str]
        Union of all column names, in first-seen order.

    Raises
    ------
    LoadError
        If any file fails to load.

    Examples
    --------
        >>> from tabmerge import available_key_columns
        >>> available_key_columns(["vendor_a.csv", "vendor_b.csv"])
        ['sku', 'name', 'price', 'description']
    """
    return column_union([load_collection(p) for p in paths])


def merge_files(
    paths: Sequence[str | Path],
    key_column: str,
    *,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    output: str | Path | None = None,
) -> PipelineResult:
    """Merge table files on a key column.

    Simplified interface to the full merge pipeline.

    Parameters
    ----------
    paths : Sequence[str | Path]
        Between two and five table files (.csv, .tsv, .json, .jsonl).
    key_column : str
        Column used to match rows across files.
    threshold : float, optional
        Similarity threshold in [0.5, 1.0], by default 0.85.
    output : str | Path | None, optional
        Where to write the merged table. If None, nothing is written.

    Returns
    -------
    PipelineResult
        Counts, merged table and output path. Check ``export_error`` to see
        whether writing the output failed.

    Raises
    ------
    ValueError
        If the threshold is out of range, the key column is empty, no
        source has the key column, or fewer than two or more than five
        files are given.
    LoadError
        If a file cannot be read or parsed.

    Notes
    -----
    The exception that failed the pipeline is re-raised unchanged, so its
    type matches the cause. ``run_pipeline`` reports the same failures on
    the returned result instead.

    Examples
    --------
        >>> from tabmerge import merge_files
        >>> result = merge_files(["a.csv", "b.csv"], "sku", output="merged.csv")
        >>> print(result.total_rows, result.total_entities)
    """
    from tabmerge.engine import PipelineConfig, run_pipeline

    config = PipelineConfig(
        key_column=key_column,
        similarity_threshold=threshold,
        output_path=Path(output) if output is not None else None,
    )

    result = run_pipeline(paths, config)

    if result.error is not None:
        raise result.error

    return result
