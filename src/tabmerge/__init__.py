"""Fuzzy key-based merging of tabular datasets.

This package provides:
- Data models (tabmerge.models): source collections and rows
- Matching (tabmerge.matching): string similarity and key matching rules
- Merge (tabmerge.merge): pool-based entity merge engine
- Tables (tabmerge.tables): table file loading and export
- Engine (tabmerge.engine): pipeline orchestration
- Audit (tabmerge.audit): logging and run manifests
- CLI (tabmerge.cli): command-line interface
- Public API (tabmerge.api): high-level convenience functions
"""

__version__ = "0.3.0"
__license__ = "MIT"

from tabmerge.api import (
    ExportError,
    LoadError,
    available_key_columns,
    column_union,
    load_collection,
    merge_collections,
    merge_files,
    write_table,
)
from tabmerge.matching import is_match, similarity
from tabmerge.models import SourceCollection

__all__ = [
    "__version__",
    "__license__",
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
]
