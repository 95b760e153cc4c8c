"""Table file boundary.

Loading of source files into SourceCollection objects and export of merged
tables. File formats are handled here so the merge core stays I/O free.
"""

from tabmerge.tables.loader import (
    MAX_SOURCES,
    MIN_SOURCES,
    SUPPORTED_EXTENSIONS,
    FileLoadResult,
    LoadError,
    load_collection,
    load_collections,
    load_file,
)
from tabmerge.tables.writer import EXPORT_FORMATS, ExportError, write_table

__all__ = [
    "EXPORT_FORMATS",
    "MAX_SOURCES",
    "MIN_SOURCES",
    "SUPPORTED_EXTENSIONS",
    "ExportError",
    "FileLoadResult",
    "LoadError",
    "load_collection",
    "load_collections",
    "load_file",
    "write_table",
]
