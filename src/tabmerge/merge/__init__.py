"""Row merging.

This package groups rows from several source collections into entities
keyed on a designated column.
"""

from tabmerge.merge.columns import column_union, field_key, output_schema
from tabmerge.merge.engine import (
    DEFAULT_SIMILARITY_THRESHOLD,
    RowPool,
    merge_collections,
    merge_with_summary,
)
from tabmerge.merge.models import Entity, MergedTable, MergeSummary, SourceStats

__all__ = [
    "DEFAULT_SIMILARITY_THRESHOLD",
    "Entity",
    "MergedTable",
    "MergeSummary",
    "RowPool",
    "SourceStats",
    "column_union",
    "field_key",
    "merge_collections",
    "merge_with_summary",
    "output_schema",
]
