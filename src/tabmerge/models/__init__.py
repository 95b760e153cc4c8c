"""Shared data types for tabmerge.

This package contains the input-side types consumed across the pipeline.

Merge output types live closer to their producer:
- Entity, MergedTable, MergeSummary → tabmerge.merge.models
- Audit types → tabmerge.audit.models
"""

from tabmerge.models.collections import (
    EMPTY,
    Row,
    Scalar,
    SourceCollection,
    is_empty_value,
)

__all__ = [
    "EMPTY",
    "Row",
    "Scalar",
    "SourceCollection",
    "is_empty_value",
]
