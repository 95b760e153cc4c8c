"""Column discovery and namespaced field keys."""

from collections.abc import Sequence

from tabmerge.models import SourceCollection

__all__ = ["column_union", "field_key", "source_field_keys", "output_schema"]


def column_union(collections: Sequence[SourceCollection]) -> list[str]:
    """Collect every column name across collections in first-seen order.

    Parameters
    ----------
    collections : Sequence[SourceCollection]
        Source collections in input order.

    Returns
    -------
    list[str]
        Unique column names, ordered by first appearance.
    """
    seen: dict[str, None] = {}
    for collection in collections:
        for column in collection.columns:
            seen.setdefault(column, None)
    return list(seen)


def field_key(source_index: int, column: str) -> str:
    """Build the namespaced field key for a source column.

    Parameters
    ----------
    source_index : int
        1-based position of the source collection.
    column : str
        Column name.

    Returns
    -------
    str
        Key in format "<source_index>_<column>".
    """
    return f"{source_index}_{column}"


def source_field_keys(source_index: int, collection: SourceCollection) -> dict[str, str]:
    """Map each column of one collection to its namespaced field key."""
    return {column: field_key(source_index, column) for column in collection.columns}


def output_schema(collections: Sequence[SourceCollection]) -> list[str]:
    """Compute the uniform merged-table schema.

    Parameters
    ----------
    collections : Sequence[SourceCollection]
        Source collections in input order.

    Returns
    -------
    list[str]
        Namespaced field keys, source order then column order.
    """
    schema: list[str] = []
    for index, collection in enumerate(collections, start=1):
        schema.extend(source_field_keys(index, collection).values())
    return schema
