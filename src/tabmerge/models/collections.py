"""Source collection data models for tabmerge.

A source collection is one loaded table: an ordered list of rows plus the
column names observed in it. Collections are owned by the caller and only
read by the merge engine.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

# Scalar cell value as produced by a table loader
Scalar = str | int | float | bool | None

# Row mapping column name to cell value
Row = Mapping[str, Scalar]

# Sentinel for a field an entity has not received from a source
EMPTY = ""


def is_empty_value(value: Any) -> bool:
    """Check whether a cell value counts as an unfilled slot.

    Parameters
    ----------
    value : Any
        Cell value.

    Returns
    -------
    bool
        True for None and the empty-string sentinel. Zero and False are
        real values and count as filled.
    """
    return value is None or (isinstance(value, str) and value == EMPTY)


@dataclass(frozen=True)
class SourceCollection:
    """Immutable table loaded from one source.

    Attributes
    ----------
    id : str
        Opaque collection identifier.
    name : str
        Display name (usually the originating file name).
    rows : tuple[Row, ...]
        Rows in input order.
    columns : tuple[str, ...]
        Column names in declared order.
    """

    id: str
    name: str
    rows: tuple[Row, ...]
    columns: tuple[str, ...] = field(default=())

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Row],
        *,
        id: str,
        name: str,
        columns: Iterable[str] | None = None,
    ) -> "SourceCollection":
        """Build a collection, deriving columns from the first row.

        Parameters
        ----------
        rows : Iterable[Row]
            Row mappings in input order.
        id : str
            Collection identifier.
        name : str
            Display name.
        columns : Iterable[str] | None, optional
            Explicit column order. If None, the keys of the first row are used.

        Returns
        -------
        SourceCollection
            New collection.
        """
        row_tuple = tuple(dict(row) for row in rows)
        if columns is None:
            column_tuple = tuple(row_tuple[0].keys()) if row_tuple else ()
        else:
            column_tuple = tuple(columns)
        return cls(id=id, name=name, rows=row_tuple, columns=column_tuple)

    def __len__(self) -> int:
        """Return number of rows."""
        return len(self.rows)
