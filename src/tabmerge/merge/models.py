"""Data models for merged tables."""

from collections.abc import Iterator
from dataclasses import asdict, dataclass, field
from typing import Any

from tabmerge.models import EMPTY, Scalar


@dataclass
class Entity:
    """Merged row accumulating at most one row per source.

    Attributes
    ----------
    fields : dict[str, Scalar]
        Namespaced field values; unfilled fields hold the empty sentinel.
    representative_key : Scalar
        Raw key value of the row that created the entity. Used only for
        matching and never exported.
    sources : list[int]
        1-based indexes of sources that contributed a row, in arrival order.
    """

    fields: dict[str, Scalar]
    representative_key: Scalar = None
    sources: list[int] = field(default_factory=list)

    @classmethod
    def blank(cls, schema: list[str], representative_key: Scalar) -> "Entity":
        """Create an entity with every schema field set to the sentinel."""
        return cls(
            fields=dict.fromkeys(schema, EMPTY),
            representative_key=representative_key,
        )

    def to_row(self) -> dict[str, Scalar]:
        """Return exported field values without internal state."""
        return dict(self.fields)


@dataclass
class MergedTable:
    """Final ordered merge output.

    Attributes
    ----------
    schema : list[str]
        Namespaced field keys in output order.
    rows : list[dict[str, Scalar]]
        One mapping per entity, in entity creation order.
    """

    schema: list[str]
    rows: list[dict[str, Scalar]]

    def __len__(self) -> int:
        """Return number of entities."""
        return len(self.rows)

    def __iter__(self) -> Iterator[dict[str, Scalar]]:
        """Iterate entity rows."""
        return iter(self.rows)


@dataclass
class SourceStats:
    """Per-source counters.

    Attributes
    ----------
    name : str
        Source display name.
    rows : int
        Rows read from the source.
    matched : int
        Rows absorbed into an entity created by an earlier row.
    created : int
        Rows that created a new entity.
    """

    name: str
    rows: int = 0
    matched: int = 0
    created: int = 0


@dataclass
class MergeSummary:
    """Summary statistics for a merge.

    Attributes
    ----------
    key_column : str
        Column used as entity key.
    similarity_threshold : float
        Fuzzy matching threshold.
    sources : list[SourceStats]
        Per-source counters in input order.
    rows_in_total : int
        Total rows across all sources.
    entities_out : int
        Entities in the merged table.
    entities_multi_source : int
        Entities that received rows from two or more sources.
    keyless_rows : int
        Rows whose key value was empty.
    """

    key_column: str
    similarity_threshold: float
    sources: list[SourceStats] = field(default_factory=list)
    rows_in_total: int = 0
    entities_out: int = 0
    entities_multi_source: int = 0
    keyless_rows: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)
