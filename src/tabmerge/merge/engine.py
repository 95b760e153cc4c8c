"""Pool-based row merge engine.

Rows are merged greedily: collections are visited in input order, rows in
row order, and each row joins the FIRST existing entity whose slot for the
row's source is still open and whose representative key matches. No
globally optimal assignment is attempted, so an early weak match can take a
slot that a later, closer row would have preferred. Results are therefore
order-dependent but fully reproducible.
"""

from collections.abc import Sequence

from tabmerge.matching import coerce_key, is_match
from tabmerge.merge.columns import field_key, output_schema, source_field_keys
from tabmerge.merge.models import Entity, MergedTable, MergeSummary, SourceStats
from tabmerge.models import EMPTY, Row, Scalar, SourceCollection, is_empty_value

__all__ = [
    "DEFAULT_SIMILARITY_THRESHOLD",
    "RowPool",
    "merge_collections",
    "merge_with_summary",
]

DEFAULT_SIMILARITY_THRESHOLD = 0.85


class RowPool:
    """Growing list of entities for a single merge call.

    Entities are addressed by their index in creation order. A pool is
    owned by one merge call and never shared.

    Attributes
    ----------
    collections : Sequence[SourceCollection]
        Source collections in input order.
    key_column : str
        Column used as entity key.
    threshold : float
        Fuzzy matching threshold.
    schema : list[str]
        Uniform output schema.
    entities : list[Entity]
        Entities in creation order.
    """

    def __init__(
        self,
        collections: Sequence[SourceCollection],
        key_column: str,
        threshold: float,
    ) -> None:
        """Initialize an empty pool.

        Parameters
        ----------
        collections : Sequence[SourceCollection]
            Source collections in input order.
        key_column : str
            Column used as entity key.
        threshold : float
            Fuzzy matching threshold.
        """
        self.collections = collections
        self.key_column = key_column
        self.threshold = threshold
        self.schema = output_schema(collections)
        self.entities: list[Entity] = []
        self._field_keys = [
            source_field_keys(index, collection)
            for index, collection in enumerate(collections, start=1)
        ]

    def find_slot(self, source_index: int, key_value: Scalar) -> int | None:
        """Find the first entity that can absorb a row from a source.

        Parameters
        ----------
        source_index : int
            1-based source position.
        key_value : Scalar
            Raw key value of the incoming row.

        Returns
        -------
        int | None
            Index of the matching entity, or None.
        """
        slot_key = field_key(source_index, self.key_column)
        for index, entity in enumerate(self.entities):
            if not is_empty_value(entity.fields.get(slot_key)):
                continue
            if is_match(key_value, entity.representative_key, self.threshold):
                return index
        return None

    def add_row(self, source_index: int, row: Row) -> tuple[int, bool]:
        """Place one row into the pool.

        Parameters
        ----------
        source_index : int
            1-based source position.
        row : Row
            Row mapping.

        Returns
        -------
        tuple[int, bool]
            Entity index and whether a new entity was created.
        """
        key_value = row.get(self.key_column)

        match_index = None
        if coerce_key(key_value):
            match_index = self.find_slot(source_index, key_value)

        created = match_index is None
        if match_index is None:
            self.entities.append(Entity.blank(self.schema, key_value))
            match_index = len(self.entities) - 1

        self._write_row(self.entities[match_index], source_index, row)
        return match_index, created

    def _write_row(self, entity: Entity, source_index: int, row: Row) -> None:
        """Copy a row's declared columns into the entity's source fields."""
        for column, key in self._field_keys[source_index - 1].items():
            value = row.get(column)
            entity.fields[key] = EMPTY if value is None else value
        entity.sources.append(source_index)

    def to_table(self) -> MergedTable:
        """Finalize the pool into a merged table, dropping internal keys."""
        return MergedTable(
            schema=list(self.schema),
            rows=[entity.to_row() for entity in self.entities],
        )


def merge_with_summary(
    collections: Sequence[SourceCollection],
    key_column: str,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> tuple[MergedTable, MergeSummary]:
    """Merge source collections and collect summary counters.

    Parameters
    ----------
    collections : Sequence[SourceCollection]
        Source collections in input order.
    key_column : str
        Column used as entity key. Collections without it still contribute
        rows, each as a standalone entity.
    threshold : float, optional
        Minimum similarity for fuzzy key matching, by default 0.85.

    Returns
    -------
    tuple[MergedTable, MergeSummary]
        Merged table and statistics.
    """
    pool = RowPool(collections, key_column, threshold)
    summary = MergeSummary(key_column=key_column, similarity_threshold=threshold)

    for source_index, collection in enumerate(collections, start=1):
        stats = SourceStats(name=collection.name, rows=len(collection.rows))
        for row in collection.rows:
            if not coerce_key(row.get(key_column)):
                summary.keyless_rows += 1
            _, created = pool.add_row(source_index, row)
            if created:
                stats.created += 1
            else:
                stats.matched += 1
        summary.sources.append(stats)
        summary.rows_in_total += stats.rows

    summary.entities_out = len(pool.entities)
    summary.entities_multi_source = sum(1 for e in pool.entities if len(e.sources) > 1)

    return pool.to_table(), summary


def merge_collections(
    collections: Sequence[SourceCollection],
    key_column: str,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> MergedTable:
    """Merge source collections into one table keyed on a column.

    Parameters
    ----------
    collections : Sequence[SourceCollection]
        Source collections in input order.
    key_column : str
        Column used as entity key.
    threshold : float, optional
        Minimum similarity for fuzzy key matching, by default 0.85.

    Returns
    -------
    MergedTable
        Entities in creation order with a uniform schema.

    Examples
    --------
        >>> a = SourceCollection.from_rows([{"id": "1", "name": "Widget"}], id="a", name="a")
        >>> b = SourceCollection.from_rows([{"id": "1", "desc": "Gadget"}], id="b", name="b")
        >>> merge_collections([a, b], "id").rows
        [{'1_id': '1', '1_name': 'Widget', '2_id': '1', '2_desc': 'Gadget'}]
    """
    table, _ = merge_with_summary(collections, key_column, threshold)
    return table
