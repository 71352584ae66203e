"""
Partitioned, immutable row collections backed by Arrow tables.

A PartitionedDataset is the in-process stand-in for the engine's distributed
collection. Each partition is one `pyarrow.Table`; all partitions share one
schema:

    PartitionedDataset
    ├── partition 0: pa.Table  (id: string, ts: timestamp, value: double)
    ├── partition 1: pa.Table  (same schema)
    └── partition 2: pa.Table  (same schema, may have zero rows)

Rows are surfaced as tuples in schema field order. Nothing here mutates a
dataset; every operation that changes partitioning returns a new instance.
"""

import logging
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

import pyarrow as pa

from shardplan.constants import DEFAULT_BATCH_SIZE
from shardplan.errors import DatasetError
from shardplan.schema.row import Row

logger = logging.getLogger(__name__)


def split_sizes(total: int, parts: int) -> List[int]:
    """
    Sizes of `parts` contiguous slices covering `total` rows.

    Earlier slices take the remainder, so sizes differ by at most one.

    Example:
        >>> split_sizes(10, 4)
        [3, 3, 2, 2]
    """
    base, extra = divmod(total, parts)
    return [base + 1 if i < extra else base for i in range(parts)]


def iter_table_rows(
    table: pa.Table, batch_size: int = DEFAULT_BATCH_SIZE
) -> Iterator[Row]:
    """Yield rows of an Arrow table as tuples, one record batch at a time."""
    if table.num_columns == 0:
        for _ in range(table.num_rows):
            yield ()
        return

    for batch in table.to_batches(max_chunksize=batch_size):
        columns = [column.to_pylist() for column in batch.columns]
        yield from zip(*columns)


def table_from_rows(
    rows: Sequence[Row],
    field_names: Sequence[str],
    schema: Optional[pa.Schema] = None,
) -> pa.Table:
    """Build an Arrow table from tuples laid out in `field_names` order."""
    columns = {
        name: [row[position] for row in rows]
        for position, name in enumerate(field_names)
    }
    try:
        return pa.Table.from_pydict(columns, schema=schema)
    except (pa.ArrowInvalid, pa.ArrowTypeError) as exc:
        raise DatasetError(f"Cannot build partition table: {exc}") from exc


class PartitionedDataset:
    """
    Immutable multiset of Rows split across partitions.

    Example:
        >>> ds = PartitionedDataset.from_rows(
        ...     [(1, "a"), (2, "b"), (3, "c")], ["id", "name"], num_partitions=2
        ... )
        >>> ds.num_partitions, ds.num_rows
        (2, 3)
        >>> list(ds.iter_partition_rows(1))
        [(3, 'c')]
    """

    __slots__ = ("_partitions", "_schema")

    def __init__(self, partitions: Iterable[pa.Table]):
        tables = tuple(partitions)
        if not tables:
            raise DatasetError(
                "A dataset needs at least one partition; use an empty table "
                "for an empty dataset"
            )

        schema = tables[0].schema
        for index, table in enumerate(tables[1:], start=1):
            if not table.schema.equals(schema):
                raise DatasetError(
                    f"Partition {index} schema {table.schema} does not match "
                    f"partition 0 schema {schema}"
                )

        self._partitions: Tuple[pa.Table, ...] = tables
        self._schema: pa.Schema = schema

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_tables(cls, tables: Iterable[pa.Table]) -> "PartitionedDataset":
        return cls(tables)

    @classmethod
    def from_table(
        cls, table: pa.Table, num_partitions: int = 1
    ) -> "PartitionedDataset":
        """Split one table into `num_partitions` contiguous partitions."""
        if num_partitions < 1:
            raise DatasetError(f"num_partitions must be >= 1, got {num_partitions}")

        tables = []
        offset = 0
        for size in split_sizes(table.num_rows, num_partitions):
            tables.append(table.slice(offset, size))
            offset += size
        return cls(tables)

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Row],
        field_names: Sequence[str],
        num_partitions: int = 1,
        schema: Optional[pa.Schema] = None,
    ) -> "PartitionedDataset":
        """
        Build a dataset from tuples.

        Args:
            rows: Rows in `field_names` order
            field_names: Column names
            num_partitions: Number of contiguous partitions to split into
            schema: Optional explicit Arrow schema (required to type columns
                of an empty dataset)
        """
        row_list = list(rows)
        for row in row_list:
            if len(row) != len(field_names):
                raise DatasetError(
                    f"Row {row!r} has {len(row)} fields, expected {len(field_names)}"
                )
        table = table_from_rows(row_list, field_names, schema=schema)
        return cls.from_table(table, num_partitions=num_partitions)

    @classmethod
    def empty(cls, schema: pa.Schema) -> "PartitionedDataset":
        return cls([schema.empty_table()])

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def num_partitions(self) -> int:
        return len(self._partitions)

    @property
    def schema(self) -> pa.Schema:
        return self._schema

    @property
    def field_names(self) -> List[str]:
        return list(self._schema.names)

    @property
    def num_rows(self) -> int:
        return sum(table.num_rows for table in self._partitions)

    @property
    def partitions(self) -> Tuple[pa.Table, ...]:
        return self._partitions

    def partition(self, index: int) -> pa.Table:
        if not 0 <= index < len(self._partitions):
            raise IndexError(
                f"Partition {index} out of range [0, {len(self._partitions)})"
            )
        return self._partitions[index]

    def partition_sizes(self) -> List[int]:
        return [table.num_rows for table in self._partitions]

    # -------------------------------------------------------------------------
    # Row access
    # -------------------------------------------------------------------------

    def iter_partition_rows(
        self, index: int, batch_size: int = DEFAULT_BATCH_SIZE
    ) -> Iterator[Row]:
        return iter_table_rows(self.partition(index), batch_size=batch_size)

    def iter_rows(self, batch_size: int = DEFAULT_BATCH_SIZE) -> Iterator[Row]:
        """Yield every row, partition by partition."""
        for table in self._partitions:
            yield from iter_table_rows(table, batch_size=batch_size)

    def to_table(self) -> pa.Table:
        return pa.concat_tables(self._partitions)

    def __len__(self) -> int:
        return self.num_rows

    def __repr__(self) -> str:
        return (
            f"PartitionedDataset(partitions={self.num_partitions}, "
            f"rows={self.num_rows}, fields={self.field_names})"
        )

    def __reduce__(self) -> Tuple[Any, ...]:
        return (PartitionedDataset, (list(self._partitions),))
