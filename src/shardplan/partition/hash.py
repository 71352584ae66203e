"""Hash partitioning: index = stable_row_hash(row) mod num_partitions."""

from typing import Any, Sequence

from shardplan.partition.base import Partitioner
from shardplan.schema.row import stable_row_hash


class HashPartitioner(Partitioner):
    """
    Routes equal rows to the same partition on every worker.

    Example:
        >>> p = HashPartitioner(4)
        >>> p.get_partition(("a", 1)) == p.get_partition(("a", 1))
        True
    """

    def __init__(self, num_partitions: int):
        if num_partitions < 1:
            raise ValueError(f"num_partitions must be >= 1, got {num_partitions}")
        self._num_partitions = num_partitions

    @property
    def num_partitions(self) -> int:
        return self._num_partitions

    def get_partition(self, row: Sequence[Any]) -> int:
        return stable_row_hash(row) % self._num_partitions

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, HashPartitioner)
            and other._num_partitions == self._num_partitions
        )

    def __hash__(self) -> int:
        return hash((HashPartitioner, self._num_partitions))

    def __repr__(self) -> str:
        return f"HashPartitioner({self._num_partitions})"
