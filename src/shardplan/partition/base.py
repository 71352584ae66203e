"""
Partitioning strategy interfaces.

LIFECYCLE
---------

    construct  ->  configure (only ConfigurablePartitioner)  ->  frozen

A strategy is built once per job, optionally configured once, and from then
on invoked on every worker for every row. After the configure phase it must
hold no mutable shared state: correctness comes from statelessness, not from
locking.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence

from shardplan.storage.dataset import PartitionedDataset


class Partitioner(ABC):
    """Maps a Row to a partition index in [0, num_partitions)."""

    @property
    @abstractmethod
    def num_partitions(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def get_partition(self, row: Sequence[Any]) -> int:
        raise NotImplementedError

    def __call__(self, row: Sequence[Any]) -> int:
        return self.get_partition(row)


class ConfigurablePartitioner(Partitioner):
    """
    Partitioner with a second construction phase.

    The factory calls `configure()` exactly once, right after construction and
    before any `get_partition()` call, with the partitioner's own config block
    and the dataset being partitioned (e.g. to read its partition count or
    sample it).
    """

    @abstractmethod
    def configure(
        self, config: Mapping[str, Any], dataset: PartitionedDataset
    ) -> None:
        raise NotImplementedError
