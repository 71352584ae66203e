"""
In-process repartitioning of a PartitionedDataset.

================================================================================
ARCHITECTURE - ASSIGN, THEN GATHER
================================================================================

The distributed engine normally ships rows between machines. Locally the same
two phases run over Arrow tables:

PHASE 1: Assign (parallel, one task per input partition)
────────────────────────────────────────────────────────────────────────────────
    input partition 0 ──> [2, 0, 3, 3, 1, ...]
    input partition 1 ──> [0, 0, 1, 2, 3, ...]      ThreadPoolExecutor
    input partition 2 ──> [1, 3, 2, 0, 0, ...]

    Each task calls partitioner.get_partition(row) for the rows of its own
    partition only. The partitioner is frozen and shared read-only.

PHASE 2: Gather
────────────────────────────────────────────────────────────────────────────────
    For every destination d, take() the matching row positions out of each
    input table and concatenate:

        dest d = concat(input_0.take(pos_0d), input_1.take(pos_1d), ...)

    Row order inside a destination follows input partition order, then row
    order. Column types come straight from the source tables. Destinations
    that receive nothing become empty tables with the source schema.

EDGE CASES HANDLED:
────────────────────────────────────────────────────────────────────────────────
    - Index outside [0, num_partitions) -> PartitionIndexError, nothing built
    - Empty input dataset -> num_partitions empty destinations
    - Strategy errors (comparison, hashing, bad keys) propagate unchanged

================================================================================
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import pyarrow as pa

from shardplan.errors import PartitionIndexError
from shardplan.partition.base import Partitioner
from shardplan.storage.dataset import PartitionedDataset

logger = logging.getLogger(__name__)


def _assign_one(
    dataset: PartitionedDataset, index: int, partitioner: Partitioner
) -> List[int]:
    num_partitions = partitioner.num_partitions
    assigned = []
    for row in dataset.iter_partition_rows(index):
        target = partitioner.get_partition(row)
        if not 0 <= target < num_partitions:
            raise PartitionIndexError(
                f"{partitioner!r} returned partition {target} for row {row!r}, "
                f"expected [0, {num_partitions})"
            )
        assigned.append(target)
    return assigned


def assign_partitions(
    dataset: PartitionedDataset,
    partitioner: Partitioner,
    max_workers: Optional[int] = None,
) -> List[List[int]]:
    """
    Destination index of every row, grouped by input partition.

    Args:
        dataset: Dataset to route
        partitioner: Frozen strategy
        max_workers: Thread pool size (defaults to the executor's default)

    Returns:
        One list per input partition, aligned with its rows
    """
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [
            pool.submit(_assign_one, dataset, index, partitioner)
            for index in range(dataset.num_partitions)
        ]
        return [future.result() for future in futures]


def repartition(
    dataset: PartitionedDataset,
    partitioner: Partitioner,
    max_workers: Optional[int] = None,
) -> PartitionedDataset:
    """
    New dataset with `partitioner.num_partitions` partitions.

    Example:
        >>> strategy = create_partitioner({"type": "hash"}, ds)
        >>> out = repartition(ds, strategy)
        >>> out.num_rows == ds.num_rows
        True
    """
    num_partitions = partitioner.num_partitions
    assignments = assign_partitions(dataset, partitioner, max_workers=max_workers)

    pieces: List[List[pa.Table]] = [[] for _ in range(num_partitions)]
    for source, targets in zip(dataset.partitions, assignments):
        positions: List[List[int]] = [[] for _ in range(num_partitions)]
        for position, target in enumerate(targets):
            positions[target].append(position)
        for target, rows in enumerate(positions):
            if rows:
                pieces[target].append(source.take(pa.array(rows, type=pa.int64())))

    tables = [
        pa.concat_tables(parts) if parts else dataset.schema.empty_table()
        for parts in pieces
    ]
    logger.debug(
        "Repartitioned %d rows: %d -> %d partitions, sizes=%s",
        dataset.num_rows,
        dataset.num_partitions,
        num_partitions,
        [table.num_rows for table in tables],
    )
    return PartitionedDataset.from_tables(tables)
