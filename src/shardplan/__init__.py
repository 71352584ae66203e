"""
shardplan - partition routing and mutation planning for parallel pipelines.

Decides how rows of a partitioned dataset are redistributed across output
partitions, and classifies arriving datasets into typed mutation batches.
Both are deterministic policies that run identically on every worker.
"""

from shardplan.errors import ShardplanError
from shardplan.execution import assign_partitions, repartition
from shardplan.partition import (
    ConfigurablePartitioner,
    Partitioner,
    create_partitioner,
    register_partitioner,
)
from shardplan.plan import (
    BulkPlanner,
    MutationType,
    OverwritePlanner,
    check_sink_compatibility,
    create_planner,
)
from shardplan.schema import Row, RowComparator, compare_rows
from shardplan.storage import ParquetReader, PartitionedDataset, write_partitions

__version__ = "0.1.0"

__all__ = [
    "ShardplanError",
    # rows
    "Row",
    "RowComparator",
    "compare_rows",
    # datasets
    "PartitionedDataset",
    "ParquetReader",
    "write_partitions",
    # partitioning
    "Partitioner",
    "ConfigurablePartitioner",
    "create_partitioner",
    "register_partitioner",
    "assign_partitions",
    "repartition",
    # planning
    "BulkPlanner",
    "MutationType",
    "OverwritePlanner",
    "create_planner",
    "check_sink_compatibility",
]
