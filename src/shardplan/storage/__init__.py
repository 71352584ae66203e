"""
Partitioned datasets and Parquet part-file IO.
"""

from shardplan.storage.dataset import (
    PartitionedDataset,
    iter_table_rows,
    split_sizes,
    table_from_rows,
)
from shardplan.storage.reader import ParquetReader, write_partitions

__all__ = [
    # dataset
    "PartitionedDataset",
    "iter_table_rows",
    "split_sizes",
    "table_from_rows",
    # reader
    "ParquetReader",
    "write_partitions",
]
