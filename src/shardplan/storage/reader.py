"""
Parquet part-file reading and writing for partitioned datasets.

This module moves PartitionedDatasets to and from a directory of Parquet part
files, one file per partition.

DATA FLOW
=========

STEP 1: WRITE ONE FILE PER PARTITION
------------------------------------
write_partitions() writes each partition table to its own file:

    out_dir/
        part_0000.parquet
        part_0001.parquet
        part_0002.parquet
        ...

Filename format: part_{index:04}.parquet
- index: destination partition index, so a reader that sorts file names
  reconstructs partitions in index order

Empty partitions are still written (zero-row files carrying the schema) so the
partition count survives the round trip.


STEP 2: DISCOVER PART FILES
---------------------------
ParquetReader globs *.parquet in the directory and sorts the names. Files
written by other tools are accepted as long as they share one schema.


STEP 3: READ
------------
- iter_rows(): stream rows in record batches, file by file, without holding
  the whole dataset in memory.
- to_dataset(): load each file as one partition of a PartitionedDataset.

"""

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Union

import pyarrow as pa
import pyarrow.parquet as pq

from shardplan.constants import DEFAULT_BATCH_SIZE, PART_FILE_GLOB, PART_FILE_PATTERN
from shardplan.errors import DatasetError
from shardplan.schema.row import Row, row_from_mapping
from shardplan.storage.dataset import PartitionedDataset

logger = logging.getLogger(__name__)


class ParquetReader:
    """
    Reads Parquet part files from a directory.

    Example:
        >>> reader = ParquetReader(cache_dir="out/repartitioned")
        >>>
        >>> # Stream all rows
        >>> for row in reader.iter_rows():
        ...     print(row)
        >>>
        >>> # Or load as a partitioned dataset
        >>> ds = reader.to_dataset()
    """

    def __init__(self, cache_dir: Union[str, Path]):
        """
        Initialize reader for a part-file directory.

        Args:
            cache_dir: Directory containing parquet files
        """
        self.cache_dir = Path(cache_dir)

        if not self.cache_dir.exists():
            raise FileNotFoundError(f"Cache directory not found: {cache_dir}")

        # May be empty if nothing was written
        self.parquet_files = sorted(self.cache_dir.glob(PART_FILE_GLOB))

    def iter_rows(self, batch_size: int = DEFAULT_BATCH_SIZE) -> Iterator[Row]:
        """
        Stream rows from all parquet files.

        Args:
            batch_size: Number of rows to read per batch

        Yields:
            Row tuples in schema field order
        """
        for parquet_file in self.parquet_files:
            parquet_file_obj = pq.ParquetFile(parquet_file)

            field_names = parquet_file_obj.schema_arrow.names

            for batch in parquet_file_obj.iter_batches(batch_size=batch_size):
                for record in batch.to_pylist():
                    yield row_from_mapping(record, field_names)

    def to_dataset(self, schema: Optional[pa.Schema] = None) -> PartitionedDataset:
        """
        Load every part file as one partition.

        Args:
            schema: Schema for an empty directory; ignored when files exist

        Raises:
            DatasetError: If the directory holds no files and no schema is
                given, or if part files disagree on schema
        """
        if not self.parquet_files:
            if schema is None:
                raise DatasetError(
                    f"No parquet files in {self.cache_dir} and no schema given"
                )
            return PartitionedDataset.empty(schema)

        tables: List[pa.Table] = [pq.read_table(path) for path in self.parquet_files]
        logger.debug(
            "Loaded %d partitions from %s", len(tables), self.cache_dir
        )
        return PartitionedDataset.from_tables(tables)


def write_partitions(
    dataset: PartitionedDataset, out_dir: Union[str, Path]
) -> List[Path]:
    """
    Write one Parquet file per partition.

    Args:
        dataset: Dataset to write
        out_dir: Target directory (created if missing)

    Returns:
        Paths written, in partition order
    """
    out_path = Path(out_dir)
    out_path.mkdir(parents=True, exist_ok=True)

    written = []
    for index, table in enumerate(dataset.partitions):
        path = out_path / PART_FILE_PATTERN.format(index=index)
        pq.write_table(table, path)
        written.append(path)

    logger.info("Wrote %d partitions to %s", len(written), out_path)
    return written
