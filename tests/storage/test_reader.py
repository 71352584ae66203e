"""
Tests for reader.py - Parquet part files <-> PartitionedDataset.

write_partitions() emits part_{index:04}.parquet per partition, empty ones
included; ParquetReader reads them back in partition order.
"""

import pyarrow as pa
import pytest

from shardplan.errors import DatasetError
from shardplan.storage.dataset import PartitionedDataset
from shardplan.storage.reader import ParquetReader, write_partitions


@pytest.fixture
def dataset():
    tables = [
        pa.table({"id": [1, 2, 3], "name": ["a", "b", "c"]}),
        pa.table({"id": pa.array([], pa.int64()), "name": pa.array([], pa.string())}),
        pa.table({"id": [4], "name": ["d"]}),
    ]
    return PartitionedDataset.from_tables(tables)


class TestWritePartitions:
    def test_one_file_per_partition(self, dataset, tmp_path):
        paths = write_partitions(dataset, tmp_path / "out")
        assert [p.name for p in paths] == [
            "part_0000.parquet",
            "part_0001.parquet",
            "part_0002.parquet",
        ]
        assert all(p.exists() for p in paths)


class TestParquetReader:
    def test_reads_partitions_in_order(self, dataset, tmp_path):
        write_partitions(dataset, tmp_path)
        loaded = ParquetReader(tmp_path).to_dataset()

        assert loaded.partition_sizes() == [3, 0, 1]
        assert list(loaded.iter_rows()) == [(1, "a"), (2, "b"), (3, "c"), (4, "d")]

    def test_iter_rows_streams_batches(self, dataset, tmp_path):
        write_partitions(dataset, tmp_path)
        rows = list(ParquetReader(tmp_path).iter_rows(batch_size=2))
        assert rows == [(1, "a"), (2, "b"), (3, "c"), (4, "d")]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ParquetReader(tmp_path / "nope")

    def test_empty_directory_needs_schema(self, tmp_path):
        reader = ParquetReader(tmp_path)
        assert reader.parquet_files == []
        with pytest.raises(DatasetError):
            reader.to_dataset()

        schema = pa.schema([("id", pa.int64())])
        ds = reader.to_dataset(schema=schema)
        assert ds.num_partitions == 1
        assert ds.num_rows == 0

    def test_iter_rows_follows_file_schema_order(self, tmp_path):
        table = pa.table(
            {"name": ["a", "b"], "id": [1, 2], "meta": [{"k": "x"}, None]}
        )
        write_partitions(PartitionedDataset.from_table(table, 1), tmp_path)

        rows = list(ParquetReader(tmp_path).iter_rows())
        assert rows == [("a", 1, {"k": "x"}), ("b", 2, None)]
