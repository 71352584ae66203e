"""
Tests for range.py - sampling-based RangePartitioner.

ORDER PRESERVATION
==================

The key property: for rows a, b with compare(a, b) < 0, the index assigned to
a is <= the index assigned to b. Reading partitions in index order then gives
globally ordered data.

TEST ORGANIZATION
=================

1. determine_bounds() on hand-built candidates (weights, duplicates)
2. reservoir_sample() determinism and bounds, sketch() per input partition
3. RangePartitioner
   - order preservation on single and composite keys
   - balance on uniform data
   - skewed input partitions (re-sampling path)
   - low-cardinality keys (fewer partitions than requested)
   - degenerate inputs (P = 1, empty dataset)
   - descending order
   - determinism and pickling
"""

import math
import pickle
from collections import Counter

import pyarrow as pa
import pytest

from shardplan.errors import RowComparisonError
from shardplan.partition.range import (
    RangePartitioner,
    determine_bounds,
    reservoir_sample,
    sketch,
)
from shardplan.schema.comparator import RowComparator, compare_rows
from shardplan.storage.dataset import PartitionedDataset, table_from_rows


def assert_order_preserving(partitioner, rows):
    ordered = sorted(rows, key=RowComparator().key)
    indices = [partitioner.get_partition(row) for row in ordered]
    assert indices == sorted(indices)


class TestDetermineBounds:
    def test_equal_weights(self):
        candidates = [((c,), 1.0) for c in "aabcccdefghi"]
        bounds = determine_bounds(candidates, 3, compare_rows)
        assert bounds == [("c",), ("e",)]

    def test_skips_duplicate_bounds(self):
        candidates = [(("x",), 1.0)] * 10 + [(("y",), 1.0)]
        bounds = determine_bounds(candidates, 4, compare_rows)
        assert bounds == [("x",), ("y",)]

    def test_weights_shift_bounds(self):
        # "a" stands for most of the data
        candidates = [(("a",), 10.0), (("b",), 1.0), (("c",), 1.0)]
        bounds = determine_bounds(candidates, 2, compare_rows)
        assert bounds == [("a",)]

    def test_unsorted_input(self):
        candidates = [((n,), 1.0) for n in [5, 1, 4, 2, 3, 6]]
        assert determine_bounds(candidates, 3, compare_rows) == [(2,), (4,)]


class TestReservoirSample:
    def test_small_stream_kept_whole(self):
        rows = [(i,) for i in range(5)]
        sample, seen = reservoir_sample(iter(rows), 10, seed=1)
        assert sample == rows
        assert seen == 5

    def test_capped_and_deterministic(self):
        rows = [(i,) for i in range(1000)]
        first, seen = reservoir_sample(iter(rows), 20, seed=7)
        second, _ = reservoir_sample(iter(rows), 20, seed=7)
        assert seen == 1000
        assert len(first) == 20
        assert first == second
        assert set(first) <= set(rows)


class TestSketch:
    def test_index_size_sample_per_partition(self):
        tables = [
            table_from_rows([(i,) for i in range(n)], ["id"]) for n in (3, 1, 12)
        ]
        ds = PartitionedDataset.from_tables(tables)
        sketches = sketch(ds, 5, seed=11)

        assert [(index, size) for index, size, _ in sketches] == [(0, 3), (1, 1), (2, 12)]
        for index, size, sample in sketches:
            assert len(sample) == min(size, 5)
            assert set(sample) <= set(ds.iter_partition_rows(index))

    def test_deterministic(self):
        ds = PartitionedDataset.from_rows([(i,) for i in range(100)], ["id"], num_partitions=2)
        assert sketch(ds, 10, seed=3) == sketch(ds, 10, seed=3)


class TestRangePartitioner:
    def test_order_preserving_single_key(self):
        rows = [(i,) for i in range(1000)]
        ds = PartitionedDataset.from_rows(rows, ["id"], num_partitions=4)
        partitioner = RangePartitioner(4, ds)

        assert partitioner.num_partitions == 4
        assert_order_preserving(partitioner, rows)

    def test_order_preserving_composite_key(self):
        rows = [(i % 10, f"k{i:04d}", i * 0.5) for i in range(500)]
        ds = PartitionedDataset.from_rows(rows, ["a", "b", "c"], num_partitions=3)
        partitioner = RangePartitioner(5, ds)

        assert_order_preserving(partitioner, rows)
        # Unseen rows fall in place too
        assert partitioner.get_partition((-1, "", 0.0)) == 0
        assert partitioner.get_partition((99, "", 0.0)) == partitioner.num_partitions - 1

    def test_roughly_balanced(self):
        rows = [(i,) for i in range(4000)]
        ds = PartitionedDataset.from_rows(rows, ["id"], num_partitions=8)
        partitioner = RangePartitioner(4, ds)

        counts = Counter(partitioner.get_partition(row) for row in rows)
        assert sorted(counts) == [0, 1, 2, 3]
        assert all(500 <= count <= 1500 for count in counts.values())

    def test_skewed_input_partitions(self):
        small = [table_from_rows([(i,) for i in range(n, n + 5)], ["id"]) for n in (0, 5, 10)]
        big = table_from_rows([(i,) for i in range(15, 10015)], ["id"])
        ds = PartitionedDataset.from_tables(small + [big])
        partitioner = RangePartitioner(4, ds)

        assert 2 <= partitioner.num_partitions <= 4
        assert_order_preserving(partitioner, list(ds.iter_rows()))
        # The big partition dominates, so it must be split
        big_indices = {partitioner.get_partition((i,)) for i in range(15, 10015)}
        assert len(big_indices) >= 2

    def test_low_cardinality(self):
        rows = [("same",)] * 200
        ds = PartitionedDataset.from_rows(rows, ["k"], num_partitions=4)
        partitioner = RangePartitioner(4, ds)

        assert partitioner.num_partitions <= 2
        assert {partitioner.get_partition(row) for row in rows} == {0}

    def test_single_partition_requested(self):
        ds = PartitionedDataset.from_rows([(i,) for i in range(10)], ["id"], num_partitions=3)
        partitioner = RangePartitioner(1, ds)
        assert partitioner.num_partitions == 1
        assert partitioner.bounds == ()
        assert partitioner.get_partition((5,)) == 0

    def test_empty_dataset(self):
        ds = PartitionedDataset.empty(pa.schema([("id", pa.int64())]))
        partitioner = RangePartitioner(4, ds)
        assert partitioner.num_partitions == 1
        assert partitioner.get_partition((123,)) == 0

    def test_descending(self):
        rows = [(i,) for i in range(400)]
        ds = PartitionedDataset.from_rows(rows, ["id"], num_partitions=2)
        partitioner = RangePartitioner(4, ds, ascending=False)

        indices = [partitioner.get_partition(row) for row in rows]
        assert indices == sorted(indices, reverse=True)
        assert indices[0] == partitioner.num_partitions - 1
        assert indices[-1] == 0

    def test_deterministic_bounds(self):
        rows = [(i * 7919 % 1000,) for i in range(1000)]
        ds = PartitionedDataset.from_rows(rows, ["id"], num_partitions=4)
        assert RangePartitioner(4, ds).bounds == RangePartitioner(4, ds).bounds

    def test_pickle(self):
        rows = [(i,) for i in range(300)]
        ds = PartitionedDataset.from_rows(rows, ["id"], num_partitions=3)
        partitioner = RangePartitioner(3, ds)
        shipped = pickle.loads(pickle.dumps(partitioner))

        assert shipped.bounds == partitioner.bounds
        assert [shipped(r) for r in rows] == [partitioner(r) for r in rows]

    def test_nan_keys_sort_last(self):
        rows = [(math.nan if i % 7 == 0 else float(i),) for i in range(200)]
        ds = PartitionedDataset.from_rows(rows, ["x"], num_partitions=4)
        partitioner = RangePartitioner(4, ds)

        assert partitioner.num_partitions > 1
        assert not any(math.isnan(bound[0]) for bound in partitioner.bounds)
        last = partitioner.num_partitions - 1
        assert {partitioner.get_partition(row) for row in rows if math.isnan(row[0])} == {last}
        assert_order_preserving(partitioner, rows)

    def test_non_comparable_row_fails(self):
        ds = PartitionedDataset.from_rows([(i,) for i in range(100)], ["id"], num_partitions=2)
        partitioner = RangePartitioner(2, ds)
        with pytest.raises(RowComparisonError):
            partitioner.get_partition(("text",))

    def test_invalid_arguments(self):
        ds = PartitionedDataset.from_rows([(1,)], ["id"])
        with pytest.raises(ValueError):
            RangePartitioner(0, ds)
        with pytest.raises(ValueError):
            RangePartitioner(2, ds, sample_size_per_partition=0)
