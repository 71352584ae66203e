"""Shared fixtures for shardplan tests."""

import pytest

from shardplan.storage.dataset import PartitionedDataset


@pytest.fixture
def make_dataset():
    """Build a PartitionedDataset from tuples: make_dataset(rows, names, P)."""

    def _make(rows, field_names=("id", "name"), num_partitions=1, schema=None):
        return PartitionedDataset.from_rows(
            rows, list(field_names), num_partitions=num_partitions, schema=schema
        )

    return _make


@pytest.fixture
def thousand_rows():
    return [(i, f"name-{i:04d}") for i in range(1000)]


@pytest.fixture
def four_partition_dataset(make_dataset, thousand_rows):
    return make_dataset(thousand_rows, num_partitions=4)
