"""
Partitioning strategies and the factory that selects them.

This module maps rows of a partitioned dataset to destination partition
indices, using a strategy chosen at runtime from configuration.
"""

from shardplan.partition.base import ConfigurablePartitioner, Partitioner
from shardplan.partition.factory import TYPE_CONFIG_NAME, create_partitioner
from shardplan.partition.hash import HashPartitioner
from shardplan.partition.identifier import UUIDPartitioner, to_uuid
from shardplan.partition.range import (
    RangePartitioner,
    determine_bounds,
    reservoir_sample,
)
from shardplan.partition.registry import (
    register_partitioner,
    registered_partitioners,
    unregister_partitioner,
)

__all__ = [
    # base - interfaces
    "Partitioner",
    "ConfigurablePartitioner",
    # strategies
    "HashPartitioner",
    "RangePartitioner",
    "UUIDPartitioner",
    # range - helpers
    "determine_bounds",
    "reservoir_sample",
    # identifier - helpers
    "to_uuid",
    # registry
    "register_partitioner",
    "unregister_partitioner",
    "registered_partitioners",
    # factory
    "TYPE_CONFIG_NAME",
    "create_partitioner",
]
