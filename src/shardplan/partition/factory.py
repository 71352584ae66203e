"""
Partitioner selection from a configuration block.

================================================================================
RESOLUTION
================================================================================

    config["type"]        strategy
    --------------        ------------------------------------------------
    "hash"                HashPartitioner(dataset.num_partitions)
    "range"               RangePartitioner(dataset.num_partitions, dataset,
                                           RowComparator())
    "uuid"                UUIDPartitioner()            (configurable)
    anything else         registry lookup -> factory()

THEN: if the strategy is a ConfigurablePartitioner, call
      strategy.configure(config, dataset) exactly once.

Hash and range preserve the dataset's current parallelism and read nothing
else from the config. Custom strategies get the whole config block and the
dataset in their configure phase.

FAILURES
--------------------------------------------------------------------------------
- no `type`                      -> PartitionerConfigError, nothing built
- unknown name                   -> PartitionerResolutionError
- factory raises                 -> PartitionerResolutionError (chained)
- factory returns a non-Partitioner -> PartitionerResolutionError

There is no fallback strategy: an unresolvable name fails the job step.

================================================================================
"""

import logging
from typing import Any, Mapping

from shardplan.config import require_string
from shardplan.errors import (
    PartitionerConfigError,
    PartitionerResolutionError,
    format_error,
)
from shardplan.partition.base import ConfigurablePartitioner, Partitioner
from shardplan.partition.hash import HashPartitioner
from shardplan.partition.identifier import UUIDPartitioner
from shardplan.partition.range import RangePartitioner
from shardplan.partition.registry import lookup_partitioner, registered_partitioners
from shardplan.schema.comparator import RowComparator
from shardplan.storage.dataset import PartitionedDataset

logger = logging.getLogger(__name__)

TYPE_CONFIG_NAME = "type"


def _resolve_custom(partitioner_type: str) -> Partitioner:
    factory = lookup_partitioner(partitioner_type)
    if factory is None:
        raise PartitionerResolutionError(
            f"Unknown partitioner type '{partitioner_type}'. Built-in types: "
            f"hash, range, uuid; registered: {registered_partitioners() or 'none'}"
        )

    try:
        partitioner = factory()
    except Exception as exc:
        raise PartitionerResolutionError(
            f"Could not construct partitioner '{partitioner_type}': "
            f"{format_error(exc)}"
        ) from exc

    if not isinstance(partitioner, Partitioner):
        raise PartitionerResolutionError(
            f"Factory for '{partitioner_type}' returned "
            f"{type(partitioner).__name__}, which is not a Partitioner"
        )
    return partitioner


def create_partitioner(
    config: Mapping[str, Any], dataset: PartitionedDataset
) -> Partitioner:
    """
    Build the partitioning strategy named by `config["type"]`.

    Args:
        config: Partitioner configuration block
        dataset: Existing dataset to be repartitioned

    Returns:
        A frozen strategy, safe to share across workers

    Raises:
        PartitionerConfigError: If `type` is missing or not a string
        PartitionerResolutionError: If `type` cannot be resolved to a strategy
    """
    partitioner_type = require_string(
        config, TYPE_CONFIG_NAME, error_cls=PartitionerConfigError
    )

    partitioner: Partitioner
    if partitioner_type == "hash":
        partitioner = HashPartitioner(dataset.num_partitions)
    elif partitioner_type == "range":
        partitioner = RangePartitioner(
            dataset.num_partitions, dataset, RowComparator()
        )
    elif partitioner_type == "uuid":
        partitioner = UUIDPartitioner()
    else:
        partitioner = _resolve_custom(partitioner_type)

    if isinstance(partitioner, ConfigurablePartitioner):
        partitioner.configure(config, dataset)

    logger.info(
        "Created %s partitioner with %d partitions (input partitions: %d)",
        partitioner_type,
        partitioner.num_partitions,
        dataset.num_partitions,
    )
    return partitioner
