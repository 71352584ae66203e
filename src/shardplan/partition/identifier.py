"""
Identifier-based partitioning for UUID keys.

The key field of each row holds a UUID. The unsigned 64-bit space of the
UUID's most significant bits is cut into P equal, contiguous ranges and the
row goes to the range its key falls in:

    msb = uuid.int >> 64                  0 <= msb < 2**64
    index = (msb * P) >> 64               0 <= index < P

    P = 4:
    00000000...  3fffffff...  7fffffff...  bfffffff...  ffffffff...
    |---- 0 ----|---- 1 -----|---- 2 -----|---- 3 -----|

Random (version 4) identifiers are uniformly distributed over that space, so
partitions come out balanced without sampling. The same identifier maps to
the same partition on every worker; no per-process state is involved.

The partition count is not known at construction time: the factory builds
the strategy with no arguments, then `configure()` reads it from the dataset
(or from the `partitions` key of the config block).
"""

import logging
import uuid
from typing import Any, Mapping, Optional, Sequence

from shardplan.config import get_int
from shardplan.errors import PartitionerStateError, PartitionKeyError
from shardplan.partition.base import ConfigurablePartitioner
from shardplan.storage.dataset import PartitionedDataset

logger = logging.getLogger(__name__)

PARTITIONS_CONFIG_NAME = "partitions"
FIELD_CONFIG_NAME = "field"


def to_uuid(value: Any) -> uuid.UUID:
    """
    Interpret a key value as a UUID.

    Accepts uuid.UUID instances, canonical/hex strings and 16 raw bytes.

    Raises:
        PartitionKeyError: If the value is not a UUID
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        if isinstance(value, str):
            return uuid.UUID(value)
        if isinstance(value, (bytes, bytearray)):
            return uuid.UUID(bytes=bytes(value))
    except ValueError as exc:
        raise PartitionKeyError(f"Invalid UUID key {value!r}: {exc}") from exc
    raise PartitionKeyError(
        f"UUID key must be a UUID, str or bytes, got {type(value).__name__}"
    )


class UUIDPartitioner(ConfigurablePartitioner):
    """
    Splits the UUID key space into equal contiguous ranges.

    Example:
        >>> p = UUIDPartitioner()
        >>> p.configure({"type": "uuid"}, dataset_with_4_partitions)
        >>> p.get_partition(("00000000-0000-0000-0000-000000000000",))
        0
        >>> p.get_partition(("ffffffff-ffff-ffff-ffff-ffffffffffff",))
        3
    """

    def __init__(self) -> None:
        self._num_partitions: Optional[int] = None
        self._field = 0

    def configure(
        self, config: Mapping[str, Any], dataset: PartitionedDataset
    ) -> None:
        self._num_partitions = get_int(
            config, PARTITIONS_CONFIG_NAME, dataset.num_partitions, minimum=1
        )
        self._field = get_int(config, FIELD_CONFIG_NAME, 0, minimum=0)
        logger.debug(
            "UUID partitioner configured: partitions=%d field=%d",
            self._num_partitions,
            self._field,
        )

    @property
    def num_partitions(self) -> int:
        if self._num_partitions is None:
            raise PartitionerStateError("UUIDPartitioner used before configure()")
        return self._num_partitions

    @property
    def field(self) -> int:
        return self._field

    def get_partition(self, row: Sequence[Any]) -> int:
        num_partitions = self.num_partitions
        try:
            key = row[self._field]
        except IndexError as exc:
            raise PartitionKeyError(
                f"Row of arity {len(row)} has no key field {self._field}"
            ) from exc

        most_significant = to_uuid(key).int >> 64
        return (most_significant * num_partitions) >> 64

    def __repr__(self) -> str:
        return (
            f"UUIDPartitioner(partitions={self._num_partitions}, "
            f"field={self._field})"
        )
