"""
Sampling-based range partitioning over the composite-key Row order.

================================================================================
ALGORITHM - SAMPLE, WEIGHT, CUT
================================================================================

Range partitioning assigns rows to partitions by where they fall among
P - 1 boundary rows. Reading partitions 0..P-1 in order, each sorted, yields a
globally sorted dataset. Boundaries are estimated once, at construction, from
a sample of the dataset being partitioned.

STEP 1: SKETCH EVERY INPUT PARTITION
--------------------------------------------------------------------------------
    sample_size   = min(sample_size_per_partition * P, MAX_SAMPLE_SIZE)
    per_partition = ceil(3.0 * sample_size / input_partitions)

Each input partition is reservoir-sampled down to `per_partition` rows with
a seed derived from (job seed, partition index), so every run over the same
data picks the same sample.

STEP 2: WEIGHT CANDIDATES
--------------------------------------------------------------------------------
    fraction = min(sample_size / total_rows, 1.0)

A sampled row stands for size / sample_count rows of its partition. A
partition so large that `fraction * size > per_partition` is under-represented
by its reservoir; it is re-sampled with Bernoulli sampling at `fraction` and
each of those rows weighs 1 / fraction.

STEP 3: CUT AT EQUAL CUMULATIVE WEIGHT
--------------------------------------------------------------------------------
Sort candidates by the comparator and walk them accumulating weight. Every
time the running weight crosses the next multiple of total_weight / P, the
current candidate becomes a bound, unless it equals the previous bound.

    candidates (sorted, weight 1.0 each):  a a b c c c d e f g h i
    P = 3, step = 4.0
    bounds:                                      c       e
    partition 0: a a b c c c    1: d e    2: f g h i

Duplicate skipping means low-cardinality keys can produce fewer than P - 1
bounds; num_partitions is always len(bounds) + 1.

LOOKUP
--------------------------------------------------------------------------------
get_partition(row) = index of the first bound >= row (binary search), so a
row equal to a bound lands in that bound's partition. With ascending=False
the index is mirrored.

================================================================================
"""

import functools
import logging
import math
import random
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from shardplan.constants import (
    DEFAULT_RANGE_SEED,
    DEFAULT_SAMPLE_SIZE_PER_PARTITION,
    MAX_SAMPLE_SIZE,
    SAMPLE_OVERSAMPLING_FACTOR,
)
from shardplan.partition.base import Partitioner
from shardplan.schema.comparator import RowComparator
from shardplan.schema.row import Row
from shardplan.storage.dataset import PartitionedDataset

logger = logging.getLogger(__name__)

Comparator = Callable[[Sequence[Any], Sequence[Any]], int]

# (row, weight) pairs fed to determine_bounds()
WeightedCandidate = Tuple[Row, float]


def _partition_seed(seed: int, index: int) -> int:
    return seed * 1_000_003 + index


def reservoir_sample(
    rows: Iterable[Row], k: int, seed: int
) -> Tuple[List[Row], int]:
    """
    Uniform sample of at most k rows from a stream of unknown length.

    Returns:
        (sample, number of rows seen)
    """
    rng = random.Random(seed)
    reservoir: List[Row] = []
    seen = 0
    for row in rows:
        if seen < k:
            reservoir.append(row)
        else:
            slot = rng.randint(0, seen)
            if slot < k:
                reservoir[slot] = row
        seen += 1
    return reservoir, seen


def sketch(
    dataset: PartitionedDataset, sample_size_per_partition: int, seed: int
) -> List[Tuple[int, int, List[Row]]]:
    """Reservoir sample of each input partition as (index, size, sample)."""
    sketches: List[Tuple[int, int, List[Row]]] = []
    for index in range(dataset.num_partitions):
        sample, size = reservoir_sample(
            dataset.iter_partition_rows(index),
            sample_size_per_partition,
            _partition_seed(seed, index),
        )
        sketches.append((index, size, sample))
    return sketches


def determine_bounds(
    candidates: Sequence[WeightedCandidate],
    partitions: int,
    comparator: Comparator,
) -> List[Row]:
    """
    Pick up to `partitions - 1` strictly increasing bounds from weighted
    candidates (see STEP 3 in the module docstring).
    """
    row_key = functools.cmp_to_key(comparator)
    ordered = sorted(candidates, key=lambda candidate: row_key(candidate[0]))
    total_weight = sum(weight for _, weight in ordered)
    step = total_weight / partitions
    cumulative = 0.0
    target = step
    bounds: List[Row] = []
    previous: Optional[Row] = None

    for row, weight in ordered:
        if len(bounds) >= partitions - 1:
            break
        cumulative += weight
        if cumulative >= target:
            if previous is None or comparator(row, previous) > 0:
                bounds.append(row)
                target += step
                previous = row
    return bounds


class RangePartitioner(Partitioner):
    """
    Order-preserving partitioner with sampled boundaries.

    Example:
        >>> ds = PartitionedDataset.from_rows(
        ...     [(i,) for i in range(100)], ["id"], num_partitions=4
        ... )
        >>> p = RangePartitioner(4, ds)
        >>> p.get_partition((0,)) <= p.get_partition((50,)) <= p.get_partition((99,))
        True
    """

    def __init__(
        self,
        num_partitions: int,
        dataset: PartitionedDataset,
        comparator: Optional[Comparator] = None,
        ascending: bool = True,
        sample_size_per_partition: int = DEFAULT_SAMPLE_SIZE_PER_PARTITION,
        seed: int = DEFAULT_RANGE_SEED,
    ):
        """
        Estimate boundaries from `dataset`.

        Args:
            num_partitions: Requested number of output partitions
            dataset: Dataset to sample
            comparator: Total order over rows (defaults to RowComparator)
            ascending: Lower keys go to lower indices when True
            sample_size_per_partition: Target sample rows per output partition
            seed: Base seed for deterministic sampling
        """
        if num_partitions < 1:
            raise ValueError(f"num_partitions must be >= 1, got {num_partitions}")
        if sample_size_per_partition < 1:
            raise ValueError(
                "sample_size_per_partition must be >= 1, "
                f"got {sample_size_per_partition}"
            )

        self._comparator: Comparator = comparator or RowComparator()
        self._ascending = ascending

        if num_partitions <= 1 or dataset.num_rows == 0:
            self._bounds: Tuple[Row, ...] = ()
        else:
            self._bounds = tuple(
                self._sample_bounds(
                    num_partitions, dataset, sample_size_per_partition, seed
                )
            )

        logger.debug(
            "Range partitioner: requested=%d actual=%d ascending=%s",
            num_partitions,
            len(self._bounds) + 1,
            ascending,
        )

    def _sample_bounds(
        self,
        num_partitions: int,
        dataset: PartitionedDataset,
        sample_size_per_partition: int,
        seed: int,
    ) -> List[Row]:
        sample_size = min(sample_size_per_partition * num_partitions, MAX_SAMPLE_SIZE)
        per_partition = math.ceil(
            SAMPLE_OVERSAMPLING_FACTOR * sample_size / dataset.num_partitions
        )

        sketches = sketch(dataset, per_partition, seed)
        num_items = sum(size for _, size, _ in sketches)
        fraction = min(sample_size / max(num_items, 1), 1.0)

        candidates: List[WeightedCandidate] = []
        imbalanced: List[int] = []
        for index, size, sample in sketches:
            if fraction * size > per_partition:
                imbalanced.append(index)
            elif sample:
                weight = size / len(sample)
                candidates.extend((row, weight) for row in sample)

        if imbalanced:
            logger.debug(
                "Re-sampling %d imbalanced partitions at fraction %.6f",
                len(imbalanced),
                fraction,
            )
            weight = 1.0 / fraction
            for index in imbalanced:
                rng = random.Random(_partition_seed(seed, index) ^ 0xBE5)
                candidates.extend(
                    (row, weight)
                    for row in dataset.iter_partition_rows(index)
                    if rng.random() < fraction
                )

        if not candidates:
            return []
        return determine_bounds(
            candidates, min(num_partitions, len(candidates)), self._comparator
        )

    @property
    def num_partitions(self) -> int:
        return len(self._bounds) + 1

    @property
    def bounds(self) -> Tuple[Row, ...]:
        return self._bounds

    @property
    def ascending(self) -> bool:
        return self._ascending

    def get_partition(self, row: Sequence[Any]) -> int:
        # First bound >= row
        lo, hi = 0, len(self._bounds)
        while lo < hi:
            mid = (lo + hi) // 2
            if self._comparator(self._bounds[mid], row) < 0:
                lo = mid + 1
            else:
                hi = mid
        return lo if self._ascending else len(self._bounds) - lo

    def __repr__(self) -> str:
        return (
            f"RangePartitioner(partitions={self.num_partitions}, "
            f"ascending={self._ascending})"
        )
