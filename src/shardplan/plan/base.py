"""
Bulk planner contract.

A bulk planner classifies one arriving dataset into an ordered list of
(MutationType, dataset) batches that a sink applies in order:

    arriving ──> planner.plan_mutations_for_set() ──> [(OVERWRITE, ds)]
                                                      [(INSERT, ds1), (UPDATE, ds2)]

`get_emitted_mutation_types()` is a static declaration made before any data
flows, so a sink can reject a planner it cannot serve. Every type a planner
ever returns from `plan_mutations_for_set()` must be in that declaration.
"""

from abc import ABC, abstractmethod
from typing import Any, FrozenSet, List, Mapping, Tuple

from shardplan.plan.mutation import MutationType
from shardplan.storage.dataset import PartitionedDataset

Mutation = Tuple[MutationType, PartitionedDataset]


class BulkPlanner(ABC):
    """Configured once, then stateless across planning calls."""

    @abstractmethod
    def configure(self, config: Mapping[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def plan_mutations_for_set(self, arriving: PartitionedDataset) -> List[Mutation]:
        raise NotImplementedError

    @abstractmethod
    def get_emitted_mutation_types(self) -> FrozenSet[MutationType]:
        raise NotImplementedError
