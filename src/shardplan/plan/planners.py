"""
Whole-batch planners.

Each planner here tags the entire arriving dataset with one mutation type and
passes it through untouched: one batch out, every arriving row in it exactly
once, including for an empty dataset.

    planner           batch                   emits
    ---------------   ---------------------   -------------
    OverwritePlanner  (OVERWRITE, arriving)   {OVERWRITE}
    AppendPlanner     (INSERT, arriving)      {INSERT}
    DeletePlanner     (DELETE, arriving)      {DELETE}
"""

import logging
from typing import Any, FrozenSet, List, Mapping

from shardplan.plan.base import BulkPlanner, Mutation
from shardplan.plan.mutation import MutationType
from shardplan.storage.dataset import PartitionedDataset

logger = logging.getLogger(__name__)


class _WholeSetPlanner(BulkPlanner):
    mutation_type: MutationType

    def configure(self, config: Mapping[str, Any]) -> None:
        # Accepted and ignored
        pass

    def plan_mutations_for_set(self, arriving: PartitionedDataset) -> List[Mutation]:
        logger.debug(
            "Planned %d rows as %s", arriving.num_rows, self.mutation_type.value
        )
        return [(self.mutation_type, arriving)]

    def get_emitted_mutation_types(self) -> FrozenSet[MutationType]:
        return frozenset({self.mutation_type})

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class OverwritePlanner(_WholeSetPlanner):
    """Replaces the target's entire contents with the arriving dataset."""

    mutation_type = MutationType.OVERWRITE


class AppendPlanner(_WholeSetPlanner):
    """Inserts every arriving row."""

    mutation_type = MutationType.INSERT


class DeletePlanner(_WholeSetPlanner):
    """Deletes the target rows identified by every arriving row."""

    mutation_type = MutationType.DELETE
