"""
Mutation planning.

Classifies an arriving dataset into typed mutation batches for a sink.
"""

from shardplan.plan.base import BulkPlanner, Mutation
from shardplan.plan.factory import (
    BUILTIN_PLANNERS,
    check_sink_compatibility,
    create_planner,
    register_planner,
    registered_planners,
    unregister_planner,
)
from shardplan.plan.mutation import MutationType
from shardplan.plan.planners import AppendPlanner, DeletePlanner, OverwritePlanner

__all__ = [
    # contract
    "BulkPlanner",
    "Mutation",
    "MutationType",
    # planners
    "OverwritePlanner",
    "AppendPlanner",
    "DeletePlanner",
    # factory
    "BUILTIN_PLANNERS",
    "create_planner",
    "register_planner",
    "unregister_planner",
    "registered_planners",
    "check_sink_compatibility",
]
