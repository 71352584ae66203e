"""
Local execution of partitioning strategies.
"""

from shardplan.execution.repartition import assign_partitions, repartition

__all__ = [
    "assign_partitions",
    "repartition",
]
