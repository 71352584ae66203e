"""Typed error taxonomy for shardplan.

Every error raised by this package derives from `ShardplanError`. None of them
are recoverable inside the policy layer: they propagate to the engine that
invoked the factory, strategy or planner and terminate the current job step.
"""

__all__ = [
    "ShardplanError",
    "ConfigError",
    "PartitionerConfigError",
    "PlannerConfigError",
    "ResolutionError",
    "PartitionerResolutionError",
    "PlannerResolutionError",
    "RegistrationError",
    "PartitionerRegistrationError",
    "PlannerRegistrationError",
    "RowComparisonError",
    "RowHashError",
    "PartitionKeyError",
    "PartitionerStateError",
    "PartitionIndexError",
    "DatasetError",
    "IncompatiblePlannerError",
    "format_error",
]


class ShardplanError(Exception):
    """Base class for all shardplan errors."""


# =============================================================================
# CONFIGURATION
# =============================================================================


class ConfigError(ShardplanError):
    """A mandatory configuration key is missing or has the wrong type."""


class PartitionerConfigError(ConfigError):
    """Partitioner block is missing its `type` or holds an invalid value."""


class PlannerConfigError(ConfigError):
    """Planner block is missing its `type` or holds an invalid value."""


# =============================================================================
# RESOLUTION / REGISTRATION
# =============================================================================


class ResolutionError(ShardplanError):
    """A named implementation could not be located, built or validated."""


class PartitionerResolutionError(ResolutionError):
    pass


class PlannerResolutionError(ResolutionError):
    pass


class RegistrationError(ShardplanError):
    """Invalid plugin registration (duplicate or reserved name)."""


class PartitionerRegistrationError(RegistrationError):
    pass


class PlannerRegistrationError(RegistrationError):
    pass


# =============================================================================
# ROW LEVEL
# =============================================================================


class RowComparisonError(ShardplanError, TypeError):
    """Two rows hold values that cannot be ordered against each other."""


class RowHashError(ShardplanError, TypeError):
    """A row holds a value with no stable hash encoding."""


class PartitionKeyError(ShardplanError, ValueError):
    """A row's partition key cannot be interpreted by the strategy."""


class PartitionerStateError(ShardplanError):
    """Strategy used before its configure phase ran."""


class PartitionIndexError(ShardplanError, IndexError):
    """Strategy returned an index outside [0, num_partitions)."""


# =============================================================================
# DATASETS / PLANNING
# =============================================================================


class DatasetError(ShardplanError):
    """Partition tables are missing or do not share a schema."""


class IncompatiblePlannerError(ShardplanError):
    """Planner may emit mutation types the sink cannot apply."""


def format_error(e: BaseException) -> str:
    """Return a short message like 'PartitionerConfigError: detail'."""
    name = e.__class__.__name__
    msg = str(e).strip()
    return f"{name}: {msg}" if msg else name
