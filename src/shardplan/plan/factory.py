"""
Planner selection and sink pre-flight checks.

    config["type"]     planner
    --------------     ----------------
    "overwrite"        OverwritePlanner
    "append"           AppendPlanner
    "delete"           DeletePlanner
    registered name    factory()

The chosen planner's `configure(config)` runs once with the whole block.
Before data flows, `check_sink_compatibility()` compares the planner's
declared mutation types with what the sink can apply.
"""

import logging
import threading
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional

from shardplan.config import require_string
from shardplan.errors import (
    IncompatiblePlannerError,
    PlannerConfigError,
    PlannerRegistrationError,
    PlannerResolutionError,
    format_error,
)
from shardplan.plan.base import BulkPlanner
from shardplan.plan.mutation import MutationType
from shardplan.plan.planners import AppendPlanner, DeletePlanner, OverwritePlanner

logger = logging.getLogger(__name__)

TYPE_CONFIG_NAME = "type"

PlannerFactory = Callable[[], BulkPlanner]

BUILTIN_PLANNERS: Dict[str, PlannerFactory] = {
    "overwrite": OverwritePlanner,
    "append": AppendPlanner,
    "delete": DeletePlanner,
}

_registry: Dict[str, PlannerFactory] = {}
_lock = threading.Lock()


def register_planner(
    name: str, factory: Optional[PlannerFactory] = None, replace: bool = False
):
    """Register a custom planner factory; usable as a class decorator."""

    def _register(target):
        if not isinstance(name, str) or not name.strip():
            raise PlannerRegistrationError(
                f"Planner name must be a non-empty string, got {name!r}"
            )
        if name in BUILTIN_PLANNERS:
            raise PlannerRegistrationError(
                f"Planner name '{name}' is reserved for a built-in planner"
            )
        with _lock:
            if name in _registry and not replace:
                raise PlannerRegistrationError(f"Planner '{name}' is already registered")
            _registry[name] = target
        return target

    if factory is None:
        return _register
    return _register(factory)


def unregister_planner(name: str) -> None:
    with _lock:
        _registry.pop(name, None)


def registered_planners() -> List[str]:
    with _lock:
        return sorted(_registry)


def create_planner(config: Mapping[str, Any]) -> BulkPlanner:
    """
    Build and configure the planner named by `config["type"]`.

    Raises:
        PlannerConfigError: If `type` is missing or not a string
        PlannerResolutionError: If the name is unknown or its factory fails
    """
    planner_type = require_string(config, TYPE_CONFIG_NAME, error_cls=PlannerConfigError)

    factory = BUILTIN_PLANNERS.get(planner_type)
    if factory is None:
        with _lock:
            factory = _registry.get(planner_type)
    if factory is None:
        raise PlannerResolutionError(
            f"Unknown planner type '{planner_type}'. Built-in types: "
            f"{', '.join(sorted(BUILTIN_PLANNERS))}; "
            f"registered: {registered_planners() or 'none'}"
        )

    try:
        planner = factory()
    except Exception as exc:
        raise PlannerResolutionError(
            f"Could not construct planner '{planner_type}': {format_error(exc)}"
        ) from exc
    if not isinstance(planner, BulkPlanner):
        raise PlannerResolutionError(
            f"Factory for '{planner_type}' returned {type(planner).__name__}, "
            "which is not a BulkPlanner"
        )

    planner.configure(config)
    logger.info(
        "Created %s planner emitting %s",
        planner_type,
        sorted(t.value for t in planner.get_emitted_mutation_types()),
    )
    return planner


def check_sink_compatibility(
    planner: BulkPlanner, supported: Iterable[MutationType]
) -> FrozenSet[MutationType]:
    """
    Fail before any data flows if the sink cannot apply the planner's output.

    Returns:
        The planner's declared mutation types

    Raises:
        IncompatiblePlannerError: Naming the unsupported types
    """
    emitted = planner.get_emitted_mutation_types()
    unsupported = emitted - frozenset(supported)
    if unsupported:
        raise IncompatiblePlannerError(
            f"{type(planner).__name__} may emit "
            f"{sorted(t.value for t in unsupported)}, which the sink does not support"
        )
    return emitted
