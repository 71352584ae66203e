"""
Name-based registry of custom partitioning strategies.

Custom strategies are plugged in by name instead of by importable type name:

    @register_partitioner("by-region")
    class RegionPartitioner(ConfigurablePartitioner):
        ...

    create_partitioner({"type": "by-region", "regions": [...]}, dataset)

A registered factory is any zero-argument callable returning a Partitioner
(usually the class itself). Registration happens at import time of the
plugin module, once per process, before the factory is asked for the name.
The built-in names are reserved.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional, TypeVar

from shardplan.errors import PartitionerRegistrationError
from shardplan.partition.base import Partitioner

logger = logging.getLogger(__name__)

PartitionerFactory = Callable[[], Partitioner]

F = TypeVar("F", bound=PartitionerFactory)

RESERVED_NAMES = frozenset({"hash", "range", "uuid"})

_registry: Dict[str, PartitionerFactory] = {}
_lock = threading.Lock()


def register_partitioner(
    name: str,
    factory: Optional[PartitionerFactory] = None,
    replace: bool = False,
):
    """
    Register a custom partitioner factory under `name`.

    Usable directly or as a class decorator:

        register_partitioner("modulo", ModuloPartitioner)

        @register_partitioner("modulo")
        class ModuloPartitioner(Partitioner): ...

    Raises:
        PartitionerRegistrationError: If the name is reserved, blank, or
            already registered and `replace` is False
    """

    def _register(target: F) -> F:
        if not isinstance(name, str) or not name.strip():
            raise PartitionerRegistrationError(
                f"Partitioner name must be a non-empty string, got {name!r}"
            )
        if name in RESERVED_NAMES:
            raise PartitionerRegistrationError(
                f"Partitioner name '{name}' is reserved for a built-in strategy"
            )
        if not callable(target):
            raise PartitionerRegistrationError(
                f"Partitioner factory for '{name}' is not callable"
            )
        with _lock:
            if name in _registry and not replace:
                raise PartitionerRegistrationError(
                    f"Partitioner '{name}' is already registered"
                )
            _registry[name] = target
        logger.debug("Registered partitioner '%s' -> %r", name, target)
        return target

    if factory is None:
        return _register
    return _register(factory)


def unregister_partitioner(name: str) -> None:
    with _lock:
        _registry.pop(name, None)


def lookup_partitioner(name: str) -> Optional[PartitionerFactory]:
    with _lock:
        return _registry.get(name)


def registered_partitioners() -> List[str]:
    with _lock:
        return sorted(_registry)
