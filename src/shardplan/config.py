"""
Accessors for opaque configuration blocks.

Configuration arrives from the engine as a (possibly nested) mapping; loading
and parsing happen elsewhere. Keys may be addressed with dotted paths:

    {"type": "range", "sample": {"per-partition": 40}}

    get_path(config, "sample.per-partition")  -> 40
    has_path(config, "sample.seed")           -> False
"""

from typing import Any, Mapping, Optional, Type

from shardplan.errors import ConfigError

_MISSING = object()


def _lookup(config: Mapping[str, Any], path: str) -> Any:
    if path in config:
        return config[path]

    node: Any = config
    for part in path.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return _MISSING
        node = node[part]
    return node


def has_path(config: Optional[Mapping[str, Any]], path: str) -> bool:
    if config is None:
        return False
    return _lookup(config, path) is not _MISSING


def get_path(
    config: Optional[Mapping[str, Any]], path: str, default: Any = None
) -> Any:
    """Return the value at a dotted path, or `default` when absent."""
    if config is None:
        return default
    value = _lookup(config, path)
    return default if value is _MISSING else value


def require_string(
    config: Optional[Mapping[str, Any]],
    path: str,
    error_cls: Type[ConfigError] = ConfigError,
) -> str:
    """
    Return a mandatory, non-empty string value.

    Raises:
        error_cls: If the key is absent, not a string, or blank
    """
    if not has_path(config, path):
        raise error_cls(f"Missing mandatory configuration key '{path}'")
    value = get_path(config, path)
    if not isinstance(value, str) or not value.strip():
        raise error_cls(
            f"Configuration key '{path}' must be a non-empty string, "
            f"got {value!r}"
        )
    return value


def get_int(
    config: Optional[Mapping[str, Any]],
    path: str,
    default: int,
    minimum: Optional[int] = None,
) -> int:
    """Return an optional integer value, validated against `minimum`."""
    if not has_path(config, path):
        return default
    value = get_path(config, path)
    # bool is an int subclass but never a valid count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(
            f"Configuration key '{path}' must be an integer, got {value!r}"
        )
    if minimum is not None and value < minimum:
        raise ConfigError(
            f"Configuration key '{path}' must be >= {minimum}, got {value}"
        )
    return value
