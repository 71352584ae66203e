"""
Tests for config.py and errors.py.

Configuration blocks are opaque mappings handed over by the engine. These
tests pin down the accessors used by the factories:

- dotted-path lookup into nested blocks (a literal dotted key wins)
- mandatory string keys raise the caller-chosen ConfigError subclass
- optional integers reject bools, non-ints and values below a minimum

and the error taxonomy: every error is a ShardplanError, row-level errors
also subclass the matching builtin so generic handlers still catch them.
"""

import pytest

from shardplan.config import get_int, get_path, has_path, require_string
from shardplan.errors import (
    ConfigError,
    PartitionerConfigError,
    PartitionerResolutionError,
    PartitionIndexError,
    PartitionKeyError,
    PlannerConfigError,
    ResolutionError,
    RowComparisonError,
    RowHashError,
    ShardplanError,
    format_error,
)


class TestGetPath:
    def test_top_level_key(self):
        assert get_path({"type": "hash"}, "type") == "hash"

    def test_nested_dotted_path(self):
        config = {"sample": {"per-partition": 40}}
        assert get_path(config, "sample.per-partition") == 40
        assert has_path(config, "sample.per-partition")

    def test_literal_dotted_key_wins(self):
        config = {"a.b": 1, "a": {"b": 2}}
        assert get_path(config, "a.b") == 1

    def test_missing_returns_default(self):
        assert get_path({"a": {}}, "a.b", default="x") == "x"
        assert not has_path({"a": 1}, "a.b")

    def test_none_config(self):
        assert get_path(None, "type") is None
        assert not has_path(None, "type")


class TestRequireString:
    def test_present(self):
        assert require_string({"type": "range"}, "type") == "range"

    def test_missing_raises_chosen_error(self):
        with pytest.raises(PartitionerConfigError, match="type"):
            require_string({}, "type", error_cls=PartitionerConfigError)

    @pytest.mark.parametrize("value", [None, 3, "", "   ", ["hash"]])
    def test_invalid_values(self, value):
        with pytest.raises(PlannerConfigError):
            require_string({"type": value}, "type", error_cls=PlannerConfigError)


class TestGetInt:
    def test_default_when_absent(self):
        assert get_int({}, "partitions", 4) == 4

    def test_value(self):
        assert get_int({"partitions": 8}, "partitions", 4, minimum=1) == 8

    @pytest.mark.parametrize("value", [True, "8", 2.5])
    def test_rejects_non_int(self, value):
        with pytest.raises(ConfigError):
            get_int({"partitions": value}, "partitions", 4)

    def test_minimum(self):
        with pytest.raises(ConfigError, match=">= 1"):
            get_int({"partitions": 0}, "partitions", 4, minimum=1)

    def test_explicit_none_is_not_absent(self):
        with pytest.raises(ConfigError, match="integer"):
            get_int({"partitions": None}, "partitions", 4)
        assert get_int({"sample": {"size": 9}}, "sample.size", 4) == 9


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(PartitionerConfigError, ConfigError)
        assert issubclass(PartitionerResolutionError, ResolutionError)
        assert issubclass(ConfigError, ShardplanError)
        assert issubclass(ResolutionError, ShardplanError)

    def test_row_errors_subclass_builtins(self):
        assert issubclass(RowComparisonError, TypeError)
        assert issubclass(RowHashError, TypeError)
        assert issubclass(PartitionKeyError, ValueError)
        assert issubclass(PartitionIndexError, IndexError)

    def test_format_error(self):
        assert format_error(PartitionerConfigError(" no type ")) == (
            "PartitionerConfigError: no type"
        )
        assert format_error(ShardplanError()) == "ShardplanError"
