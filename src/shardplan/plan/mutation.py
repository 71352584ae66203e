"""Mutation types: the semantic effect a planned batch has on the target store."""

from enum import Enum


class MutationType(str, Enum):
    """
    Tag attached to each planned batch.

    NONE       rows need no change
    INSERT     rows are new
    UPDATE     rows replace existing rows with the same key
    DELETE     rows identify existing rows to remove
    UPSERT     insert or update, whichever applies per key
    OVERWRITE  rows replace the entire target
    """

    NONE = "none"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    UPSERT = "upsert"
    OVERWRITE = "overwrite"
