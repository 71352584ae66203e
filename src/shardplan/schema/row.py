"""
Row values and process-independent row hashing.

A Row is a plain tuple of field values. Field positions carry the meaning;
names live on the dataset schema, not on the Row.

WHY NOT hash(row)?
------------------

Python salts `hash()` of str and bytes per interpreter process
(PYTHONHASHSEED). Two workers hashing the same Row would route it to different
partitions. `stable_row_hash()` instead digests a canonical, type-tagged byte
encoding of each field, so every worker computes the same value:

    field       tag   payload
    ---------   ---   ------------------------------------------
    None        N     (empty)
    bool        B     b"\\x01" / b"\\x00"
    int         I     decimal digits
    float       F     IEEE-754 big-endian double (-0.0 folded to 0.0)
    str         S     UTF-8
    bytes       Y     raw bytes
    datetime    T     ISO-8601, aware values converted to UTC first
    date        D     ISO-8601
    time        H     ISO-8601
    timedelta   P     days, seconds, microseconds (3 big-endian ints)
    Decimal     M     normalized string
    UUID        U     16 raw bytes
    tuple/list  L     nested encoding
    mapping     K     nested key, value encodings in iteration order

Each field is written as tag + 4-byte length + payload so that adjacent fields
can never run into each other ("ab", "c") vs ("a", "bc").
"""

import datetime as dt
import hashlib
import math
import struct
import uuid
from decimal import Decimal
from typing import Any, Mapping, Sequence, Tuple

from shardplan.constants import ROW_HASH_DIGEST_SIZE
from shardplan.errors import RowHashError

Row = Tuple[Any, ...]

_NAN = struct.pack(">d", math.nan)


def row_from_mapping(record: Mapping[str, Any], field_names: Sequence[str]) -> Row:
    """
    Build a Row from a record dict in schema order.

    Missing fields become None.

    Example:
        >>> row_from_mapping({"b": 2, "a": 1}, ["a", "b"])
        (1, 2)
    """
    return tuple(record.get(name) for name in field_names)


def _encode_value(value: Any) -> bytes:
    # bool before int, datetime before date: both are subclasses
    if value is None:
        tag, payload = b"N", b""
    elif isinstance(value, bool):
        tag, payload = b"B", b"\x01" if value else b"\x00"
    elif isinstance(value, int):
        tag, payload = b"I", str(value).encode("ascii")
    elif isinstance(value, float):
        if math.isnan(value):
            payload = _NAN
        else:
            payload = struct.pack(">d", value + 0.0)
        tag = b"F"
    elif isinstance(value, str):
        tag, payload = b"S", value.encode("utf-8")
    elif isinstance(value, (bytes, bytearray, memoryview)):
        tag, payload = b"Y", bytes(value)
    elif isinstance(value, dt.datetime):
        if value.utcoffset() is not None:
            value = value.astimezone(dt.timezone.utc)
        tag, payload = b"T", value.isoformat().encode("ascii")
    elif isinstance(value, dt.date):
        tag, payload = b"D", value.isoformat().encode("ascii")
    elif isinstance(value, dt.time):
        tag, payload = b"H", value.isoformat().encode("ascii")
    elif isinstance(value, dt.timedelta):
        tag = b"P"
        payload = struct.pack(">qii", value.days, value.seconds, value.microseconds)
    elif isinstance(value, Decimal):
        tag, payload = b"M", str(value.normalize()).encode("ascii")
    elif isinstance(value, uuid.UUID):
        tag, payload = b"U", value.bytes
    elif isinstance(value, (tuple, list)):
        tag, payload = b"L", encode_row(value)
    elif isinstance(value, Mapping):
        # Struct fields keep schema order, so iteration order is part of the key
        tag = b"K"
        payload = b"".join(
            _encode_value(key) + _encode_value(item) for key, item in value.items()
        )
    else:
        raise RowHashError(
            f"No stable hash encoding for value of type {type(value).__name__}"
        )
    return tag + struct.pack(">I", len(payload)) + payload


def encode_row(row: Sequence[Any]) -> bytes:
    """Canonical byte encoding of a Row (see module docstring)."""
    return b"".join(_encode_value(value) for value in row)


def stable_row_hash(row: Sequence[Any]) -> int:
    """
    Non-negative 64-bit hash of a Row, identical in every process.

    Raises:
        RowHashError: If a field holds a value with no canonical encoding
    """
    digest = hashlib.blake2b(
        encode_row(row), digest_size=ROW_HASH_DIGEST_SIZE
    ).digest()
    return int.from_bytes(digest, byteorder="big", signed=False)
