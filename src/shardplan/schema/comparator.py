"""
Composite-key ordering of Rows.

Range partitioning needs a total order over Rows. Rows are compared field by
field from position 0 upward; the first position whose values differ decides
the result using the values' natural order:

    (1, "b", 9)  vs  (1, "c", 0)
     =    <           -> -1   (position 1 decides, position 2 never read)

    (1, "b")     vs  (1, "b")
     =    =           ->  0

Values at the same position must be mutually orderable. Anything else (None
against an int, str against int, rows of different arity) is a caller error
and raises RowComparisonError instead of being treated as equal.

Floats follow IEEE-754 totalOrder rather than `<`, which would make NaN
"equal" to every number and break transitivity:

    -inf < -1.0 < -0.0 < 0.0 < 1.0 < inf < nan,    nan == nan
"""

import functools
import math
from numbers import Real
from typing import Any, Callable, Sequence

from shardplan.errors import RowComparisonError


def _is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


def _compare_values(left: Any, right: Any, position: int) -> int:
    # NaN equals NaN and sorts above every other number; -0.0 sorts below 0.0
    left_nan, right_nan = _is_nan(left), _is_nan(right)
    if (left_nan or right_nan) and isinstance(left, Real) and isinstance(right, Real):
        return int(left_nan) - int(right_nan)
    if isinstance(left, float) and isinstance(right, float) and left == right == 0.0:
        left, right = math.copysign(1.0, left), math.copysign(1.0, right)
    try:
        if left < right:
            return -1
        if right < left:
            return 1
    except TypeError as exc:
        raise RowComparisonError(
            f"Field {position} values are not comparable: "
            f"{type(left).__name__} vs {type(right).__name__}"
        ) from exc
    return 0


def compare_rows(a: Sequence[Any], b: Sequence[Any]) -> int:
    """
    Compare two Rows lexicographically by field position.

    Returns:
        -1, 0 or 1

    Raises:
        RowComparisonError: On arity mismatch or non-comparable field values
    """
    if len(a) != len(b):
        raise RowComparisonError(
            f"Cannot compare rows of different arity ({len(a)} vs {len(b)})"
        )
    for position, (left, right) in enumerate(zip(a, b)):
        comparison = _compare_values(left, right, position)
        if comparison != 0:
            return comparison
    return 0


class RowComparator:
    """
    Stateless, picklable comparator over Rows.

    Example:
        >>> comparator = RowComparator()
        >>> comparator((1, "a"), (1, "b"))
        -1
        >>> sorted([(2,), (1,)], key=comparator.key)
        [(1,), (2,)]
    """

    def __call__(self, a: Sequence[Any], b: Sequence[Any]) -> int:
        return compare_rows(a, b)

    @property
    def key(self) -> Callable[[Sequence[Any]], Any]:
        return functools.cmp_to_key(compare_rows)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RowComparator)

    def __hash__(self) -> int:
        return hash(RowComparator)

    def __repr__(self) -> str:
        return "RowComparator()"
