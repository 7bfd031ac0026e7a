"""
Boundary-search primitives shared by the selector algorithms.

All searches return positions in the index space of the sequence they are given. Ordered
searches are binary searches; ``np.searchsorted`` is used for numpy arrays and ``bisect`` for any
other sequence, such as the lazily computed cell edges of an irregular lookup.
"""

from __future__ import annotations

import bisect
import numbers
from collections.abc import Sequence
from enum import Enum
from typing import Any

import numpy as np

from lookuparrays.core.lookup import Locus, Order, halve


class Side(Enum):
    """
    Enum for the side of a query range a search resolves.
    """

    LOWER = "lower"
    UPPER = "upper"

    def __repr__(self) -> str:
        return f"{type(self).__name__}.{self.name}"


def _count_before(values: Sequence[Any], v: Any, strict: bool) -> int:
    # number of leading (ascending) elements < v, or <= v when strict
    side = "right" if strict else "left"
    if isinstance(values, np.ndarray):
        return int(np.searchsorted(values, v, side=side))
    if strict:
        return bisect.bisect_right(values, v)
    return bisect.bisect_left(values, v)


def _reversed(values: Sequence[Any]) -> Sequence[Any]:
    if isinstance(values, np.ndarray):
        return values[::-1]
    return _ReversedSequence(values)


class _ReversedSequence(Sequence[Any]):
    def __init__(self, values: Sequence[Any]) -> None:
        self._values = values

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, i: Any) -> Any:
        return self._values[len(self._values) - 1 - i]


def searchsorted_first(
    values: Sequence[Any], v: Any, order: Order = Order.FORWARD, *, strict: bool = False
) -> int:
    """
    The first position, moving in index order, whose value is at least ``v`` (greater than
    ``v`` when ``strict``) for a forward ordered sequence, or at most ``v`` (less than ``v``)
    for a reverse ordered one. Returns ``len(values)`` when there is none.
    """
    n = len(values)
    if order is Order.FORWARD:
        return _count_before(values, v, strict)
    if order is Order.REVERSE:
        # in descending values the qualifying positions form a suffix
        return n - _count_before(_reversed(values), v, not strict)
    raise ValueError("searchsorted_first requires ordered values")


def searchsorted_last(
    values: Sequence[Any], v: Any, order: Order = Order.FORWARD, *, strict: bool = False
) -> int:
    """
    The last position, moving in index order, whose value is at most ``v`` (less than ``v``
    when ``strict``) for a forward ordered sequence, or at least ``v`` (greater than ``v``) for
    a reverse ordered one. Returns ``-1`` when there is none.
    """
    n = len(values)
    if order is Order.FORWARD:
        return _count_before(values, v, not strict) - 1
    if order is Order.REVERSE:
        return n - _count_before(_reversed(values), v, strict) - 1
    raise ValueError("searchsorted_last requires ordered values")


def search(values: Sequence[Any], v: Any, order: Order) -> int:
    """
    The insertion point of ``v``: the position of the smallest value that is at least ``v``.

    This is the first such position for forward ordered values and the last for reverse ordered
    ones. When no value qualifies, ``len(values)`` is returned for forward ordered values and
    ``-1`` for reverse ordered ones. Unordered values are scanned linearly, returning
    ``len(values)`` when no value qualifies.
    """
    if order is Order.FORWARD:
        return searchsorted_first(values, v, order)
    if order is Order.REVERSE:
        return searchsorted_last(values, v, order)
    best = len(values)
    for i, x in enumerate(values):
        if x >= v and (best == len(values) or x < values[best]):
            best = i
    return best


_SIDE_SEARCHES = {
    (Side.LOWER, Order.FORWARD): searchsorted_first,
    (Side.LOWER, Order.REVERSE): searchsorted_last,
    (Side.UPPER, Order.FORWARD): searchsorted_last,
    (Side.UPPER, Order.REVERSE): searchsorted_first,
}


def side_search(
    side: Side, order: Order, values: Sequence[Any], v: Any, *, strict: bool = False
) -> int:
    """
    Resolve one side of a query range against ordered values.

    Whatever the order, ``Side.LOWER`` yields the position of the first candidate (in value
    order) at or above the lower bound ``v`` and ``Side.UPPER`` the position of the last
    candidate at or below the upper bound ``v``. With ``strict``, candidates equal to ``v`` are
    excluded, as for the open endpoint of an interval.

    The result may be one position outside the sequence when no value qualifies.
    """
    if not order.is_ordered:
        raise ValueError("side_search requires ordered values")
    return _SIDE_SEARCHES[side, order](values, v, order, strict=strict)


def locus_adjust(side: Side, locus: Locus, step: Any) -> Any:
    """
    The shift that turns a cell edge search into a search over the published values.

    A cell's lower edge sits ``locus_adjust(Side.LOWER, ...)`` below its value and its upper
    edge ``-locus_adjust(Side.UPPER, ...)`` above it, so searching the values for
    ``v + locus_adjust(side, ...)`` finds the cells whose ``side`` edge is at ``v``.
    """
    width = abs(step)
    zero = width * 0
    if locus is Locus.START:
        return zero if side is Side.LOWER else -width
    if locus is Locus.END:
        return width if side is Side.LOWER else zero
    half = halve(width)
    return half if side is Side.LOWER else -half


def clamp_to_bounds(i: int, n: int) -> int:
    """Clamp position ``i`` to the valid positions ``0 .. n-1``."""
    if i > n - 1:
        return n - 1
    if i < 0:
        return 0
    return i


def is_at(x: Any, y: Any, atol: Any = None, rtol: Any = None) -> bool:
    """
    Whether ``x`` matches ``y``.

    Without tolerances this is plain equality. For numbers the match is approximate:
    ``|x - y| <= max(atol, rtol * max(|x|, |y|))``. For times only ``atol`` applies.
    """
    if atol is None and rtol is None:
        return bool(x == y)
    if _is_number(x) and _is_number(y):
        tol = 0 if atol is None else atol
        if rtol is not None:
            tol = max(tol, rtol * max(abs(x), abs(y)))
        return bool(distance(x, y) <= tol)
    if atol is not None and _is_time(x) and _is_time(y):
        return bool(distance(x, y) <= atol)
    return bool(x == y)


def distance(x: Any, y: Any) -> Any:
    """``|x - y|``, without wrapping around or overflowing for unsigned integers."""
    if _is_integer(x) and _is_integer(y):
        x, y = int(x), int(y)
    return x - y if x >= y else y - x


def _is_number(x: Any) -> bool:
    return isinstance(x, numbers.Number) and not isinstance(x, np.timedelta64)


def _is_integer(x: Any) -> bool:
    # numpy registers timedelta64 as an Integral
    return isinstance(x, numbers.Integral) and not isinstance(x, np.timedelta64)


def _is_time(x: Any) -> bool:
    return isinstance(x, np.datetime64 | np.timedelta64)
