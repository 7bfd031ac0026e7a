from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np

__all__ = [
    "All",
    "At",
    "Between",
    "Contains",
    "Interval",
    "Near",
    "Selector",
    "Touches",
    "Where",
    "closed",
    "closed_open",
    "is_selector",
    "is_vector_value",
    "open",
    "open_closed",
]


def is_vector_value(value: Any) -> bool:
    """True if a selector value holds many values to be resolved one by one."""
    return isinstance(value, list) or (isinstance(value, np.ndarray) and value.ndim == 1)


def _is_pair(value: Any) -> bool:
    return isinstance(value, tuple) and len(value) == 2


@dataclass(frozen=True)
class At:
    """
    Select the position whose value matches ``value`` exactly, or within ``atol`` / ``rtol``
    when these are set.

    ``value`` may be a list or 1-dimensional array, in which case every element must match.

    Examples
    --------
    >>> from lookuparrays import At, resolve, sampled
    >>> resolve(sampled([10, 20, 30]), At(20))
    1
    """

    value: Any
    atol: Any = None
    rtol: Any = None


@dataclass(frozen=True)
class Near:
    """
    Select the position nearest to ``value``.

    For ``Intervals`` lookups the distance is measured to the cell centers, which are offset from
    the values for ``Start`` and ``End`` loci.
    """

    value: Any


@dataclass(frozen=True)
class Contains:
    """
    Select the cell that contains ``value``. Only meaningful for ``Intervals`` lookups and for
    categorical ones, where it behaves like ``At``.
    """

    value: Any


@dataclass(frozen=True)
class Interval:
    """
    Select all the positions whose cells lie between ``lo`` and ``hi``.

    ``closed_lo`` and ``closed_hi`` say whether a cell edge equal to the endpoint still counts as
    inside. For ``Points`` lookups the values themselves must lie in the interval; for
    ``Intervals`` lookups the whole cell must.
    """

    lo: Any
    hi: Any
    closed_lo: bool = True
    closed_hi: bool = True

    @property
    def endpoints(self) -> tuple[Any, Any]:
        return self.lo, self.hi

    def __contains__(self, x: Any) -> bool:
        above = self.lo <= x if self.closed_lo else self.lo < x
        below = x <= self.hi if self.closed_hi else x < self.hi
        return bool(above and below)


def closed(lo: Any, hi: Any) -> Interval:
    return Interval(lo, hi, True, True)


def open(lo: Any, hi: Any) -> Interval:
    return Interval(lo, hi, False, False)


def closed_open(lo: Any, hi: Any) -> Interval:
    return Interval(lo, hi, True, False)


def open_closed(lo: Any, hi: Any) -> Interval:
    return Interval(lo, hi, False, True)


def _parse_bounds_args(name: str, args: tuple[Any, ...]) -> tuple[Any, Any] | list[tuple[Any, Any]]:
    if len(args) == 2:
        return args[0], args[1]
    if len(args) == 1:
        (bounds,) = args
        if _is_pair(bounds):
            return bounds
        if isinstance(bounds, list) and all(_is_pair(b) for b in bounds):
            return list(bounds)
    msg = f"{name} expects two bounds, a (low, high) tuple or a list of them. Got {args!r}."
    raise TypeError(msg)


@dataclass(frozen=True)
class Between:
    """
    Select all the positions between two values, as a closed :class:`Interval`.

    Construct with ``Between(lo, hi)``, ``Between((lo, hi))`` or, to select many ranges,
    ``Between([(lo, hi), ...])``. The two bounds may be given in either order.

    Examples
    --------
    >>> from lookuparrays import Between, resolve, sampled
    >>> resolve(sampled([10, 20, 30, 40, 50]), Between(15, 35))
    slice(1, 3, None)
    """

    bounds: tuple[Any, Any] | list[tuple[Any, Any]]

    def __init__(self, *args: Any) -> None:
        object.__setattr__(self, "bounds", _sorted_bounds(type(self).__name__, args))

    def to_interval(self) -> Interval:
        lo, hi = self.bounds  # type: ignore[misc]
        return Interval(lo, hi)


def _sorted_pair(bounds: tuple[Any, Any]) -> tuple[Any, Any]:
    a, b = bounds
    return (b, a) if b < a else (a, b)


def _sorted_bounds(name: str, args: tuple[Any, ...]) -> tuple[Any, Any] | list[tuple[Any, Any]]:
    bounds = _parse_bounds_args(name, args)
    if isinstance(bounds, tuple):
        return _sorted_pair(bounds)
    return [_sorted_pair(b) for b in bounds]


@dataclass(frozen=True)
class Touches:
    """
    Select all the positions whose cells touch the closed range between two values, for the
    largest area that could interact with the range.

    Unlike :class:`Between`, a cell that merely overlaps the range is included. Construct like
    :class:`Between`; the bounds are sorted too.
    """

    bounds: tuple[Any, Any] | list[tuple[Any, Any]]

    def __init__(self, *args: Any) -> None:
        object.__setattr__(self, "bounds", _sorted_bounds(type(self).__name__, args))


@dataclass(frozen=True)
class Where:
    """
    Select the positions whose value satisfies ``predicate``, whatever the lookup metadata.

    Examples
    --------
    >>> from lookuparrays import Where, resolve, sampled
    >>> resolve(sampled([10, 20, 30, 40, 50]), Where(lambda x: x > 25))
    array([2, 3, 4])
    """

    predicate: Callable[[Any], bool]


@dataclass(frozen=True)
class All:
    """
    Select the union of the positions selected by each of ``selectors``, sorted ascending and
    without duplicates.
    """

    selectors: tuple[Selector, ...]

    def __init__(self, *selectors: Selector) -> None:
        for s in selectors:
            if not is_selector(s):
                raise TypeError(f"All expects selectors, got {s!r}.")
        object.__setattr__(self, "selectors", tuple(selectors))


Selector = At | Near | Contains | Interval | Between | Touches | Where | All


def is_selector(x: Any) -> bool:
    return isinstance(x, At | Near | Contains | Interval | Between | Touches | Where | All)
