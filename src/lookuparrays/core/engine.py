"""
The resolution engine turns a selector into the positions it selects along one lookup.

Selectors dispatch on their class first and on the order, sampling and span of the lookup
second. Ordered lookups are searched through an ascending view of their values, so each
algorithm is written once for ascending values and its positions are mapped back for reverse
ordered lookups. Locus is a value-space notion: ``Locus.START`` is always the low-value edge of a
cell, whatever the order of the lookup.

Point selectors (``At``, ``Near``, ``Contains``) resolve to an ``int``, range selectors
(``Between``, ``Interval``, ``Touches``) to a ``slice`` and ``Where``, ``All`` and vector-valued
selectors to an array of positions.
"""

from __future__ import annotations

import datetime
import logging
import numbers
from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeAlias

import numpy as np
import numpy.typing as npt

from lookuparrays.core.config import default_tolerances, touches_points_convention
from lookuparrays.core.indexing import normalize_index, oindex, replace_ellipsis
from lookuparrays.core.lookup import (
    NUMERIC_KINDS,
    Explicit,
    Intervals,
    Locus,
    Lookup,
    NoSampling,
    Order,
    Points,
    Regular,
    halve,
)
from lookuparrays.core.search import (
    Side,
    clamp_to_bounds,
    distance,
    is_at,
    locus_adjust,
    searchsorted_first,
    side_search,
)
from lookuparrays.core.selectors import (
    All,
    At,
    Between,
    Contains,
    Interval,
    Near,
    Selector,
    Touches,
    Where,
    is_vector_value,
)
from lookuparrays.errors import (
    BaseLookupError,
    MalformedSelectorError,
    OutOfBoundsError,
    SelectionNotFoundError,
    UnsupportedSelectionError,
)

logger = logging.getLogger(__name__)

IndexResult: TypeAlias = int | slice | npt.NDArray[np.intp]


def _missing(strict: bool, error: BaseLookupError) -> None:
    if strict:
        raise error
    logger.debug("Soft selection failure: %s", error)
    return None


def _empty_positions() -> npt.NDArray[np.intp]:
    return np.empty(0, dtype=np.intp)


def _as_positions(result: IndexResult, n: int) -> npt.NDArray[np.intp]:
    if isinstance(result, slice):
        return np.arange(*result.indices(n), dtype=np.intp)
    if isinstance(result, np.ndarray):
        return result.astype(np.intp, copy=False)
    return np.array([result], dtype=np.intp)


def coerce_value(lookup: Lookup, value: Any) -> Any:
    """
    Check that ``value`` can be compared with the values of ``lookup``.

    Numeric lookups take numbers. Datetime lookups take ``numpy.datetime64``, ``datetime.date``
    or ``datetime.datetime`` and timedelta lookups take ``numpy.timedelta64`` or
    ``datetime.timedelta``; the standard library types are converted to numpy ones. Lookups of
    any other kind take any value.
    """
    kind = lookup.dtype.kind
    if kind in NUMERIC_KINDS:
        if isinstance(value, numbers.Number | np.bool_) and not isinstance(value, np.timedelta64):
            return value
    elif kind == "M":
        if isinstance(value, np.datetime64):
            return value
        if isinstance(value, datetime.date):
            return np.datetime64(value)
    elif kind == "m":
        if isinstance(value, np.timedelta64):
            return value
        if isinstance(value, datetime.timedelta):
            return np.timedelta64(value)
    else:
        return value
    msg = f"{value!r} has the wrong type to select from a lookup of {lookup.dtype} values."
    raise MalformedSelectorError(msg)


class _Ascending:
    """An ascending view of an ordered lookup, mapping its positions back to the lookup."""

    def __init__(self, lookup: Lookup) -> None:
        self.lookup = lookup
        self.n = len(lookup)
        self.reversed = lookup.order is Order.REVERSE
        self.values = lookup.values[::-1] if self.reversed else lookup.values

    def position(self, k: int) -> int:
        return self.n - 1 - k if self.reversed else k

    def range(self, a: int, b: int) -> slice:
        """The lookup positions of the inclusive ascending range ``a .. b``."""
        if a > b:
            # empty, placed at the insertion point of the query
            start = self.n - a if self.reversed else a
            return slice(start, start)
        if self.reversed:
            return slice(self.n - 1 - b, self.n - a)
        return slice(a, b + 1)

    def explicit_bounds(self) -> npt.NDArray[Any]:
        bounds = self.lookup.span.bounds  # type: ignore[union-attr]
        return bounds[:, ::-1] if self.reversed else bounds


def _midpoint(a: Any, b: Any) -> Any:
    return a + halve(b - a)


class _CellEdges(Sequence[Any]):
    """
    The lower or upper cell edges of irregularly spaced ascending values, computed on access so
    that they can be binary searched without being materialized.

    ``Start`` cells end at the next value and ``End`` cells begin at the previous one, while
    ``Center`` cells change over half way between neighbouring values. The outermost edges are
    ``lo`` and ``hi``.
    """

    def __init__(self, values: Sequence[Any], side: Side, locus: Locus, lo: Any, hi: Any) -> None:
        self._values = values
        self._side = side
        self._locus = locus
        self._lo = lo
        self._hi = hi

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, k: Any) -> Any:
        v = self._values
        if self._side is Side.LOWER:
            if self._locus is Locus.START:
                return v[k]
            if k == 0:
                return self._lo
            if self._locus is Locus.END:
                return v[k - 1]
            return _midpoint(v[k - 1], v[k])
        if self._locus is Locus.END:
            return v[k]
        if k == len(v) - 1:
            return self._hi
        if self._locus is Locus.START:
            return v[k + 1]
        return _midpoint(v[k], v[k + 1])


# An edge sequence and the shift to add to a query before searching it. ``None`` means no shift.
Edges: TypeAlias = tuple[Sequence[Any], Any]


def _point_cell_bounds(values: Sequence[Any]) -> tuple[Any, Any]:
    if len(values) < 2:
        return values[0], values[-1]
    first_gap = values[1] - values[0]
    last_gap = values[-1] - values[-2]
    return values[0] - halve(first_gap), values[-1] + halve(last_gap)


def _cell_edges(view: _Ascending, side: Side, *, points_as_cells: bool = False) -> Edges:
    """The ``side`` edges of the cells of ``view``, in ascending order."""
    lookup = view.lookup
    sampling, span = lookup.sampling, lookup.span
    if isinstance(sampling, Intervals):
        if isinstance(span, Regular):
            return view.values, locus_adjust(side, sampling.locus, span.step)
        if isinstance(span, Explicit):
            return view.explicit_bounds()[0 if side is Side.LOWER else 1], None
        lo, hi = span.bounds  # type: ignore[union-attr]
        return _CellEdges(view.values, side, sampling.locus, lo, hi), None
    if points_as_cells:
        if isinstance(span, Regular):
            return view.values, locus_adjust(side, Locus.CENTER, span.step)
        lo, hi = _point_cell_bounds(view.values)
        return _CellEdges(view.values, side, Locus.CENTER, lo, hi), None
    return view.values, None


def _search_edges(edges: Edges, side: Side, v: Any, *, strict: bool = False) -> int:
    """
    With ``Side.LOWER`` the first ascending position whose edge is at least ``v``, with
    ``Side.UPPER`` the last one whose edge is at most ``v``.
    """
    seq, shift = edges
    target = v if shift is None else v + shift
    return side_search(side, Order.FORWARD, seq, target, strict=strict)


def _edge_at(edges: Edges, k: int) -> Any:
    seq, shift = edges
    return seq[k] if shift is None else seq[k] - shift


def _check_ordered(lookup: Lookup, name: str) -> None:
    if not lookup.order.is_ordered:
        raise UnsupportedSelectionError(name, f"{lookup!r}; it requires ordered values")


def at(
    lookup: Lookup,
    value: Any,
    *,
    atol: Any = None,
    rtol: Any = None,
    strict: bool = True,
) -> int | None:
    """
    The position of the value of ``lookup`` matching ``value``.

    Unset tolerances fall back to the ``selectors.at.atol`` and ``selectors.at.rtol`` config
    values. With ``strict=False`` a missing value gives ``None`` instead of an error.
    """
    default_atol, default_rtol = default_tolerances()
    atol = default_atol if atol is None else atol
    rtol = default_rtol if rtol is None else rtol
    value = coerce_value(lookup, value)
    if lookup.is_identity:
        return _at_identity(lookup, value, atol, rtol, strict)
    n = len(lookup)
    if n == 0:
        return _missing(strict, SelectionNotFoundError(value, lookup))
    values = lookup.values
    if (
        atol is None
        and rtol is None
        and isinstance(lookup.span, Regular)
        and lookup.dtype.kind in "iu"
        and isinstance(value, numbers.Real)
    ):
        logger.debug("At(%r) inverts the regular step of %r", value, lookup)
        return _at_regular(lookup, value, strict)
    if lookup.order.is_ordered and (lookup.is_numeric or lookup.is_time):
        # the first position at or past the value, and the one before it
        i = searchsorted_first(values, value, lookup.order)
        candidates = [j for j in (i, i - 1) if 0 <= j < n and is_at(values[j], value, atol, rtol)]
        if candidates:
            return min(candidates, key=lambda j: distance(values[j], value))
        return _missing(strict, SelectionNotFoundError(value, lookup))
    logger.debug("At(%r) falls back to a linear scan of %r", value, lookup)
    for j, x in enumerate(values):
        if is_at(x, value, atol, rtol):
            return j
    return _missing(strict, SelectionNotFoundError(value, lookup))


def _at_identity(lookup: Lookup, value: Any, atol: Any, rtol: Any, strict: bool) -> int | None:
    if atol is not None and atol >= 0.5:
        raise ValueError(
            f"atol must be less than 0.5 to select from an unlabelled axis, got {atol!r}."
        )
    if not np.isfinite(value):
        return _missing(strict, OutOfBoundsError(value, lookup))
    i = int(np.rint(value))
    if not 0 <= i < len(lookup) or not is_at(i, value, atol, rtol):
        return _missing(strict, OutOfBoundsError(value, lookup))
    return i


def _at_regular(lookup: Lookup, value: Any, strict: bool) -> int | None:
    first = lookup.values[0].item()
    q, r = divmod(value - first, lookup.span.step)  # type: ignore[union-attr]
    if r == 0 and 0 <= q < len(lookup):
        i = int(q)
        if lookup.values[i] == value:
            return i
    return _missing(strict, SelectionNotFoundError(value, lookup))


def near(lookup: Lookup, value: Any, *, strict: bool = True) -> int | None:
    """
    The position of the value of ``lookup`` nearest to ``value``, measured to the cell centers
    for ``Intervals`` lookups.

    Values outside the lookup resolve to the first or last position. A value exactly half way
    between two positions resolves to the higher value, or to the lower one for ``End`` cells.
    """
    if isinstance(lookup.sampling, NoSampling):
        return at(lookup, value, strict=strict)
    _check_ordered(lookup, "Near")
    locus = lookup.locus
    shifted = isinstance(lookup.sampling, Intervals) and locus is not Locus.CENTER
    if shifted and not isinstance(lookup.span, Regular):
        msg = (
            f"Near cannot be used with {locus!r} cells of irregular width in {lookup!r}. "
            "Use Contains instead."
        )
        raise UnsupportedSelectionError(msg)
    if not (lookup.is_numeric or lookup.is_time):
        raise UnsupportedSelectionError("Near", f"{lookup!r}; it requires numeric or time values")
    value = coerce_value(lookup, value)
    n = len(lookup)
    if n == 0:
        return _missing(strict, OutOfBoundsError(value, lookup))
    view = _Ascending(lookup)
    target = value
    if shifted:
        # search the cell centers
        half = halve(abs(lookup.step))
        target = value - half if locus is Locus.START else value + half
    vals = view.values
    k = searchsorted_first(vals, target)
    if 0 < k < n:
        d_prev = target - vals[k - 1]
        d_next = vals[k] - target
        if d_prev < d_next or (locus is Locus.END and d_prev == d_next):
            k -= 1
    return view.position(clamp_to_bounds(k, n))


def contains(lookup: Lookup, value: Any, *, strict: bool = True) -> int | None:
    """
    The position of the cell of ``lookup`` that contains ``value``.

    ``Start`` and ``Center`` cells are closed on their low-value edge and ``End`` cells on their
    high-value edge. ``Start`` and ``Center`` cells of an ``Explicit`` span are closed on both
    edges, while ``End`` cells of an ``Explicit`` span stay open on their low-value edge.
    """
    sampling = lookup.sampling
    if isinstance(sampling, Points):
        msg = (
            f"Contains cannot be used with the Points sampling of {lookup!r}. "
            "Use At or Near instead."
        )
        raise UnsupportedSelectionError(msg)
    if isinstance(sampling, NoSampling):
        return at(lookup, value, strict=strict)
    _check_ordered(lookup, "Contains")
    value = coerce_value(lookup, value)
    n = len(lookup)
    if n == 0:
        return _missing(strict, OutOfBoundsError(value, lookup))
    locus = sampling.locus
    explicit = isinstance(lookup.span, Explicit)
    lo, hi = lookup.bounds
    if locus is Locus.END:
        inside = lo < value <= hi
    elif explicit:
        inside = lo <= value <= hi
    else:
        inside = lo <= value < hi
    if not inside:
        return _missing(strict, OutOfBoundsError(value, lookup))

    view = _Ascending(lookup)
    lower = _cell_edges(view, Side.LOWER)
    upper = _cell_edges(view, Side.UPPER)
    if locus is Locus.END:
        k = _search_edges(upper, Side.LOWER, value)
        found = k < n and _edge_at(lower, k) < value
    else:
        k = _search_edges(lower, Side.UPPER, value)
        if k < 0:
            found = False
        elif explicit:
            found = value <= _edge_at(upper, k)
        else:
            found = value < _edge_at(upper, k)
    if not found:
        return _missing(strict, SelectionNotFoundError(value, lookup))
    return view.position(k)


def _check_range(lookup: Lookup, name: str, lo: Any, hi: Any) -> tuple[Any, Any]:
    _check_ordered(lookup, name)
    return coerce_value(lookup, lo), coerce_value(lookup, hi)


def between(lookup: Lookup, interval: Interval) -> slice:
    """
    The positions of the cells of ``lookup`` that lie inside ``interval``.

    A cell edge equal to an open endpoint of the interval excludes the cell. Queries outside
    the lookup give an empty slice.
    """
    lo, hi = _check_range(lookup, "Between", interval.lo, interval.hi)
    if len(lookup) == 0:
        return slice(0, 0)
    view = _Ascending(lookup)
    a = _search_edges(
        _cell_edges(view, Side.LOWER), Side.LOWER, lo, strict=not interval.closed_lo
    )
    b = _search_edges(
        _cell_edges(view, Side.UPPER), Side.UPPER, hi, strict=not interval.closed_hi
    )
    return view.range(a, b)


def _points_as_cells(lookup: Lookup) -> bool:
    return (
        isinstance(lookup.sampling, Points)
        and (lookup.is_numeric or lookup.is_time)
        and touches_points_convention() == "cells"
    )


def touches(lookup: Lookup, lo: Any, hi: Any) -> slice:
    """
    The positions of the cells of ``lookup`` that overlap the closed range ``lo .. hi``.

    With the default ``"cells"`` value of ``selectors.touches.points``, the points of a
    ``Points`` lookup each occupy a cell reaching half way to their neighbours; the outermost
    points reach as far out as in, and a single point is zero-width. With ``"exact"`` each point
    is zero-width and ``touches`` selects the same positions as a closed ``between``.
    """
    lo, hi = _check_range(lookup, "Touches", lo, hi)
    if len(lookup) == 0:
        return slice(0, 0)
    view = _Ascending(lookup)
    cells = _points_as_cells(lookup)
    a = _search_edges(_cell_edges(view, Side.UPPER, points_as_cells=cells), Side.LOWER, lo)
    b = _search_edges(_cell_edges(view, Side.LOWER, points_as_cells=cells), Side.UPPER, hi)
    return view.range(a, b)


def where(lookup: Lookup, predicate: Callable[[Any], bool]) -> npt.NDArray[np.intp]:
    """The positions of the values of ``lookup`` that satisfy ``predicate``."""
    mask = np.fromiter(
        (bool(predicate(x)) for x in lookup.values), dtype=bool, count=len(lookup)
    )
    return np.flatnonzero(mask)


def all_(
    lookup: Lookup, selectors: Iterable[Selector], *, strict: bool = True
) -> npt.NDArray[np.intp] | None:
    """
    The sorted union of the positions each of ``selectors`` selects.

    Selectors that find nothing are skipped; only when every one of them finds nothing is the
    selection missing.
    """
    selectors = tuple(selectors)
    parts = []
    for s in selectors:
        result = resolve(lookup, s, strict=False)
        if result is None:
            logger.debug("All skips %r, which is not found in %r", s, lookup)
            continue
        parts.append(_as_positions(result, len(lookup)))
    if not parts:
        if selectors:
            return _missing(
                strict, SelectionNotFoundError(f"None of {selectors!r} found in {lookup!r}")
            )
        return _empty_positions()
    return np.unique(np.concatenate(parts)).astype(np.intp, copy=False)


def _resolve_each(
    lookup: Lookup,
    values: Iterable[Any],
    resolve_one: Callable[[Any], int | None],
    strict: bool,
) -> npt.NDArray[np.intp] | None:
    positions = []
    missing = []
    for v in values:
        i = resolve_one(v)
        if i is None:
            missing.append(v)
        else:
            positions.append(i)
    if missing:
        return _missing(strict, SelectionNotFoundError(missing, lookup))
    return np.array(positions, dtype=np.intp)


def _concatenate_ranges(lookup: Lookup, ranges: Iterable[slice]) -> npt.NDArray[np.intp]:
    n = len(lookup)
    return np.concatenate([_empty_positions(), *(_as_positions(r, n) for r in ranges)])


def resolve(lookup: Lookup, selector: Any, *, strict: bool = True) -> IndexResult | None:
    """
    Resolve ``selector`` to the positions it selects along ``lookup``.

    Parameters
    ----------
    lookup : Lookup
        The lookup of the axis to select from.
    selector : Selector or standard index
        A selector, or an int, slice, integer array or boolean mask, which is normalized and
        passed through.
    strict : bool, default True
        When False, selections that are not found or out of bounds give ``None`` instead of
        raising. Unsupported and malformed selections always raise.

    Returns
    -------
    int, slice or numpy.ndarray
        An ``int`` for a scalar ``At``, ``Near`` or ``Contains``, a ``slice`` for a scalar
        ``Between``, ``Interval`` or ``Touches`` and an array of positions for ``Where``,
        ``All`` and vector-valued selectors.

    Examples
    --------
    >>> from lookuparrays import At, Near, resolve, sampled
    >>> lookup = sampled([10, 20, 30, 40, 50])
    >>> resolve(lookup, At(30))
    2
    >>> resolve(lookup, Near([26, 44]))
    array([2, 3])
    """
    logger.debug("Resolving %r against %r", selector, lookup)
    match selector:
        case At(value=value, atol=atol, rtol=rtol):
            if is_vector_value(value):
                return _resolve_each(
                    lookup,
                    value,
                    lambda v: at(lookup, v, atol=atol, rtol=rtol, strict=False),
                    strict,
                )
            return at(lookup, value, atol=atol, rtol=rtol, strict=strict)
        case Near(value=value):
            if is_vector_value(value):
                return _resolve_each(
                    lookup, value, lambda v: near(lookup, v, strict=False), strict
                )
            return near(lookup, value, strict=strict)
        case Contains(value=value):
            if is_vector_value(value):
                return _resolve_each(
                    lookup, value, lambda v: contains(lookup, v, strict=False), strict
                )
            return contains(lookup, value, strict=strict)
        case Interval():
            return between(lookup, selector)
        case Between(bounds=list() as bounds):
            return _concatenate_ranges(
                lookup, (between(lookup, Interval(lo, hi)) for lo, hi in bounds)
            )
        case Between():
            return between(lookup, selector.to_interval())
        case Touches(bounds=list() as bounds):
            return _concatenate_ranges(lookup, (touches(lookup, lo, hi) for lo, hi in bounds))
        case Touches(bounds=(lo, hi)):
            return touches(lookup, lo, hi)
        case Where(predicate=predicate):
            return where(lookup, predicate)
        case All(selectors=selectors):
            return all_(lookup, selectors, strict=strict)
    try:
        return normalize_index(selector, len(lookup))
    except OutOfBoundsError as e:
        return _missing(strict, e)


def has_selection(lookup: Lookup, selector: Any) -> bool:
    """
    Whether ``selector`` selects anything from ``lookup``, without raising when it does not.

    Selectors that cannot be used with the lookup, such as ``Near`` on unordered values, give
    ``False``. ``Where`` always gives ``True``, as do range selectors on ordered lookups.
    """
    try:
        return resolve(lookup, selector, strict=False) is not None
    except UnsupportedSelectionError:
        return False


def select_indices(lookups: Sequence[Lookup], selection: Any) -> tuple[IndexResult, ...]:
    """
    Resolve one selector per axis, in axis order.

    ``selection`` is a selector, a standard index or a tuple of them. Missing trailing axes
    select everything and an ``Ellipsis`` expands to as many full slices as needed.
    """
    shape = tuple(len(lookup) for lookup in lookups)
    selection = replace_ellipsis(selection, shape)
    return tuple(
        resolve(lookup, s)  # type: ignore[misc]
        for lookup, s in zip(lookups, selection, strict=True)
    )


def select(
    array: npt.ArrayLike, lookups: Sequence[Lookup], selection: Any
) -> npt.NDArray[Any]:
    """
    Select from ``array`` by coordinate values, one lookup per axis.

    The per-axis positions are applied orthogonally; axes selected by a single position are
    dropped.

    Examples
    --------
    >>> import numpy as np
    >>> from lookuparrays import At, Between, sampled, select
    >>> data = np.arange(12).reshape(3, 4)
    >>> lookups = [sampled([1, 2, 3]), sampled([0.0, 0.5, 1.0, 1.5])]
    >>> select(data, lookups, (At(2), Between(0.4, 1.2)))
    array([5, 6])
    """
    a = np.asanyarray(array)
    if a.ndim != len(lookups):
        raise ValueError(f"Expected one lookup per axis ({a.ndim}), got {len(lookups)}.")
    for axis, (lookup, dim_len) in enumerate(zip(lookups, a.shape, strict=True)):
        if len(lookup) != dim_len:
            raise ValueError(
                f"Lookup for axis {axis} has length {len(lookup)}, expected {dim_len}."
            )
    return oindex(a, select_indices(lookups, selection))
