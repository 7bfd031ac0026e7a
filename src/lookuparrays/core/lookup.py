from __future__ import annotations

import numbers
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Final

import numpy as np
import numpy.typing as npt

from lookuparrays.errors import LookupUserWarning

if TYPE_CHECKING:
    from typing import Self

# numpy dtype kinds the binary-search paths know how to compare and subtract; booleans compare
# but do not subtract
NUMERIC_KINDS: Final = "iuf"
TIME_KINDS: Final = "mM"


class Order(Enum):
    """
    Enum for the order of the values in a lookup.
    """

    FORWARD = "forward"
    REVERSE = "reverse"
    UNORDERED = "unordered"

    def __repr__(self) -> str:
        return f"{type(self).__name__}.{self.name}"

    @property
    def is_ordered(self) -> bool:
        return self is not Order.UNORDERED

    def reverse(self) -> Order:
        if self is Order.FORWARD:
            return Order.REVERSE
        if self is Order.REVERSE:
            return Order.FORWARD
        return self

    @staticmethod
    def check(a: npt.NDArray[Any]) -> Order:
        if len(a) < 2:
            return Order.FORWARD
        try:
            increasing = a[1:] >= a[:-1]
            decreasing = a[1:] <= a[:-1]
        except TypeError:
            return Order.UNORDERED
        if np.all(increasing):
            order = Order.FORWARD
        elif np.all(decreasing):
            order = Order.REVERSE
        else:
            order = Order.UNORDERED
        return order


class Locus(Enum):
    """
    Enum for the position of a published coordinate value within its cell.
    """

    START = "start"
    CENTER = "center"
    END = "end"

    def __repr__(self) -> str:
        return f"{type(self).__name__}.{self.name}"


@dataclass(frozen=True)
class NoSampling:
    """Values are categorical codes and have no extent."""


@dataclass(frozen=True)
class Points:
    """Each value is a zero-width sample."""

    @property
    def locus(self) -> Locus:
        return Locus.CENTER


@dataclass(frozen=True)
class Intervals:
    """Each value stands for a cell; ``locus`` is where in the cell the value sits."""

    locus: Locus = Locus.CENTER

    def __init__(self, locus: Locus | str = Locus.CENTER) -> None:
        object.__setattr__(self, "locus", Locus(locus))


Sampling = NoSampling | Points | Intervals


@dataclass(frozen=True)
class Regular:
    """Constant spacing ``step``, negative for reverse ordered lookups."""

    step: Any


@dataclass(frozen=True)
class Irregular:
    """
    Variable spacing. ``bounds`` is the ``(low, high)`` extent of the outermost cells in value
    space; either may be ``None`` when it is unknown.
    """

    bounds: tuple[Any, Any] = (None, None)

    def __init__(self, bounds: tuple[Any, Any] | None = None) -> None:
        if bounds is None:
            bounds = (None, None)
        lo, hi = bounds
        if lo is not None and hi is not None and hi < lo:
            lo, hi = hi, lo
        object.__setattr__(self, "bounds", (lo, hi))


@dataclass(frozen=True, eq=False)
class Explicit:
    """
    Per-cell bounds: row 0 holds the lower and row 1 the upper bound of each cell, with one
    column per lookup value.
    """

    bounds: npt.NDArray[Any]

    def __init__(self, bounds: npt.ArrayLike) -> None:
        object.__setattr__(self, "bounds", parse_explicit_bounds(bounds))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Explicit):
            return NotImplemented
        return bool(np.array_equal(self.bounds, other.bounds))

    def __hash__(self) -> int:
        return hash(self.bounds.tobytes())


@dataclass(frozen=True)
class NoSpan:
    """No span concept applies, as for categorical values."""


Span = Regular | Irregular | Explicit | NoSpan


def parse_explicit_bounds(data: npt.ArrayLike) -> npt.NDArray[Any]:
    bounds = np.asarray(data)
    if bounds.ndim != 2 or bounds.shape[0] != 2:
        raise ValueError(
            "Explicit bounds must be a 2 x n matrix of lower and upper bounds. "
            f"Got shape {bounds.shape}."
        )
    if np.any(bounds[1] < bounds[0]):
        raise ValueError("Explicit lower bounds must not exceed the matching upper bounds.")
    return bounds


def parse_order(data: Any) -> Order:
    if isinstance(data, Order):
        return data
    try:
        return Order(data)
    except ValueError:
        msg = f"Expected one of {[o.value for o in Order]}, got {data!r} instead."
        raise ValueError(msg) from None


def parse_sampling(data: Any) -> Sampling:
    if isinstance(data, NoSampling | Points | Intervals):
        return data
    raise TypeError(f"Expected a NoSampling, Points or Intervals sampling, got {data!r}.")


def parse_span(data: Any) -> Span:
    if isinstance(data, Regular | Irregular | Explicit | NoSpan):
        return data
    raise TypeError(f"Expected a Regular, Irregular, Explicit or NoSpan span, got {data!r}.")


def parse_values(data: npt.ArrayLike) -> npt.NDArray[Any]:
    values = np.asarray(data)
    if values.ndim != 1:
        raise ValueError(f"Lookup values must be 1-dimensional. Got {values.ndim} dimensions.")
    return values


def is_monotonic(values: npt.NDArray[Any], order: Order) -> bool:
    if len(values) < 2 or not order.is_ordered:
        return True
    if order is Order.FORWARD:
        return bool(np.all(values[1:] >= values[:-1]))
    return bool(np.all(values[1:] <= values[:-1]))


def is_evenly_spaced(values: npt.NDArray[Any], step: Any) -> bool:
    if len(values) < 2:
        return True
    diff = np.diff(values)
    if values.dtype.kind == "f" or isinstance(step, float):
        return bool(np.allclose(diff, step))
    return bool(np.all(diff == step))


# calendar units have no fixed length and sub-nanosecond units are fine enough already
_UNPROMOTED_TIME_UNITS: Final = ("Y", "M", "ps", "fs", "as")


def halve(x: Any) -> Any:
    """
    Half of the width or gap ``x``. A ``numpy.timedelta64`` is first promoted to nanoseconds so
    that halving a whole number of days or hours does not truncate.
    """
    if isinstance(x, np.timedelta64):
        unit, _ = np.datetime_data(x.dtype)
        if unit not in _UNPROMOTED_TIME_UNITS:
            x = x.astype("timedelta64[ns]")
    return x / 2


def _infer_irregular_bounds(
    values: npt.NDArray[Any], order: Order, sampling: Sampling, bounds: tuple[Any, Any]
) -> tuple[Any, Any]:
    lo, hi = bounds
    if lo is not None and hi is not None:
        return lo, hi
    if len(values) == 0 or not order.is_ordered:
        return lo, hi
    asc = values[::-1] if order is Order.REVERSE else values
    first, last = asc[0], asc[-1]
    if not isinstance(sampling, Intervals):
        return (first if lo is None else lo), (last if hi is None else hi)
    if len(asc) < 2:
        raise ValueError(
            "The bounds of a single-valued Irregular Intervals lookup cannot be inferred, "
            "pass them explicitly with Irregular((low, high))."
        )
    first_gap = asc[1] - asc[0]
    last_gap = asc[-1] - asc[-2]
    locus = sampling.locus
    if locus is Locus.START:
        inferred = first, last + last_gap
    elif locus is Locus.END:
        inferred = first - first_gap, last
    else:
        inferred = first - halve(first_gap), last + halve(last_gap)
    return (inferred[0] if lo is None else lo), (inferred[1] if hi is None else hi)


def _format_value(x: Any) -> str:
    # numpy scalars repr as np.float64(1.0) and the like
    if isinstance(x, np.datetime64 | np.timedelta64):
        return str(x)
    if isinstance(x, np.generic):
        return repr(x.item())
    return repr(x)


@dataclass(frozen=True, eq=False)
class Lookup:
    """
    A sequence of coordinate values labelling one array axis, with the metadata the selector
    algorithms need: the order of the values, how they sample the axis and how cells are spaced.

    Parameters
    ----------
    values : array-like
        The 1-dimensional coordinate values.
    order : Order
        ``Order.FORWARD`` for non-decreasing, ``Order.REVERSE`` for non-increasing values,
        otherwise ``Order.UNORDERED``.
    sampling : NoSampling | Points | Intervals
        Whether values are categories, points or cells.
    span : Regular | Irregular | Explicit | NoSpan
        How cell widths are described.
    """

    values: npt.NDArray[Any]
    order: Order
    sampling: Sampling
    span: Span

    def __init__(
        self, values: npt.ArrayLike, order: Order | str, sampling: Sampling, span: Span
    ) -> None:
        values_parsed = parse_values(values)
        order_parsed = parse_order(order)
        sampling_parsed = parse_sampling(sampling)
        span_parsed = parse_span(span)

        if not is_monotonic(values_parsed, order_parsed):
            msg = f"Lookup values are not {order_parsed.value} ordered."
            raise ValueError(msg)

        if isinstance(sampling_parsed, Points | Intervals):
            if isinstance(span_parsed, NoSpan):
                raise ValueError(f"{sampling_parsed!r} sampling requires a span, got NoSpan().")
            if isinstance(span_parsed, Explicit) and isinstance(sampling_parsed, Points):
                raise ValueError("Explicit spans can only be used with Intervals sampling.")

        if isinstance(span_parsed, Regular):
            step = span_parsed.step
            if not order_parsed.is_ordered:
                raise ValueError("A Regular span requires ordered values.")
            zero = step * 0
            if step == zero or (step > zero) != (order_parsed is Order.FORWARD):
                msg = f"Step {step!r} does not match the {order_parsed.value} order of the lookup."
                raise ValueError(msg)
            if not is_evenly_spaced(values_parsed, step):
                msg = (
                    f"Lookup values are not evenly spaced by the Regular step {step!r}; "
                    "selections may return wrong positions. Use an Irregular span instead."
                )
                warnings.warn(msg, LookupUserWarning, stacklevel=2)
        elif isinstance(span_parsed, Irregular):
            span_parsed = Irregular(
                _infer_irregular_bounds(
                    values_parsed, order_parsed, sampling_parsed, span_parsed.bounds
                )
            )
        elif isinstance(span_parsed, Explicit):
            if span_parsed.bounds.shape[1] != len(values_parsed):
                msg = (
                    f"Explicit bounds have {span_parsed.bounds.shape[1]} columns, "
                    f"expected one per value ({len(values_parsed)})."
                )
                raise ValueError(msg)

        object.__setattr__(self, "values", values_parsed)
        object.__setattr__(self, "order", order_parsed)
        object.__setattr__(self, "sampling", sampling_parsed)
        object.__setattr__(self, "span", span_parsed)

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, i: int) -> Any:
        return self.values[i]

    def __repr__(self) -> str:
        n = len(self)
        if n == 0:
            contents = "no values"
        elif n <= 4:
            contents = f"values [{', '.join(_format_value(x) for x in self.values)}]"
        else:
            first, last = _format_value(self.values[0]), _format_value(self.values[-1])
            contents = f"{n} values [{first} .. {last}]"
        lo, hi = (_format_value(b) for b in self.bounds)
        return (
            f"Lookup({contents}, {self.order.name}, {self.sampling!r}, {self.span!r}, "
            f"bounds=({lo}, {hi}))"
        )

    @property
    def dtype(self) -> np.dtype[Any]:
        return self.values.dtype

    @property
    def locus(self) -> Locus:
        if isinstance(self.sampling, Intervals):
            return self.sampling.locus
        return Locus.CENTER

    @property
    def step(self) -> Any:
        """The step of a ``Regular`` span, ``None`` for every other span."""
        if isinstance(self.span, Regular):
            return self.span.step
        return None

    @property
    def is_numeric(self) -> bool:
        return self.values.dtype.kind in NUMERIC_KINDS

    @property
    def is_time(self) -> bool:
        return self.values.dtype.kind in TIME_KINDS

    @property
    def is_identity(self) -> bool:
        """
        True for the lookup of an unlabelled axis: integer positions ``0 .. n-1`` sampled as
        regular points.
        """
        return (
            self.values.dtype.kind in "iu"
            and self.order is Order.FORWARD
            and isinstance(self.sampling, Points)
            and isinstance(self.span, Regular)
            and self.span.step == 1
            and (len(self) == 0 or self.values[0] == 0)
        )

    @property
    def bounds(self) -> tuple[Any, Any]:
        """
        The ``(low, high)`` extent of the lookup in value space, including the outer cell edges
        for ``Intervals``.
        """
        n = len(self)
        if isinstance(self.span, Explicit):
            if n == 0:
                return None, None
            return self.span.bounds[0].min(), self.span.bounds[1].max()
        if isinstance(self.span, Irregular) and isinstance(self.sampling, Intervals):
            return self.span.bounds
        if n == 0:
            return None, None
        if not self.order.is_ordered:
            if isinstance(self.span, Irregular):
                return self.span.bounds
            return None, None
        first, last = self.values[0], self.values[-1]
        lo, hi = (last, first) if self.order is Order.REVERSE else (first, last)
        if isinstance(self.sampling, Intervals) and isinstance(self.span, Regular):
            width = abs(self.span.step)
            locus = self.sampling.locus
            if locus is Locus.START:
                return lo, hi + width
            if locus is Locus.END:
                return lo - width, hi
            return lo - halve(width), hi + halve(width)
        return lo, hi

    def reverse(self) -> Self:
        """A lookup with the values, order and spans reversed."""
        span = self.span
        if isinstance(span, Regular):
            span = Regular(-span.step)
        elif isinstance(span, Explicit):
            span = Explicit(span.bounds[:, ::-1])
        return type(self)(self.values[::-1], self.order.reverse(), self.sampling, span)


def _detect_span(values: npt.NDArray[Any], order: Order) -> Span:
    if order.is_ordered and len(values) > 1 and values.dtype.kind in NUMERIC_KINDS + TIME_KINDS:
        step = values[1] - values[0]
        if step != 0 and is_evenly_spaced(values, step):
            if isinstance(step, np.generic):
                step = step.item() if values.dtype.kind in NUMERIC_KINDS else step
            return Regular(step)
    return Irregular()


def sampled(
    values: npt.ArrayLike,
    order: Order | str | None = None,
    span: Span | None = None,
    sampling: Sampling | None = None,
) -> Lookup:
    """
    Build a lookup of sampled values, detecting what is not passed.

    The order is detected from the values, the span is ``Regular`` when the values are evenly
    spaced and ``Irregular`` otherwise, and the sampling defaults to ``Points()``.
    """
    values_parsed = parse_values(values)
    order_parsed = Order.check(values_parsed) if order is None else parse_order(order)
    if span is None:
        span = _detect_span(values_parsed, order_parsed)
    if sampling is None:
        sampling = Points()
    return Lookup(values_parsed, order_parsed, sampling, span)


def categorical(values: npt.ArrayLike, order: Order | str | None = None) -> Lookup:
    """Build a lookup of categorical values, which select by exact match only."""
    values_parsed = parse_values(values)
    order_parsed = Order.check(values_parsed) if order is None else parse_order(order)
    return Lookup(values_parsed, order_parsed, NoSampling(), NoSpan())


def no_lookup(n: numbers.Integral | int) -> Lookup:
    """The identity lookup of an axis of length ``n``, whose values are its positions."""
    return Lookup(np.arange(int(n)), Order.FORWARD, Points(), Regular(1))
