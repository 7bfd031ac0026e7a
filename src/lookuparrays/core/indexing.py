from __future__ import annotations

import numbers
from typing import Any, TypeAlias, TypeGuard, cast

import numpy as np
import numpy.typing as npt

from lookuparrays.errors import MalformedSelectorError, OutOfBoundsError

PositionArray: TypeAlias = npt.NDArray[np.intp]
Index: TypeAlias = int | slice | PositionArray
SelectionNormalized: TypeAlias = tuple[Any, ...]


def err_too_many_indices(selection: Any, shape: tuple[int, ...]) -> None:
    raise IndexError(f"too many indices for array; expected {len(shape)}, got {len(selection)}")


def is_integer(x: Any) -> TypeGuard[int]:
    """True if x is an integer (both pure Python or NumPy)."""
    return isinstance(x, numbers.Integral) and not is_bool(x)


def is_bool(x: Any) -> TypeGuard[bool | np.bool_]:
    """True if x is a boolean (both pure Python or NumPy)."""
    return type(x) in [bool, np.bool_]


def is_integer_list(x: Any) -> TypeGuard[list[int]]:
    """True if x is a list of integers."""
    return isinstance(x, list) and len(x) > 0 and all(is_integer(i) for i in x)


def is_bool_list(x: Any) -> TypeGuard[list[bool | np.bool_]]:
    """True if x is a list of boolean."""
    return isinstance(x, list) and len(x) > 0 and all(is_bool(i) for i in x)


def is_integer_array(x: Any, ndim: int | None = None) -> TypeGuard[npt.NDArray[np.intp]]:
    t = not np.isscalar(x) and hasattr(x, "shape") and hasattr(x, "dtype") and x.dtype.kind in "ui"
    if ndim is not None:
        t = t and hasattr(x, "shape") and len(x.shape) == ndim
    return t


def is_bool_array(x: Any, ndim: int | None = None) -> TypeGuard[npt.NDArray[np.bool_]]:
    t = hasattr(x, "shape") and hasattr(x, "dtype") and x.dtype == bool
    if ndim is not None:
        t = t and hasattr(x, "shape") and len(x.shape) == ndim
    return t


def _axis(dim_len: int) -> str:
    return f"an axis of length {dim_len}"


def normalize_integer_selection(dim_sel: int, dim_len: int) -> int:
    # normalize type to int
    dim_sel = int(dim_sel)

    # handle wraparound
    if dim_sel < 0:
        dim_sel = dim_len + dim_sel

    # handle out of bounds
    if dim_sel >= dim_len or dim_sel < 0:
        raise OutOfBoundsError(dim_sel, _axis(dim_len))

    return dim_sel


def wraparound_indices(x: npt.NDArray[Any], dim_len: int) -> None:
    loc_neg = x < 0
    if np.any(loc_neg):
        x[loc_neg] += dim_len


def boundscheck_indices(x: npt.NDArray[Any], dim_len: int) -> None:
    if np.any(x < 0) or np.any(x >= dim_len):
        bad = x[(x < 0) | (x >= dim_len)]
        raise OutOfBoundsError(bad.tolist(), _axis(dim_len))


def normalize_index(index: Any, dim_len: int) -> Index:
    """
    Normalize a standard (non-selector) index for an axis of length ``dim_len``.

    Integers and integer arrays are wrapped around and bounds checked, slices are returned as
    they are and boolean masks of the right length become the positions they select.
    """
    if is_integer(index):
        return normalize_integer_selection(index, dim_len)
    if isinstance(index, slice):
        return index
    if is_integer_list(index) or is_integer_array(index, ndim=1):
        positions = np.array(index, dtype=np.intp)
        wraparound_indices(positions, dim_len)
        boundscheck_indices(positions, dim_len)
        return positions
    if is_bool_list(index) or is_bool_array(index, ndim=1):
        mask = np.asarray(index, dtype=bool)
        if mask.shape[0] != dim_len:
            raise OutOfBoundsError(
                f"Boolean mask has the wrong length for {_axis(dim_len)}; "
                f"expected {dim_len}, got {mask.shape[0]}"
            )
        return np.flatnonzero(mask)
    raise MalformedSelectorError(index, _axis(dim_len), index)


def ensure_tuple(v: Any) -> SelectionNormalized:
    if not isinstance(v, tuple):
        v = (v,)
    return cast(SelectionNormalized, v)


def replace_ellipsis(selection: Any, shape: tuple[int, ...]) -> SelectionNormalized:
    selection = ensure_tuple(selection)

    # locate any ellipsis by identity, selections may hold arrays
    ellipsis_at = [i for i, item in enumerate(selection) if item is Ellipsis]

    if len(ellipsis_at) > 1:
        # more than 1 is an error
        raise IndexError("an index can only have a single ellipsis ('...')")

    elif len(ellipsis_at) == 1:
        n_items_l = ellipsis_at[0]  # items to left of ellipsis
        n_items_r = len(selection) - (n_items_l + 1)  # items to right of ellipsis
        n_items = len(selection) - 1  # all non-ellipsis items

        if n_items >= len(shape):
            # ellipsis does nothing, just remove it
            selection = tuple(item for item in selection if item is not Ellipsis)

        else:
            # replace ellipsis with as many slices are needed for number of dims
            new_item = selection[:n_items_l] + ((slice(None),) * (len(shape) - n_items))
            if n_items_r:
                new_item += selection[-n_items_r:]
            selection = new_item

    # fill out selection if not completely specified
    if len(selection) < len(shape):
        selection += (slice(None),) * (len(shape) - len(selection))

    # check selection not too long
    if len(selection) > len(shape):
        err_too_many_indices(selection, shape)

    return selection


def slice_to_range(s: slice, length: int) -> range:
    return range(*s.indices(length))


def ix_(selection: Any, shape: tuple[int, ...]) -> tuple[npt.NDArray[np.intp], ...]:
    """Convert an orthogonal selection to a numpy advanced (fancy) selection, like ``numpy.ix_``
    but with support for slices and single ints."""

    # normalisation
    selection = replace_ellipsis(selection, shape)

    # replace slice and int as these are not supported by numpy.ix_
    selection = [
        slice_to_range(dim_sel, dim_len)
        if isinstance(dim_sel, slice)
        else [dim_sel]
        if is_integer(dim_sel)
        else dim_sel
        for dim_sel, dim_len in zip(selection, shape, strict=True)
    ]

    # now get numpy to convert to a coordinate selection
    return cast(tuple[npt.NDArray[np.intp], ...], np.ix_(*selection))


def oindex(a: npt.NDArray[Any], selection: Any) -> npt.NDArray[Any]:
    """Orthogonal indexing with one int, slice or position array per axis."""
    selection = replace_ellipsis(selection, a.shape)
    drop_axes = tuple(i for i, s in enumerate(selection) if is_integer(s))
    result = a[ix_(selection, a.shape)]
    if drop_axes:
        result = result.squeeze(axis=drop_axes)
    return result
