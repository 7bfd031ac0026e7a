from typing import Any

import numpy as np
import pytest

from lookuparrays import Locus, Order
from lookuparrays.core.search import (
    Side,
    clamp_to_bounds,
    distance,
    is_at,
    locus_adjust,
    search,
    searchsorted_first,
    searchsorted_last,
    side_search,
)

FORWARD_VALUES = np.array([10, 20, 20, 30])
REVERSE_VALUES = FORWARD_VALUES[::-1]


@pytest.mark.parametrize(
    ("values", "order", "v", "strict", "expected"),
    [
        (FORWARD_VALUES, Order.FORWARD, 20, False, 1),
        (FORWARD_VALUES, Order.FORWARD, 20, True, 3),
        (FORWARD_VALUES, Order.FORWARD, 25, False, 3),
        (FORWARD_VALUES, Order.FORWARD, 5, False, 0),
        (FORWARD_VALUES, Order.FORWARD, 35, False, 4),
        (REVERSE_VALUES, Order.REVERSE, 20, False, 1),
        (REVERSE_VALUES, Order.REVERSE, 20, True, 3),
        (REVERSE_VALUES, Order.REVERSE, 35, False, 0),
        (REVERSE_VALUES, Order.REVERSE, 5, False, 4),
    ],
)
def test_searchsorted_first(
    values: np.ndarray[Any, Any], order: Order, v: int, strict: bool, expected: int
) -> None:
    assert searchsorted_first(values, v, order, strict=strict) == expected
    # the bisect path over plain sequences agrees with numpy
    assert searchsorted_first(values.tolist(), v, order, strict=strict) == expected


@pytest.mark.parametrize(
    ("values", "order", "v", "strict", "expected"),
    [
        (FORWARD_VALUES, Order.FORWARD, 20, False, 2),
        (FORWARD_VALUES, Order.FORWARD, 20, True, 0),
        (FORWARD_VALUES, Order.FORWARD, 5, False, -1),
        (FORWARD_VALUES, Order.FORWARD, 35, False, 3),
        (REVERSE_VALUES, Order.REVERSE, 20, False, 2),
        (REVERSE_VALUES, Order.REVERSE, 20, True, 0),
        (REVERSE_VALUES, Order.REVERSE, 5, False, 3),
        (REVERSE_VALUES, Order.REVERSE, 35, False, -1),
    ],
)
def test_searchsorted_last(
    values: np.ndarray[Any, Any], order: Order, v: int, strict: bool, expected: int
) -> None:
    assert searchsorted_last(values, v, order, strict=strict) == expected
    assert searchsorted_last(values.tolist(), v, order, strict=strict) == expected


def test_searchsorted_requires_order() -> None:
    with pytest.raises(ValueError, match="ordered"):
        searchsorted_first(FORWARD_VALUES, 1, Order.UNORDERED)
    with pytest.raises(ValueError, match="ordered"):
        searchsorted_last(FORWARD_VALUES, 1, Order.UNORDERED)


def test_search() -> None:
    assert search(FORWARD_VALUES, 20, Order.FORWARD) == 1
    assert search(FORWARD_VALUES, 35, Order.FORWARD) == 4
    assert search(REVERSE_VALUES, 20, Order.REVERSE) == 2
    assert search(REVERSE_VALUES, 35, Order.REVERSE) == -1


@pytest.mark.parametrize(("v", "expected"), [(2, 2), (1.5, 2), (0, 1), (4, 3)])
def test_search_unordered(v: float, expected: int) -> None:
    assert search(np.array([3, 1, 2]), v, Order.UNORDERED) == expected


@pytest.mark.parametrize(
    ("side", "values", "order", "v", "strict", "expected"),
    [
        (Side.LOWER, FORWARD_VALUES, Order.FORWARD, 15, False, 1),
        (Side.LOWER, FORWARD_VALUES, Order.FORWARD, 20, True, 3),
        (Side.UPPER, FORWARD_VALUES, Order.FORWARD, 25, False, 2),
        (Side.UPPER, FORWARD_VALUES, Order.FORWARD, 20, True, 0),
        (Side.LOWER, REVERSE_VALUES, Order.REVERSE, 15, False, 2),
        (Side.LOWER, REVERSE_VALUES, Order.REVERSE, 20, True, 0),
        (Side.UPPER, REVERSE_VALUES, Order.REVERSE, 25, False, 1),
        (Side.UPPER, REVERSE_VALUES, Order.REVERSE, 20, True, 3),
    ],
)
def test_side_search(
    side: Side,
    values: np.ndarray[Any, Any],
    order: Order,
    v: int,
    strict: bool,
    expected: int,
) -> None:
    assert side_search(side, order, values, v, strict=strict) == expected


def test_side_search_requires_order() -> None:
    with pytest.raises(ValueError, match="ordered"):
        side_search(Side.LOWER, Order.UNORDERED, FORWARD_VALUES, 1)


@pytest.mark.parametrize(
    ("side", "locus", "expected"),
    [
        (Side.LOWER, Locus.START, 0),
        (Side.UPPER, Locus.START, -10),
        (Side.LOWER, Locus.CENTER, 5),
        (Side.UPPER, Locus.CENTER, -5),
        (Side.LOWER, Locus.END, 10),
        (Side.UPPER, Locus.END, 0),
    ],
)
@pytest.mark.parametrize("step", [10, -10])
def test_locus_adjust(side: Side, locus: Locus, step: int, expected: int) -> None:
    assert locus_adjust(side, locus, step) == expected


def test_locus_adjust_timedelta() -> None:
    step = np.timedelta64(2, "h")
    assert locus_adjust(Side.LOWER, Locus.CENTER, step) == np.timedelta64(1, "h")
    assert locus_adjust(Side.LOWER, Locus.START, step) == np.timedelta64(0, "h")


@pytest.mark.parametrize(("i", "expected"), [(-1, 0), (0, 0), (2, 2), (4, 4), (5, 4)])
def test_clamp_to_bounds(i: int, expected: int) -> None:
    assert clamp_to_bounds(i, 5) == expected


@pytest.mark.parametrize(
    ("x", "y", "atol", "rtol", "expected"),
    [
        (1, 1, None, None, True),
        (1.0, 1.05, None, None, False),
        (1.0, 1.05, 0.1, None, True),
        (100, 101, None, 0.01, True),
        (100, 102, None, 0.01, False),
        (100, 102, 3, 0.01, True),
        (np.uint8(3), 5, 3, None, True),
        ("a", "a", 0.1, None, True),
        ("a", "b", None, None, False),
        (
            np.datetime64("2000-01-01T00:00"),
            np.datetime64("2000-01-01T00:01"),
            np.timedelta64(2, "m"),
            None,
            True,
        ),
        (np.datetime64("2000-01-01T00:00"), np.datetime64("2000-01-01T00:01"), None, 1.0, False),
    ],
)
def test_is_at(x: Any, y: Any, atol: Any, rtol: Any, expected: bool) -> None:
    assert is_at(x, y, atol, rtol) is expected


def test_distance_does_not_wrap() -> None:
    assert distance(np.uint8(3), 5) == 2
    assert distance(5, np.uint8(3)) == 2


def test_distance_unsigned_to_negative() -> None:
    assert distance(np.uint64(1), -1) == 2
    assert distance(-1, np.uint64(4)) == 5


def test_distance_timedelta() -> None:
    assert distance(np.timedelta64(1, "D"), np.timedelta64(12, "h")) == np.timedelta64(12, "h")
