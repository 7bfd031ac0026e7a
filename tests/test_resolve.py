from typing import Any

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from lookuparrays import (
    All,
    At,
    Between,
    Contains,
    Lookup,
    Near,
    Touches,
    Where,
    has_selection,
    resolve,
    select,
    select_indices,
    sampled,
)
from lookuparrays.errors import (
    MalformedSelectorError,
    OutOfBoundsError,
    SelectionNotFoundError,
)


def test_vector_at(points: Lookup) -> None:
    result = resolve(points, At([10, 30]))
    assert_array_equal(result, [0, 2])
    assert result.dtype == np.intp


def test_vector_keeps_order(points: Lookup) -> None:
    assert_array_equal(resolve(points, At(np.array([50, 20]))), [4, 1])


def test_vector_missing_elements(points: Lookup) -> None:
    with pytest.raises(SelectionNotFoundError, match=r"\[31, 32\] not found"):
        resolve(points, At([10, 31, 32]))
    assert resolve(points, At([10, 31]), strict=False) is None


def test_vector_empty(points: Lookup) -> None:
    result = resolve(points, At([]))
    assert result.shape == (0,)
    assert result.dtype == np.intp


@pytest.mark.parametrize(
    ("index", "expected"),
    [(1, 1), (-1, 4), (np.int64(2), 2), (slice(1, 3), slice(1, 3))],
)
def test_standard_index(points: Lookup, index: Any, expected: Any) -> None:
    assert resolve(points, index) == expected


@pytest.mark.parametrize(
    ("index", "expected"),
    [
        ([0, -1], [0, 4]),
        (np.array([3, 1]), [3, 1]),
        ([True, False, True, False, False], [0, 2]),
        (np.array([False, False, False, False, True]), [4]),
    ],
)
def test_standard_array_index(points: Lookup, index: Any, expected: list[int]) -> None:
    assert_array_equal(resolve(points, index), expected)


@pytest.mark.parametrize("index", [5, -6, [0, 5], [True, False]])
def test_standard_index_out_of_bounds(points: Lookup, index: Any) -> None:
    with pytest.raises(OutOfBoundsError):
        resolve(points, index)
    assert resolve(points, index, strict=False) is None


def test_standard_index_out_of_bounds_is_index_error(points: Lookup) -> None:
    with pytest.raises(IndexError):
        resolve(points, 5)


def test_malformed_index(points: Lookup) -> None:
    with pytest.raises(MalformedSelectorError, match=r"Did you mean At\('a'\)\?"):
        resolve(points, "a")
    with pytest.raises(MalformedSelectorError):
        resolve(points, 2.5)
    with pytest.raises(TypeError):
        resolve(points, None, strict=False)


@pytest.mark.parametrize(
    ("selector", "expected"),
    [
        (At(30), True),
        (At(31), False),
        (At([10, 20]), True),
        (At([10, 21]), False),
        (Near(1000), True),
        (Contains(10), False),
        (Between(60, 70), True),
        (Touches(60, 70), True),
        (Where(lambda x: False), True),
        (All(At(31), At(40)), True),
        (All(At(31), At(32)), False),
        (2, True),
        (7, False),
    ],
)
def test_has_selection(points: Lookup, selector: Any, expected: bool) -> None:
    assert has_selection(points, selector) is expected


def test_has_selection_unordered(unordered_points: Lookup) -> None:
    assert not has_selection(unordered_points, Near(1))
    assert not has_selection(unordered_points, Between(1, 2))
    assert has_selection(unordered_points, At(2))


def test_has_selection_categories(categories: Lookup) -> None:
    assert has_selection(categories, Near("a"))
    assert not has_selection(categories, Near("z"))


def test_has_selection_malformed(points: Lookup) -> None:
    with pytest.raises(MalformedSelectorError):
        has_selection(points, "a")


def test_select_indices(points: Lookup, reverse_points: Lookup) -> None:
    assert select_indices([points, reverse_points], (At(30), Between(15, 35))) == (
        2,
        slice(2, 4),
    )


def test_select_indices_pads_and_expands(points: Lookup, reverse_points: Lookup) -> None:
    lookups = [points, reverse_points]
    assert select_indices(lookups, At(20)) == (1, slice(None))
    assert select_indices(lookups, (..., At(20))) == (slice(None), 3)
    assert select_indices(lookups, (At(20), ..., At(20))) == (1, 3)


def test_select_indices_too_many(points: Lookup) -> None:
    with pytest.raises(IndexError, match="too many indices"):
        select_indices([points], (At(10), At(20)))


def test_select(points: Lookup, reverse_points: Lookup) -> None:
    data = np.arange(25).reshape(5, 5)
    lookups = [points, reverse_points]
    assert_array_equal(select(data, lookups, (At(30), Between(15, 35))), [12, 13])
    assert_array_equal(select(data, lookups, (At([10, 50]), 0)), [0, 20])
    assert_array_equal(select(data, lookups, Where(lambda x: x < 25)), data[:2])
    assert select(data, lookups, (At(20), At(20))) == 8


def test_select_checks_lookups(points: Lookup) -> None:
    data = np.zeros((5, 3))
    with pytest.raises(ValueError, match="one lookup per axis"):
        select(data, [points], At(10))
    with pytest.raises(ValueError, match="has length 5, expected 3"):
        select(data, [points, points], At(10))


def test_select_dates() -> None:
    times = sampled(np.arange("2000-01-01", "2000-01-11", dtype="datetime64[D]"))
    data = np.arange(10)
    selector = Between(np.datetime64("2000-01-03"), np.datetime64("2000-01-05"))
    assert_array_equal(select(data, [times], selector), [2, 3, 4])
