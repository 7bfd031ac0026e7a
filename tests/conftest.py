from __future__ import annotations

import os
from typing import TYPE_CHECKING

import numpy as np
import pytest
from hypothesis import HealthCheck, Verbosity, settings

from lookuparrays import (
    Explicit,
    Intervals,
    Irregular,
    Locus,
    Lookup,
    Order,
    Points,
    Regular,
    categorical,
    sampled,
)
from lookuparrays.core.config import config

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def reset_config() -> Generator[None, None, None]:
    config.reset()
    yield
    config.reset()


@pytest.fixture
def points() -> Lookup:
    """Regular forward points, the lookup most examples select from."""
    return sampled([10, 20, 30, 40, 50])


@pytest.fixture
def reverse_points() -> Lookup:
    return sampled([50, 40, 30, 20, 10])


@pytest.fixture
def irregular_points() -> Lookup:
    return sampled([1, 2, 4, 8, 16])


@pytest.fixture(params=[Locus.START, Locus.CENTER, Locus.END], ids=lambda locus: locus.name)
def regular_intervals(request: pytest.FixtureRequest) -> Lookup:
    return Lookup([10, 20, 30, 40, 50], Order.FORWARD, Intervals(request.param), Regular(10))


@pytest.fixture
def explicit_intervals() -> Lookup:
    bounds = np.array([[0, 10, 25, 40], [10, 20, 40, 50]])
    return Lookup([5, 15, 32, 45], Order.FORWARD, Intervals(Locus.CENTER), Explicit(bounds))


@pytest.fixture
def irregular_intervals() -> Lookup:
    return Lookup([1, 2, 4, 8], Order.FORWARD, Intervals(Locus.START), Irregular((1, 16)))


@pytest.fixture
def categories() -> Lookup:
    return categorical(["b", "a", "d", "c"])


@pytest.fixture
def unordered_points() -> Lookup:
    return Lookup([3, 1, 2], Order.UNORDERED, Points(), Irregular())


settings.register_profile(
    "default",
    parent=settings.get_profile("default"),
    max_examples=300,
    suppress_health_check=[HealthCheck.filter_too_much, HealthCheck.too_slow],
    deadline=None,
    verbosity=Verbosity.verbose,
)
settings.register_profile(
    "ci",
    max_examples=300,
    derandomize=True,  # more like regression testing
    deadline=None,
    suppress_health_check=[HealthCheck.filter_too_much, HealthCheck.too_slow],
)
settings.register_profile(
    "nightly",
    max_examples=500,
    parent=settings.get_profile("ci"),
    derandomize=False,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))
