"""
The config module is responsible for managing the configuration of lookuparrays and is based on
the Donfig python library.

Example:
    Selector defaults can be changed programmatically, temporarily within a ``with`` block, or
    through environment variables.

    ```python
    from lookuparrays import config

    with config.set({"selectors.touches.points": "exact"}):
        ...
    ```

    The environment variable ``LOOKUPARRAYS_SELECTORS__TOUCHES__POINTS`` can be set to
    ``exact`` to the same effect. The double underscore ``__`` is used to indicate nested access.

    ```bash
    export LOOKUPARRAYS_SELECTORS__AT__ATOL=1e-9
    ```

For more information, see the Donfig documentation at https://github.com/pytroll/donfig.
"""

from __future__ import annotations

from typing import Any, Final, Literal, cast

from donfig import Config as DConfig

TouchesPointsConvention = Literal["cells", "exact"]
TOUCHES_POINTS_CONVENTIONS: Final = "cells", "exact"


class BadConfigError(ValueError):
    _msg = "bad Config: %r"


class Config(DConfig):  # type: ignore[misc]
    """The Config will collect configuration from config files and environment variables

    Example environment variables:
    Grabs environment variables of the form "LOOKUPARRAYS_FOO__BAR_BAZ=123" and
    turns these into config variables of the form ``{"foo": {"bar-baz": 123}}``
    It transforms the key and value in the following way:

    -  Lower-cases the key text
    -  Treats ``__`` (double-underscore) as nested access
    -  Calls ``ast.literal_eval`` on the value

    """

    def reset(self) -> None:
        self.clear()
        self.refresh()


# The default configuration for lookuparrays
config = Config(
    "lookuparrays",
    defaults=[
        {
            "selectors": {
                "at": {"atol": None, "rtol": None},
                "touches": {"points": "cells"},
            },
        }
    ],
)


def parse_touches_points_convention(data: Any) -> TouchesPointsConvention:
    if data in TOUCHES_POINTS_CONVENTIONS:
        return cast("TouchesPointsConvention", data)
    msg = f"Expected one of {TOUCHES_POINTS_CONVENTIONS}, got {data!r} instead."
    raise BadConfigError(msg)


def touches_points_convention() -> TouchesPointsConvention:
    """
    The convention ``Touches`` uses for ``Points`` lookups, read from
    ``selectors.touches.points``.
    """
    return parse_touches_points_convention(config.get("selectors.touches.points"))


def default_tolerances() -> tuple[Any, Any]:
    return config.get("selectors.at.atol", None), config.get("selectors.at.rtol", None)
