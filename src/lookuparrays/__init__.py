from lookuparrays._version import version as __version__
from lookuparrays.core.config import config
from lookuparrays.core.engine import (
    IndexResult,
    all_,
    at,
    between,
    contains,
    has_selection,
    near,
    resolve,
    select,
    select_indices,
    touches,
    where,
)
from lookuparrays.core.lookup import (
    Explicit,
    Intervals,
    Irregular,
    Locus,
    Lookup,
    NoSampling,
    NoSpan,
    Order,
    Points,
    Regular,
    categorical,
    no_lookup,
    sampled,
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
    closed,
    closed_open,
    open,
    open_closed,
)


def print_debug_info() -> None:
    """
    Print version info for use in bug reports.
    """
    import platform
    from importlib.metadata import version

    def print_packages(packages: list[str]) -> None:
        not_installed = []
        for package in packages:
            try:
                print(f"{package}: {version(package)}")
            except ModuleNotFoundError:
                not_installed.append(package)
        if not_installed:
            print("\n**Not Installed:**")
            for package in not_installed:
                print(package)

    required = [
        "numpy",
        "donfig",
    ]
    optional = [
        "pytest",
        "hypothesis",
    ]

    print(f"platform: {platform.platform()}")
    print(f"python: {platform.python_version()}")
    print(f"lookuparrays: {__version__}\n")
    print("**Required dependencies:**")
    print_packages(required)
    print("\n**Optional dependencies:**")
    print_packages(optional)


__all__ = [
    "All",
    "At",
    "Between",
    "Contains",
    "Explicit",
    "IndexResult",
    "Interval",
    "Intervals",
    "Irregular",
    "Locus",
    "Lookup",
    "Near",
    "NoSampling",
    "NoSpan",
    "Order",
    "Points",
    "Regular",
    "Selector",
    "Touches",
    "Where",
    "__version__",
    "all_",
    "at",
    "between",
    "categorical",
    "closed",
    "closed_open",
    "config",
    "contains",
    "has_selection",
    "near",
    "no_lookup",
    "open",
    "open_closed",
    "print_debug_info",
    "resolve",
    "sampled",
    "select",
    "select_indices",
    "touches",
    "where",
]
