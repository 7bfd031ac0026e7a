__all__ = [
    "BaseLookupError",
    "LookupUserWarning",
    "MalformedSelectorError",
    "OutOfBoundsError",
    "SelectionNotFoundError",
    "UnsupportedSelectionError",
]


class BaseLookupError(ValueError):
    """
    Base error which all lookuparrays selection errors are sub-classed from.
    """

    _msg: str = "{}"

    def __init__(self, *args: object) -> None:
        """
        If a single argument is passed, treat it as a pre-formatted message.

        If multiple arguments are passed, they are used as arguments for the template string
        class variable.
        """
        if len(args) == 1:
            super().__init__(args[0])
        else:
            super().__init__(self._msg.format(*args))


class OutOfBoundsError(BaseLookupError, IndexError):
    """
    Raised when a selector value, or the position it resolves to, lies outside the range
    the lookup can represent.
    """

    _msg = "{!r} is out of bounds for {}"


class SelectionNotFoundError(BaseLookupError):
    """
    Raised when an exact match or containing cell could not be found in a lookup.
    """

    _msg = "{!r} not found in {}"


class UnsupportedSelectionError(BaseLookupError):
    """
    Raised when a selector cannot be used with the order, sampling or span of a lookup.
    """

    _msg = "{} cannot be used with {}"


class MalformedSelectorError(BaseLookupError, TypeError):
    """
    Raised when something that is neither a selector nor a standard index is used to select
    from a lookup, or when a selector value has the wrong type for the lookup.
    """

    _msg = "Invalid index {!r} for {}. Did you mean At({!r})?"


class LookupUserWarning(UserWarning):
    """
    A warning raised to report problems with user code.
    """
