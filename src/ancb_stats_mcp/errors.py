"""Exceptions raised by the statistics core."""

from typing import Optional


class AncbStatsError(Exception):
    """Base class for all errors raised by this package."""


class StoreUnavailableError(AncbStatsError):
    """A read against the document store failed as a whole.

    Raised for connectivity or permission failures on data the aggregation
    cannot run without (the player list, the event list, a tournament's
    event document). Failures on individual sub-collections never raise.
    """

    def __init__(self, path: tuple[str, ...], cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        location = "/".join(path) or "<root>"
        message = f"Could not read '{location}' from the document store"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class InvalidFilterError(AncbStatsError, ValueError):
    """A ranking filter (season year or mode) is malformed."""

    def __init__(self, name: str, value: object, expected: str):
        self.name = name
        self.value = value
        super().__init__(f"Invalid {name} {value!r}: expected {expected}")
