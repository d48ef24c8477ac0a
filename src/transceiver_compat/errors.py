"""Exceptions raised at the loader and engine boundaries."""

from typing import Literal

LoadErrorKind = Literal["unavailable", "malformed"]


class LoadError(Exception):
    """The dataset snapshot could not be obtained.

    ``kind`` is "unavailable" for transport/availability failures (missing file,
    network error, HTTP error status) and "malformed" when the document was
    fetched but does not have the expected shape.
    """

    def __init__(self, kind: LoadErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(f"Dataset {kind}: {message}")


class QueryFault(Exception):
    """Unexpected failure while resolving a query against a snapshot."""


class ReloadThrottled(Exception):
    """A reload was requested before the minimum reload interval elapsed."""

    def __init__(self, retry_after: float):
        self.retry_after = retry_after
        super().__init__(f"Dataset was reloaded recently; retry in {retry_after:.0f}s")
