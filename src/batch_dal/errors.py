"""Error types for reader, step and provider operations."""

from enum import StrEnum
from typing import final


class ErrorKind(StrEnum):
    """Classification of batch errors."""

    RESOURCE_UNAVAILABLE = "resource_unavailable"
    FETCH_FAILURE = "fetch_failure"
    INVALID_STATE = "invalid_state"
    WRITE_FAILURE = "write_failure"


@final
class BatchError(Exception):
    """Base error for all batch operations.

    A single exception type classified by `kind`. The underlying exception,
    if any, is kept in `source` and chained as `__cause__`.
    """

    __slots__ = ("kind", "message", "source")

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        source: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.source = source

    def __repr__(self) -> str:
        return f"BatchError({self.message!r}, kind={self.kind!r})"
