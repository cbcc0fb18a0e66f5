"""Core protocols for readers, their collaborators and pipeline stages."""

from collections.abc import Mapping, Sequence
from typing import Protocol, Self, TypeVar, runtime_checkable

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
T_contra = TypeVar("T_contra", contravariant=True)
Ctx_contra = TypeVar("Ctx_contra", contravariant=True)
Ctx_co = TypeVar("Ctx_co", covariant=True)
Cred_contra = TypeVar("Cred_contra", contravariant=True)
Params_contra = TypeVar("Params_contra", contravariant=True)


@runtime_checkable
class QueryContext(Protocol):
    """A live connection or session to the backing store.

    Owned by exactly one reader between `open()` and `close()`.
    """

    def clear(self) -> None:
        """Drop any state cached by the context (identity maps, etc.)."""
        ...

    def detach(self, item: T) -> T:
        """Return `item` made independent of this context's lifetime."""
        ...

    async def close(self) -> None:
        """Release the underlying connection or session."""
        ...


@runtime_checkable
class ContextFactory(Protocol[Ctx_co]):
    """Protocol for acquiring query contexts."""

    async def create(self, properties: Mapping[str, object]) -> Ctx_co | None:
        """Acquire a new context configured with `properties`."""
        ...


class QueryExecutor(Protocol[T_co, Ctx_contra]):
    """Turns an (offset, limit) window into a page of records."""

    async def __call__(self, ctx: Ctx_contra, offset: int, limit: int) -> Sequence[T_co]:
        """Fetch at most `limit` records starting at `offset`.

        Repeated calls with increasing offsets must see a stable order.
        """
        ...


@runtime_checkable
class ItemReader(Protocol[T_co]):
    """Protocol for pulling items one at a time."""

    async def open(self) -> None: ...

    async def read(self) -> T_co | None:
        """Return the next item, or None once the source is exhausted."""
        ...

    async def close(self) -> None: ...


@runtime_checkable
class ItemProcessor(Protocol[T_contra, T_co]):
    """Protocol for per-item transformation."""

    async def process(self, item: T_contra) -> T_co | None:
        """Transform an item; returning None filters it out of the chunk."""
        ...


@runtime_checkable
class ItemWriter(Protocol[T_contra]):
    """Protocol for writing data to external sinks."""

    async def write(self, items: Sequence[T_contra]) -> None:
        """Write a chunk of items to the sink."""
        ...


@runtime_checkable
class Provider(Protocol[Cred_contra, Params_contra]):
    """Protocol for provider lifecycle management."""

    @classmethod
    async def connect(cls, credentials: Cred_contra, params: Params_contra) -> Self:
        """Establish connection to the external service."""
        ...

    async def disconnect(self) -> None:
        """Release resources and close connections."""
        ...
