"""Paging item reader.

Pulls records from a backing store one page at a time and serves them one
item at a time to a chunk-oriented pipeline.
"""

import asyncio
from collections import deque
from collections.abc import Sequence
from enum import StrEnum
from typing import Generic, Self, TypeVar

from batch_dal.errors import BatchError, ErrorKind
from batch_dal.logging import get_logger
from batch_dal.params import PagingParams
from batch_dal.protocols import ContextFactory, QueryContext, QueryExecutor

T = TypeVar("T")
Ctx = TypeVar("Ctx", bound=QueryContext)


class ReaderState(StrEnum):
    """Lifecycle state of a reader."""

    CLOSED = "closed"
    OPENED = "opened"
    EXHAUSTED = "exhausted"


class PagingItemReader(Generic[T, Ctx]):
    """Reader over an ordered result set, materialized in page-sized batches.

    The query executor is called with the open context and an offset/limit
    window. In transacted mode the context is cleared before every fetch and
    records stay attached to it; otherwise every record is detached from the
    context as soon as its page arrives.

    An empty page ends the stream. A short page ends it once drained, so an
    exactly-full last page costs one extra round trip.

    Example:
        ```python
        reader = PagingItemReader(factory, select_query(lambda: select(Store)))
        async with reader:
            async for store in reader:
                ...
        ```
    """

    def __init__(
        self,
        context_factory: ContextFactory[Ctx],
        query: QueryExecutor[T, Ctx],
        params: PagingParams | None = None,
    ) -> None:
        self._context_factory = context_factory
        self._query = query
        self._params = params or PagingParams()
        self._log = get_logger(__name__, reader=self._params.name)
        self._lock = asyncio.Lock()

        self._context: Ctx | None = None
        self._state = ReaderState.CLOSED
        self._page = 0
        self._results: deque[T] = deque()
        self._last_page = False
        self._read_count = 0

    @property
    def name(self) -> str:
        return self._params.name

    @property
    def page_size(self) -> int:
        return self._params.page_size

    @property
    def transacted(self) -> bool:
        return self._params.transacted

    @property
    def page(self) -> int:
        """Index of the next page to fetch."""
        return self._page

    @property
    def read_count(self) -> int:
        """Items handed out since the last open."""
        return self._read_count

    @property
    def state(self) -> ReaderState:
        return self._state

    async def open(self) -> None:
        """Acquire a query context and rewind to the first page."""
        if self._state is not ReaderState.CLOSED:
            msg = f"Reader '{self.name}' is already open"
            raise BatchError(msg, kind=ErrorKind.INVALID_STATE)

        try:
            context = await self._context_factory.create(self._params.context_properties)
        except BatchError:
            raise
        except Exception as e:
            msg = f"Unable to obtain a query context: {e}"
            raise BatchError(msg, kind=ErrorKind.RESOURCE_UNAVAILABLE, source=e) from e
        if context is None:
            msg = "Unable to obtain a query context"
            raise BatchError(msg, kind=ErrorKind.RESOURCE_UNAVAILABLE)

        self._context = context
        self._page = 0
        self._results = deque()
        self._last_page = False
        self._read_count = 0
        self._state = ReaderState.OPENED
        self._log.info("reader_opened", page_size=self.page_size, transacted=self.transacted)

    async def read(self) -> T | None:
        """Return the next record, or None once the source is exhausted."""
        async with self._lock:
            if self._state is ReaderState.CLOSED:
                msg = f"Reader '{self.name}' is not open"
                raise BatchError(msg, kind=ErrorKind.INVALID_STATE)

            max_items = self._params.max_item_count
            if max_items is not None and self._read_count >= max_items:
                return None

            if not self._results:
                if self._state is ReaderState.EXHAUSTED or self._last_page:
                    self._state = ReaderState.EXHAUSTED
                    return None
                await self._read_page()
                if not self._results:
                    self._state = ReaderState.EXHAUSTED
                    return None

            self._read_count += 1
            return self._results.popleft()

    async def close(self) -> None:
        """Release the query context. Safe to call at any point, any number of times.

        Waits for a read that is still fetching, so the context is never
        released under a running query.
        """
        async with self._lock:
            if self._state is ReaderState.CLOSED:
                return

            context = self._context
            self._context = None
            self._state = ReaderState.CLOSED
            self._results = deque()
            self._log.info("reader_closed", pages=self._page, items=self._read_count)
            if context is not None:
                await context.close()

    def jump_to_page(self, page: int) -> None:
        """Seeking is not supported; restarts replay from the first page."""
        self._log.debug("jump_to_page_ignored", requested=page)

    async def _read_page(self) -> None:
        context = self._context
        if context is None:
            msg = f"Reader '{self.name}' has no query context"
            raise BatchError(msg, kind=ErrorKind.INVALID_STATE)

        offset = self._page * self.page_size
        try:
            if self.transacted:
                context.clear()
            records: Sequence[T] = await self._query(context, offset, self.page_size)
            if len(records) > self.page_size:
                msg = f"Query returned {len(records)} records for a page of {self.page_size}"
                raise BatchError(msg, kind=ErrorKind.FETCH_FAILURE)
            if not self.transacted:
                records = [context.detach(record) for record in records]
        except BatchError:
            raise
        except Exception as e:
            msg = f"Failed to fetch page {self._page}: {e}"
            raise BatchError(msg, kind=ErrorKind.FETCH_FAILURE, source=e) from e

        self._log.debug(
            "page_fetched",
            page=self._page,
            offset=offset,
            limit=self.page_size,
            count=len(records),
        )
        self._page += 1
        self._last_page = len(records) < self.page_size
        # Swap in a fresh buffer; the previous page's deque is never mutated.
        self._results = deque(records)

    async def __aenter__(self) -> Self:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> T:
        item = await self.read()
        if item is None:
            raise StopAsyncIteration
        return item
