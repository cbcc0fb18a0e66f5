"""SQLAlchemy ORM session contexts for paging readers."""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, ClassVar, TypeVar

try:
    from sqlalchemy import Select, inspect
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
    from sqlalchemy.orm import InstanceState
except ImportError as e:
    _msg = "sqlalchemy is required for ORM session support. Install with: uv add 'batch-dal[sqlalchemy]'"
    raise ImportError(_msg) from e

T = TypeVar("T")


class SessionContext:
    """Query context backed by an `AsyncSession`.

    Clearing empties the session's identity map and detaching expunges a
    single instance, so detached entities keep their loaded state after the
    session is closed.
    """

    __slots__: ClassVar[tuple[str]] = ("_session",)

    _session: AsyncSession

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    def clear(self) -> None:
        self._session.expunge_all()

    def detach(self, item: T) -> T:
        """Expunge a mapped instance; other values are already detached."""
        state = inspect(item, raiseerr=False)
        if isinstance(state, InstanceState) and state.session_id is not None:
            self._session.expunge(item)
        return item

    async def close(self) -> None:
        await self._session.close()


class SessionContextFactory:
    """Creates one `SessionContext` per reader open.

    Context properties are copied into `Session.info`.
    """

    __slots__: ClassVar[tuple[str]] = ("_session_factory",)

    _session_factory: async_sessionmaker[AsyncSession]

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, properties: Mapping[str, object]) -> SessionContext:
        session = self._session_factory(info=dict(properties))
        return SessionContext(session)


def select_query(
    build: Callable[[], Select[Any]],
) -> Callable[[SessionContext, int, int], Awaitable[Sequence[Any]]]:
    """Turn a statement builder into a query executor.

    The builder must return a statement with a stable ORDER BY; the window
    is applied with OFFSET/LIMIT and the first column of each row is returned.
    """

    async def query(ctx: SessionContext, offset: int, limit: int) -> Sequence[Any]:
        stmt = build().offset(offset).limit(limit)
        result = await ctx.session.execute(stmt)
        return list(result.scalars().all())

    return query
