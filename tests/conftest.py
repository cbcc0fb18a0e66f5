"""Pytest configuration and fixtures for batch_dal tests."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import pytest


@dataclass
class Row:
    """Mutable record standing in for an ORM entity."""

    id: int
    name: str
    attached: bool = True


@dataclass
class RecordingContext:
    """Query context that records every call made on it."""

    events: list[str]
    closed: bool = False
    close_error: Exception | None = None

    def clear(self) -> None:
        self.events.append("clear")

    def detach(self, item: Row) -> Row:
        self.events.append(f"detach:{item.id}")
        return Row(id=item.id, name=item.name, attached=False)

    async def close(self) -> None:
        self.events.append("close")
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


@dataclass
class RecordingFactory:
    """Context factory handing out `RecordingContext`s."""

    events: list[str] = field(default_factory=list)
    contexts: list[RecordingContext] = field(default_factory=list)
    properties: list[Mapping[str, object]] = field(default_factory=list)

    async def create(self, properties: Mapping[str, object]) -> RecordingContext:
        self.properties.append(properties)
        self.events.append("create")
        ctx = RecordingContext(events=self.events)
        self.contexts.append(ctx)
        return ctx


@dataclass
class FakeStore:
    """Backing store serving offset/limit windows over a list of rows."""

    rows: list[Row]
    offsets: list[int] = field(default_factory=list)
    events: list[str] | None = None

    async def __call__(self, ctx: RecordingContext, offset: int, limit: int) -> Sequence[Row]:
        self.offsets.append(offset)
        if self.events is not None:
            self.events.append(f"fetch:{offset}")
        return self.rows[offset : offset + limit]


def make_rows(count: int) -> list[Row]:
    return [Row(id=i, name=f"row-{i}") for i in range(count)]


@pytest.fixture
def factory() -> RecordingFactory:
    """Provide a recording context factory."""
    return RecordingFactory()


@pytest.fixture
def abc_store(factory: RecordingFactory) -> FakeStore:
    """Provide a store holding three rows named A, B and C."""
    rows = [Row(id=1, name="A"), Row(id=2, name="B"), Row(id=3, name="C")]
    return FakeStore(rows=rows, events=factory.events)


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
