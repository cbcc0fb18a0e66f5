"""Unit tests for socket-close job assembly."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import structlog

from batch_dal.config import JobConfig, Settings
from batch_dal.jobs import build_socket_close_step, postgres_params, run_socket_close_job
from batch_dal.params import PagingParams
from batch_dal.processors import DelayProcessor
from batch_dal.providers.postgres import PostgresProvider
from batch_dal.reader import PagingItemReader


@pytest.fixture
def settings() -> Settings:
    return Settings(
        reader=PagingParams(name="socket_close_reader", page_size=1),
        job=JobConfig(chunk_size=1, processor_delay_seconds=0),
    )


@pytest.fixture
def provider(settings: Settings):
    connection = AsyncMock()
    connection.fetch.side_effect = [[{"id": 1, "name": "jojoldu"}], []]
    pool = MagicMock()
    pool.acquire = AsyncMock(return_value=connection)
    pool.release = AsyncMock()
    pool.close = AsyncMock()
    with (
        patch.object(PostgresProvider, "write", new=AsyncMock()),
        patch.object(PostgresProvider, "disconnect", new=AsyncMock()),
    ):
        yield PostgresProvider(pool, postgres_params(settings))


@pytest.mark.unit
class TestSocketCloseJob:
    """Tests for the socket-close job."""

    def test_postgres_params_follow_source(self, settings: Settings):
        params = postgres_params(settings)
        assert params.table == "store"
        assert params.columns == ["id", "name"]
        assert params.where == {"name": "jojoldu"}
        assert params.row_delay_seconds == 1.0
        assert params.merge is True

    def test_step_wiring(self, provider, settings: Settings):
        step = build_socket_close_step(provider, settings)

        assert isinstance(step.reader, PagingItemReader)
        assert step.reader.page_size == 1
        assert step.reader.name == "socket_close_reader"
        assert isinstance(step.processor, DelayProcessor)
        assert step.writer is provider
        assert step.chunk_size == 1

    @pytest.mark.asyncio
    async def test_run_reads_processes_writes_and_disconnects(self, provider, settings):
        with patch.object(PostgresProvider, "connect", new=AsyncMock(return_value=provider)):
            result = await run_socket_close_job(settings)

        assert result.read_count == 1
        assert result.write_count == 1
        provider.write.assert_awaited_once_with([{"id": 1, "name": "jojoldu"}])
        provider.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_disconnects_when_step_fails(self, provider, settings):
        provider.write.side_effect = RuntimeError("socket closed")
        with patch.object(PostgresProvider, "connect", new=AsyncMock(return_value=provider)):
            with pytest.raises(RuntimeError):
                await run_socket_close_job(settings)

        provider.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_job_and_step_names_bound_while_writing(self, provider, settings):
        seen: list[dict] = []
        provider.write.side_effect = lambda items: seen.append(structlog.contextvars.get_contextvars())
        with patch.object(PostgresProvider, "connect", new=AsyncMock(return_value=provider)):
            await run_socket_close_job(settings)

        assert seen == [{"job": "socket_close", "step": "socket_close_step"}]
        assert "job" not in structlog.contextvars.get_contextvars()
