"""Socket-close job.

Reads `store` rows one page at a time over a single pooled connection,
holds every item in a slow processor, and writes the rows back. With the
default one-row pages and a 70 second delay, the reader's connection sits
idle past typical server-side socket timeouts between fetches.
"""

import asyncio
from typing import Any

from batch_dal.config import Settings, get_settings
from batch_dal.logging import bound_run, get_logger, setup_logging
from batch_dal.processors import DelayProcessor
from batch_dal.providers.postgres import (
    ConnectionContext,
    PostgresCredentials,
    PostgresParams,
    PostgresProvider,
)
from batch_dal.reader import PagingItemReader
from batch_dal.step import ChunkStep, StepResult

JOB_NAME = "socket_close"

logger = get_logger(__name__)


def postgres_params(settings: Settings) -> PostgresParams:
    source = settings.source
    return PostgresParams(
        table=source.table,
        columns=source.columns,
        sort_key=source.sort_key,
        where=dict(source.where),
        row_delay_seconds=source.row_delay_seconds,
        target_table=source.target_table,
        merge=source.merge,
    )


def build_socket_close_step(
    provider: PostgresProvider, settings: Settings
) -> ChunkStep[dict[str, Any], dict[str, Any]]:
    """Assemble the reader -> delay -> writer step on one provider."""
    reader: PagingItemReader[dict[str, Any], ConnectionContext] = PagingItemReader(
        provider, provider.fetch_page, settings.reader
    )
    return ChunkStep(
        name=f"{JOB_NAME}_step",
        reader=reader,
        writer=provider,
        chunk_size=settings.job.chunk_size,
        processor=DelayProcessor(settings.job.processor_delay_seconds),
    )


async def run_socket_close_job(settings: Settings | None = None) -> StepResult:
    """Connect, run the step to completion, and always disconnect."""
    settings = settings or get_settings()
    setup_logging(settings.observability)

    with bound_run(job=JOB_NAME):
        logger.info("job_started")
        provider = await PostgresProvider.connect(
            PostgresCredentials(dsn=settings.database.dsn),
            postgres_params(settings),
        )
        try:
            result = await build_socket_close_step(provider, settings).run()
        finally:
            await provider.disconnect()
        logger.info("job_completed", read_count=result.read_count, write_count=result.write_count)
    return result


def main() -> None:
    asyncio.run(run_socket_close_job())


if __name__ == "__main__":
    main()
