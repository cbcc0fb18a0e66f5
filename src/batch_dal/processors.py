"""Item processors for chunk steps."""

import asyncio
from typing import Generic, TypeVar

from batch_dal.logging import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


class DelayProcessor(Generic[T]):
    """Pass-through processor that holds each item for `delay_seconds`.

    Used to keep the reader's connection idle long enough to hit
    server-side socket timeouts.
    """

    def __init__(self, delay_seconds: float) -> None:
        if delay_seconds < 0:
            msg = f"delay_seconds must be >= 0, got {delay_seconds}"
            raise ValueError(msg)
        self.delay_seconds = delay_seconds

    async def process(self, item: T) -> T:
        logger.info("processor_start", delay_seconds=self.delay_seconds)
        await asyncio.sleep(self.delay_seconds)
        logger.info("processor_end")
        return item
