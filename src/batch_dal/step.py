"""Chunk-oriented step driver.

Reads items one at a time, groups them into chunks, runs each item through
an optional processor and hands every processed chunk to a writer. The
reader is opened once and always closed, whatever happens in between.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel

from batch_dal.logging import bound_run, get_logger
from batch_dal.protocols import ItemProcessor, ItemReader, ItemWriter

In = TypeVar("In")
Out = TypeVar("Out")

logger = get_logger(__name__)


class StepResult(BaseModel, frozen=True):
    """Counters reported by a finished step."""

    name: str
    read_count: int = 0
    filter_count: int = 0
    write_count: int = 0
    chunk_count: int = 0


class ChunkStep(Generic[In, Out]):
    """A single reader -> processor -> writer step."""

    def __init__(
        self,
        name: str,
        reader: ItemReader[In],
        writer: ItemWriter[Out],
        chunk_size: int,
        processor: ItemProcessor[In, Out] | None = None,
    ) -> None:
        if chunk_size < 1:
            msg = f"chunk_size must be >= 1, got {chunk_size}"
            raise ValueError(msg)
        self.name = name
        self.reader = reader
        self.writer = writer
        self.chunk_size = chunk_size
        self.processor = processor

    async def run(self) -> StepResult:
        """Drive the reader to exhaustion and return the step counters."""
        with bound_run(step=self.name):
            return await self._run()

    async def _run(self) -> StepResult:
        read_count = filter_count = write_count = chunk_count = 0

        await self.reader.open()
        try:
            exhausted = False
            while not exhausted:
                chunk: list[In] = []
                while len(chunk) < self.chunk_size:
                    item = await self.reader.read()
                    if item is None:
                        exhausted = True
                        break
                    chunk.append(item)
                if not chunk:
                    break
                read_count += len(chunk)

                outputs = await self._process(chunk)
                filter_count += len(chunk) - len(outputs)
                if outputs:
                    await self.writer.write(outputs)
                    write_count += len(outputs)
                chunk_count += 1
                logger.debug("chunk_written", chunk=chunk_count, items=len(outputs))
        except Exception:
            logger.exception("step_failed", read_count=read_count, write_count=write_count)
            raise
        finally:
            await self.reader.close()

        result = StepResult(
            name=self.name,
            read_count=read_count,
            filter_count=filter_count,
            write_count=write_count,
            chunk_count=chunk_count,
        )
        logger.info("step_completed", **result.model_dump(exclude={"name"}))
        return result

    async def _process(self, chunk: list[In]) -> list[Out]:
        if self.processor is None:
            return list(chunk)  # type: ignore[arg-type]
        outputs: list[Out] = []
        for item in chunk:
            processed = await self.processor.process(item)
            if processed is not None:
                outputs.append(processed)
        return outputs
