"""Paging data access for chunk-oriented batch jobs."""

from batch_dal.errors import BatchError, ErrorKind
from batch_dal.params import PagingParams
from batch_dal.protocols import (
    ContextFactory,
    ItemProcessor,
    ItemReader,
    ItemWriter,
    Provider,
    QueryContext,
    QueryExecutor,
)
from batch_dal.reader import PagingItemReader, ReaderState
from batch_dal.step import ChunkStep, StepResult

__all__ = [
    "BatchError",
    "ChunkStep",
    "ContextFactory",
    "ErrorKind",
    "ItemProcessor",
    "ItemReader",
    "ItemWriter",
    "PagingItemReader",
    "PagingParams",
    "Provider",
    "QueryContext",
    "QueryExecutor",
    "ReaderState",
    "StepResult",
]
