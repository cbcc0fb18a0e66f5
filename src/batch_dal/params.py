"""Parameter types for reader configuration.

Params fix how a reader pages through its source for its whole lifetime,
while the reader itself carries runtime state (cursor, buffer, context).
"""

from pydantic import BaseModel, Field


class PagingParams(BaseModel, frozen=True):
    """Parameters for a paging item reader."""

    name: str = "PagingItemReader"
    """Reader name, bound to every log event."""

    page_size: int = Field(default=10, gt=0)
    """Number of records fetched per round trip."""

    transacted: bool = True
    """Keep records attached to the context and clear it before each fetch.

    When False, records are detached right after each fetch instead.
    """

    max_item_count: int | None = Field(default=None, ge=0)
    """Stop after this many items. If None, read until the source is empty."""

    context_properties: dict[str, object] = Field(default_factory=dict)
    """Properties handed to the context factory on open."""
