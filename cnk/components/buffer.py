"""Compressed buffer header."""

from enum import IntEnum

from pydantic import BaseModel, Field


class MethodTag(IntEnum):
    """Leading byte of every compressed buffer."""

    DELTA = 1
    ROC = 2


class BufferHeader(BaseModel):
    """Parsed header of a compressed buffer.

    Attributes:
        method: Compression method that produced the buffer
        num_ids: Number of IDs in the set (n)
        universe_size: Universe size (N); delta buffers do not carry it
    """

    model_config = {"frozen": True}

    method: MethodTag
    num_ids: int = Field(ge=0)
    universe_size: int | None = Field(default=None, ge=1)
