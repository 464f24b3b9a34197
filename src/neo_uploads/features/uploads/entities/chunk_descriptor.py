"""Chunk descriptor produced alongside each split chunk."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ChunkDescriptor:
    """Position and size of one chunk within a single append call.

    Sequence numbers restart at zero for every call; strategies offset them
    by the number of blocks already committed.
    """

    sequence_number: int
    byte_length: int
