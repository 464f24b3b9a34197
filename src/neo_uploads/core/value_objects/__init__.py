"""Value objects for neo-uploads."""

from .block_id import BlockId, BLOCK_ID_PREFIX, SEQUENCE_WIDTH, MAX_SEQUENCE_NUMBER
from .checksum import Checksum

__all__ = [
    "BlockId",
    "BLOCK_ID_PREFIX",
    "SEQUENCE_WIDTH",
    "MAX_SEQUENCE_NUMBER",
    "Checksum",
]
