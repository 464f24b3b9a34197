"""Block identifier value object.

Deterministic block ids for the staged write strategy. The id of a block is
derived from its sequence number with a fixed-width encoding, so that all
ids of an upload have the same length, which block stores require.
"""

import base64
from dataclasses import dataclass

BLOCK_ID_PREFIX = "block-"
SEQUENCE_WIDTH = 10
MAX_SEQUENCE_NUMBER = 10 ** SEQUENCE_WIDTH - 1


@dataclass(frozen=True)
class BlockId:
    """Block identifier derived from a sequence number.

    The encoded form is ``base64("block-" + zero padded index)``. Retrying the
    same sequence number always produces the same id, so re-staging a block
    after a failure replaces the earlier staged bytes instead of adding a
    second block.
    """

    sequence_number: int

    def __post_init__(self):
        if not isinstance(self.sequence_number, int) or isinstance(self.sequence_number, bool):
            raise ValueError(f"Sequence number must be an int, got {type(self.sequence_number).__name__}")
        if self.sequence_number < 0 or self.sequence_number > MAX_SEQUENCE_NUMBER:
            raise ValueError(f"Sequence number out of range: {self.sequence_number}")

    @property
    def value(self) -> str:
        """Encoded id as sent to the backend."""
        raw = f"{BLOCK_ID_PREFIX}{self.sequence_number:0{SEQUENCE_WIDTH}d}"
        return base64.b64encode(raw.encode("ascii")).decode("ascii")

    @classmethod
    def from_string(cls, value: str) -> 'BlockId':
        """Parse an encoded block id back into its sequence number."""
        try:
            raw = base64.b64decode(value.encode("ascii"), validate=True).decode("ascii")
        except (ValueError, UnicodeError) as e:
            raise ValueError(f"Invalid block id: {value}") from e

        digits = raw[len(BLOCK_ID_PREFIX):]
        if not raw.startswith(BLOCK_ID_PREFIX) or len(digits) != SEQUENCE_WIDTH or not digits.isdigit():
            raise ValueError(f"Invalid block id: {value}")
        return cls(int(digits))

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"BlockId({self.sequence_number})"
