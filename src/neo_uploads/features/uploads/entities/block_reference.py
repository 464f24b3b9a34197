"""Block reference for the staged write strategy."""

from dataclasses import dataclass

from ....core.value_objects import BlockId


@dataclass(frozen=True)
class BlockReference:
    """A staged or committed block of an upload."""

    block_id: BlockId
    size: int
    committed: bool = False

    @property
    def sequence_number(self) -> int:
        return self.block_id.sequence_number
