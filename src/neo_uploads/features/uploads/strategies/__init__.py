"""Write strategies binding "append at offset" to a backend write model."""

from .append_strategy import AppendStrategy
from .block_staged_strategy import BlockStagedStrategy

__all__ = [
    "AppendStrategy",
    "BlockStagedStrategy",
]
