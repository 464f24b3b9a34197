"""Backend-neutral descriptions of stored objects."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional


@dataclass(frozen=True)
class BlobProperties:
    """Properties of a single stored object."""

    name: str
    length: int
    metadata: Dict[str, str] = field(default_factory=dict)
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None


@dataclass(frozen=True)
class BlobListing:
    """One entry of a prefix listing."""

    name: str
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CommittedBlock:
    """One entry of an object's committed block list, in commit order."""

    block_id: str
    size: int
