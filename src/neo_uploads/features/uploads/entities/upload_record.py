"""Upload record entity.

The decoded view of one upload's bookkeeping. The record is never stored as
a unit: it is rebuilt from the backend metadata bag on every read, and the
current offset is not part of it because offsets are always derived from
the backend.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from ....config import StrategyKind


@dataclass
class UploadRecord:
    """Upload bookkeeping decoded from backend metadata."""

    id: str
    created_at: Optional[datetime] = None
    declared_length: Optional[int] = None
    expires_at: Optional[datetime] = None
    block_count: int = 0
    strategy: Optional[StrategyKind] = None
    user_metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def is_length_deferred(self) -> bool:
        """True while the total length has not been declared."""
        return self.declared_length is None

    def is_expired(self, now: datetime) -> bool:
        """Uploads without an expiration never expire."""
        return self.expires_at is not None and self.expires_at <= now
