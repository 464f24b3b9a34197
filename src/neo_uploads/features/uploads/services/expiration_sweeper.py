"""Expiration sweeping for abandoned uploads."""

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional, Set

from ....utils import ensure_utc, utc_now
from ..entities import BlobBackend
from .blob_naming import BlobNaming
from .metadata_codec import UploadMetadataCodec

logger = logging.getLogger(__name__)


class ExpirationSweeper:
    """Finds and removes uploads whose expiration has passed.

    Expiration is an absolute timestamp stored with the upload; uploads
    without one never expire. An upload expires at the instant its
    expiration equals ``now``.
    """

    def __init__(self, backend: BlobBackend, naming: BlobNaming, codec: UploadMetadataCodec):
        self.backend = backend
        self.naming = naming
        self.codec = codec

    async def get_expired_ids(self, now: Optional[datetime] = None) -> List[str]:
        """List ids of expired uploads, including hidden ones, once each.

        When both an upload's object and a stale pending sidecar are listed,
        the object's expiration decides.
        """
        now = ensure_utc(now) if now is not None else utc_now()
        expirations: Dict[str, Optional[datetime]] = {}
        committed: Set[str] = set()

        async for listing in self.backend.list_blobs(self.naming.listing_prefix):
            parsed = self.naming.parse(listing.name)
            if parsed is None:
                continue

            upload_id, is_pending = parsed
            if is_pending and upload_id in committed:
                continue
            if not is_pending:
                committed.add(upload_id)

            expirations[upload_id] = self.codec.decode_expiration(listing.metadata)

        return [
            upload_id
            for upload_id, expires_at in expirations.items()
            if expires_at is not None and expires_at <= now
        ]

    async def remove_expired(self, now: Optional[datetime] = None) -> int:
        """Delete expired uploads, returning how many were removed.

        A failed delete is logged and the sweep moves on to the next upload.
        """
        expired = await self.get_expired_ids(now)
        removed = 0

        for upload_id in expired:
            try:
                deleted = await asyncio.shield(self.backend.delete_if_exists(self.naming.object_name(upload_id)))
                pending = await asyncio.shield(self.backend.delete_if_exists(self.naming.pending_name(upload_id)))
            except Exception as e:
                logger.error(f"Failed to remove expired upload {upload_id}: {str(e)}")
                continue

            if deleted or pending:
                removed += 1

        if expired:
            logger.info(f"Removed {removed} of {len(expired)} expired uploads")
        return removed
