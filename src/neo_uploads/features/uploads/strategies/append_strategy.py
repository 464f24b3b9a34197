"""Append-only write strategy.

For backends with a native append primitive: the object's length is the
upload offset and every chunk is one append call. Chunks appended before a
failure stay persisted, so a retried call resumes from the new offset.
"""

import asyncio
import logging
from typing import AsyncIterator, Dict

from ....config import StrategyKind
from ....core.exceptions import (
    BlobAlreadyExists,
    UploadAlreadyExists,
    UploadLengthExceeded,
)
from ..entities import BlobBackend
from ..services.blob_naming import BlobNaming
from ..services.metadata_codec import UploadMetadataCodec

logger = logging.getLogger(__name__)


class AppendStrategy:
    """Write strategy over append-only objects."""

    kind = StrategyKind.APPEND

    def __init__(
        self,
        backend: BlobBackend,
        naming: BlobNaming,
        codec: UploadMetadataCodec,
        create_is_idempotent: bool = False,
    ):
        self.backend = backend
        self.naming = naming
        self.codec = codec
        self.create_is_idempotent = create_is_idempotent

    async def create_empty(self, upload_id: str, metadata: Dict[str, str]) -> None:
        name = self.naming.object_name(upload_id)
        try:
            await asyncio.shield(self.backend.create_empty(name, metadata))
        except BlobAlreadyExists:
            if not self.create_is_idempotent:
                raise UploadAlreadyExists(upload_id)
            logger.debug(f"Append object {name} already exists, keeping it")

    async def append(self, upload_id: str, chunks: AsyncIterator[bytes], metadata: Dict[str, str]) -> int:
        name = self.naming.object_name(upload_id)
        declared_length = self.codec.decode(upload_id, metadata).declared_length
        offset = await self.get_offset(upload_id)
        written = 0

        async for chunk in chunks:
            if declared_length is not None and offset + len(chunk) > declared_length:
                raise UploadLengthExceeded(upload_id, offset, len(chunk), declared_length)

            await asyncio.shield(self.backend.append_block(name, chunk))
            offset += len(chunk)
            written += len(chunk)
            logger.debug(f"Appended {len(chunk)} bytes to upload {upload_id}, offset now {offset}")

        return written

    async def get_offset(self, upload_id: str) -> int:
        properties = await self.backend.get_properties(self.naming.object_name(upload_id))
        return properties.length

    async def set_metadata(self, upload_id: str, metadata: Dict[str, str]) -> None:
        await asyncio.shield(self.backend.set_metadata(self.naming.object_name(upload_id), metadata))

    def read(self, upload_id: str) -> AsyncIterator[bytes]:
        return self.backend.download_stream(self.naming.object_name(upload_id))

    async def delete(self, upload_id: str) -> bool:
        return await asyncio.shield(self.backend.delete_if_exists(self.naming.object_name(upload_id)))
