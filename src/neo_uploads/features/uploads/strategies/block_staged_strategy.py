"""Stage-then-commit write strategy.

For backends where bytes become readable only when an ordered block list is
committed. The committed block list is the single source of truth: its
length is the next sequence number and its total size is the offset.

Callers must serialize appends per upload. Two concurrent appends read the
same committed list, stage the same block ids and the later commit wins;
the lost bytes show up as an offset smaller than the bytes reported
written.
"""

import asyncio
import logging
from typing import AsyncIterator, Dict, List, Tuple

from ....config import StrategyKind
from ....core.exceptions import (
    BlobAlreadyExists,
    BlobNotFound,
    UploadAlreadyExists,
    UploadLengthExceeded,
)
from ....core.value_objects import BlockId
from ..entities import BlobBackend, BlockReference, CommittedBlock
from ..services.blob_naming import BlobNaming
from ..services.chunk_splitter import describe
from ..services.metadata_codec import UploadMetadataCodec

logger = logging.getLogger(__name__)


class BlockStagedStrategy:
    """Write strategy over block objects with explicit commits.

    With ``hide_until_complete`` no object exists at the upload's name
    until the first commit; bookkeeping lives in a pending sidecar object
    that the first commit replaces.
    """

    kind = StrategyKind.STAGED

    def __init__(
        self,
        backend: BlobBackend,
        naming: BlobNaming,
        codec: UploadMetadataCodec,
        hide_until_complete: bool = False,
        create_is_idempotent: bool = False,
    ):
        self.backend = backend
        self.naming = naming
        self.codec = codec
        self.hide_until_complete = hide_until_complete
        self.create_is_idempotent = create_is_idempotent

    async def create_empty(self, upload_id: str, metadata: Dict[str, str]) -> None:
        if self.hide_until_complete:
            name = self.naming.pending_name(upload_id)
        else:
            name = self.naming.object_name(upload_id)

        try:
            await asyncio.shield(self.backend.commit_block_list(name, [], metadata, exclusive=True))
        except BlobAlreadyExists:
            if not self.create_is_idempotent:
                raise UploadAlreadyExists(upload_id)
            logger.debug(f"Block object {name} already exists, keeping it")

    async def get_committed_blocks(self, upload_id: str) -> List[CommittedBlock]:
        """Committed blocks in order; empty when nothing has been committed."""
        blocks, _ = await self._committed_blocks(self.naming.object_name(upload_id))
        return blocks

    async def append(self, upload_id: str, chunks: AsyncIterator[bytes], metadata: Dict[str, str]) -> int:
        name = self.naming.object_name(upload_id)
        declared_length = self.codec.decode(upload_id, metadata).declared_length

        committed, exists = await self._committed_blocks(name)
        offset = sum(block.size for block in committed)
        staged: List[BlockReference] = []

        async for descriptor, chunk in describe(chunks, len(committed)):
            if declared_length is not None and offset + descriptor.byte_length > declared_length:
                raise UploadLengthExceeded(upload_id, offset, descriptor.byte_length, declared_length)

            block_id = BlockId(descriptor.sequence_number)
            await asyncio.shield(self.backend.stage_block(name, block_id.value, chunk))
            staged.append(BlockReference(block_id=block_id, size=descriptor.byte_length))
            offset += descriptor.byte_length
            logger.debug(f"Staged block {descriptor.sequence_number} ({descriptor.byte_length} bytes) for upload {upload_id}")

        if not staged:
            return 0

        block_ids = [block.block_id for block in committed] + [block.block_id.value for block in staged]
        commit_metadata = self.codec.with_strategy(
            self.codec.with_block_count(metadata, len(block_ids)),
            self.kind,
        )
        await asyncio.shield(self.backend.commit_block_list(name, block_ids, commit_metadata))

        # Retry removal of a sidecar left behind by an earlier failed cleanup
        if not exists or self.hide_until_complete:
            await self._remove_pending(upload_id)

        written = sum(block.size for block in staged)
        logger.debug(f"Committed {len(staged)} blocks ({written} bytes) for upload {upload_id}, offset now {offset}")
        return written

    async def get_offset(self, upload_id: str) -> int:
        blocks = await self.get_committed_blocks(upload_id)
        return sum(block.size for block in blocks)

    async def set_metadata(self, upload_id: str, metadata: Dict[str, str]) -> None:
        try:
            await asyncio.shield(self.backend.set_metadata(self.naming.object_name(upload_id), metadata))
        except BlobNotFound:
            await asyncio.shield(self.backend.set_metadata(self.naming.pending_name(upload_id), metadata))

    async def read(self, upload_id: str) -> AsyncIterator[bytes]:
        name = self.naming.object_name(upload_id)
        try:
            await self.backend.get_properties(name)
        except BlobNotFound:
            # Hidden and never committed: empty content if the sidecar exists
            await self.backend.get_properties(self.naming.pending_name(upload_id))
            return

        async for data in self.backend.download_stream(name):
            yield data

    async def delete(self, upload_id: str) -> bool:
        deleted = await asyncio.shield(self.backend.delete_if_exists(self.naming.object_name(upload_id)))
        pending = await asyncio.shield(self.backend.delete_if_exists(self.naming.pending_name(upload_id)))
        return deleted or pending

    async def _remove_pending(self, upload_id: str) -> None:
        """Delete the pending sidecar after a commit.

        The commit already succeeded, so a failure here is logged rather
        than raised; the next commit retries and the sweeper ignores a
        sidecar that sits next to its object.
        """
        name = self.naming.pending_name(upload_id)
        try:
            await asyncio.shield(self.backend.delete_if_exists(name))
        except Exception as e:
            logger.error(f"Failed to remove pending sidecar {name}: {str(e)}")

    async def _committed_blocks(self, name: str) -> Tuple[List[CommittedBlock], bool]:
        try:
            return await self.backend.list_committed_blocks(name), True
        except BlobNotFound:
            return [], False
