"""In-memory Blob Backend for neo-uploads.

Supports both write models with the semantics of a block-oriented object
store: append objects grow by whole appends, block objects only change on
commit, and a commit replaces the block list and the metadata atomically.
Intended for development, tests and single-process use.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, Dict, List, Mapping, Optional, Sequence, Tuple

from ....core.exceptions import BackendFatalError, BlobAlreadyExists, BlobNotFound
from ....utils import utc_now
from ..entities import BlobListing, BlobProperties, CommittedBlock

logger = logging.getLogger(__name__)

APPEND_BLOB = "append"
BLOCK_BLOB = "block"


@dataclass
class MemoryBlob:
    """Stored object with its content model."""
    blob_type: str
    metadata: Dict[str, str] = field(default_factory=dict)
    data: bytearray = field(default_factory=bytearray)
    blocks: List[Tuple[str, bytes]] = field(default_factory=list)
    etag: str = field(default_factory=lambda: uuid.uuid4().hex)
    last_modified: datetime = field(default_factory=utc_now)

    @property
    def length(self) -> int:
        if self.blob_type == APPEND_BLOB:
            return len(self.data)
        return sum(len(data) for _, data in self.blocks)

    def content(self) -> bytes:
        if self.blob_type == APPEND_BLOB:
            return bytes(self.data)
        return b"".join(data for _, data in self.blocks)

    def touch(self) -> None:
        self.etag = uuid.uuid4().hex
        self.last_modified = utc_now()


class InMemoryBlobBackend:
    """Blob Backend keeping every object in process memory.

    Every operation yields to the event loop once before touching state, so
    concurrent callers interleave the way they would against a remote store.
    """

    def __init__(
        self,
        supports_append: bool = True,
        supports_staged: bool = True,
        download_chunk_size: int = 4 * 1024 * 1024,
    ):
        self._supports_append = supports_append
        self._supports_staged = supports_staged
        self.download_chunk_size = download_chunk_size
        self._blobs: Dict[str, MemoryBlob] = {}
        self._staged: Dict[str, Dict[str, bytes]] = {}

    @property
    def supports_append(self) -> bool:
        return self._supports_append

    @property
    def supports_staged(self) -> bool:
        return self._supports_staged

    async def create_empty(self, name: str, metadata: Mapping[str, str]) -> None:
        await asyncio.sleep(0)
        self._require_append()
        if name in self._blobs:
            raise BlobAlreadyExists(name)
        self._blobs[name] = MemoryBlob(blob_type=APPEND_BLOB, metadata=dict(metadata))
        logger.debug(f"Created append object {name}")

    async def append_block(self, name: str, data: bytes) -> None:
        await asyncio.sleep(0)
        self._require_append()
        blob = self._get(name)
        if blob.blob_type != APPEND_BLOB:
            raise BackendFatalError(f"Cannot append to block object {name}")
        blob.data.extend(data)
        blob.touch()

    async def stage_block(self, name: str, block_id: str, data: bytes) -> None:
        await asyncio.sleep(0)
        self._require_staged()
        blob = self._blobs.get(name)
        if blob is not None and blob.blob_type != BLOCK_BLOB:
            raise BackendFatalError(f"Cannot stage blocks on append object {name}")
        self._staged.setdefault(name, {})[block_id] = bytes(data)

    async def commit_block_list(
        self,
        name: str,
        block_ids: Sequence[str],
        metadata: Mapping[str, str],
        exclusive: bool = False,
    ) -> None:
        await asyncio.sleep(0)
        self._require_staged()
        existing = self._blobs.get(name)
        if existing is not None and exclusive:
            raise BlobAlreadyExists(name)
        if existing is not None and existing.blob_type != BLOCK_BLOB:
            raise BackendFatalError(f"Cannot commit blocks on append object {name}")

        staged = self._staged.get(name, {})
        committed = dict(existing.blocks) if existing is not None else {}
        blocks = []
        for block_id in block_ids:
            # Latest staged version wins over an already committed block
            if block_id in staged:
                blocks.append((block_id, staged[block_id]))
            elif block_id in committed:
                blocks.append((block_id, committed[block_id]))
            else:
                raise BackendFatalError(f"Invalid block list for {name}: unknown block {block_id}")

        self._blobs[name] = MemoryBlob(blob_type=BLOCK_BLOB, metadata=dict(metadata), blocks=blocks)
        self._staged.pop(name, None)

    async def list_committed_blocks(self, name: str) -> List[CommittedBlock]:
        await asyncio.sleep(0)
        blob = self._get(name)
        if blob.blob_type != BLOCK_BLOB:
            raise BackendFatalError(f"Object {name} has no block list")
        return [CommittedBlock(block_id=block_id, size=len(data)) for block_id, data in blob.blocks]

    async def get_properties(self, name: str) -> BlobProperties:
        await asyncio.sleep(0)
        blob = self._get(name)
        return BlobProperties(
            name=name,
            length=blob.length,
            metadata=dict(blob.metadata),
            etag=blob.etag,
            last_modified=blob.last_modified,
        )

    async def set_metadata(self, name: str, metadata: Mapping[str, str]) -> None:
        await asyncio.sleep(0)
        blob = self._get(name)
        blob.metadata = dict(metadata)
        blob.touch()

    async def download_stream(self, name: str) -> AsyncIterator[bytes]:
        await asyncio.sleep(0)
        content = self._get(name).content()
        for start in range(0, len(content), self.download_chunk_size):
            yield content[start:start + self.download_chunk_size]

    async def delete_if_exists(self, name: str) -> bool:
        await asyncio.sleep(0)
        self._staged.pop(name, None)
        return self._blobs.pop(name, None) is not None

    async def list_blobs(self, prefix: str) -> AsyncIterator[BlobListing]:
        await asyncio.sleep(0)
        for name in sorted(self._blobs):
            if name.startswith(prefix):
                blob = self._blobs.get(name)
                if blob is not None:
                    yield BlobListing(name=name, metadata=dict(blob.metadata))

    def names(self) -> List[str]:
        """Names of all stored objects."""
        return sorted(self._blobs)

    def _get(self, name: str) -> MemoryBlob:
        blob = self._blobs.get(name)
        if blob is None:
            raise BlobNotFound(name)
        return blob

    def _require_append(self) -> None:
        if not self._supports_append:
            raise BackendFatalError("Append objects are not supported by this backend")

    def _require_staged(self) -> None:
        if not self._supports_staged:
            raise BackendFatalError("Block objects are not supported by this backend")


def create_memory_backend(**kwargs) -> InMemoryBlobBackend:
    """Create an in-memory Blob Backend."""
    return InMemoryBlobBackend(**kwargs)
