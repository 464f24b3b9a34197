"""Upload protocols for neo-uploads.

This module defines the protocol interfaces between the upload engine and
its collaborators: the Blob Backend that stores bytes and metadata, and the
write strategies that map "append at offset" onto a backend write model.
"""

from abc import abstractmethod
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Dict,
    List,
    Mapping,
    Sequence,
    Union,
)
from typing_extensions import Protocol, runtime_checkable

from ....config import StrategyKind
from .blob_properties import BlobListing, BlobProperties, CommittedBlock

# Anything the chunk splitter can consume: plain bytes, an async iterable of
# bytes, or an object with a sync or async read(size) method.
ByteSource = Union[bytes, bytearray, memoryview, AsyncIterable[bytes], Any]


@runtime_checkable
class BlobBackend(Protocol):
    """Protocol for block-oriented object stores.

    All names are full object names. Missing objects raise BlobNotFound and
    exclusive creates over an existing object raise BlobAlreadyExists.
    """

    @property
    @abstractmethod
    def supports_append(self) -> bool:
        """Whether append-only objects are available."""
        ...

    @property
    @abstractmethod
    def supports_staged(self) -> bool:
        """Whether stage-then-commit block objects are available."""
        ...

    @abstractmethod
    async def create_empty(self, name: str, metadata: Mapping[str, str]) -> None:
        """Create a zero-length append-capable object, failing if it exists."""
        ...

    @abstractmethod
    async def append_block(self, name: str, data: bytes) -> None:
        """Append bytes to the end of an append-capable object."""
        ...

    @abstractmethod
    async def stage_block(self, name: str, block_id: str, data: bytes) -> None:
        """Stage an uncommitted block. Re-staging the same id replaces it."""
        ...

    @abstractmethod
    async def commit_block_list(
        self,
        name: str,
        block_ids: Sequence[str],
        metadata: Mapping[str, str],
        exclusive: bool = False,
    ) -> None:
        """Atomically replace the committed block list and the metadata.

        With ``exclusive`` the commit fails with BlobAlreadyExists when the
        object already exists.
        """
        ...

    @abstractmethod
    async def list_committed_blocks(self, name: str) -> List[CommittedBlock]:
        """Committed blocks in commit order."""
        ...

    @abstractmethod
    async def get_properties(self, name: str) -> BlobProperties:
        """Length, metadata and version tag of an object."""
        ...

    @abstractmethod
    async def set_metadata(self, name: str, metadata: Mapping[str, str]) -> None:
        """Replace the metadata bag of an existing object."""
        ...

    @abstractmethod
    def download_stream(self, name: str) -> AsyncIterator[bytes]:
        """Stream the committed content of an object."""
        ...

    @abstractmethod
    async def delete_if_exists(self, name: str) -> bool:
        """Delete an object, returning whether it existed."""
        ...

    @abstractmethod
    def list_blobs(self, prefix: str) -> AsyncIterator[BlobListing]:
        """List objects whose name starts with ``prefix``, with metadata."""
        ...


@runtime_checkable
class WriteStrategy(Protocol):
    """Protocol for the write model bound to an upload.

    Offsets are always derived from the backend; a strategy keeps no state
    between calls.
    """

    @property
    @abstractmethod
    def kind(self) -> StrategyKind:
        """Persisted strategy tag."""
        ...

    @abstractmethod
    async def create_empty(self, upload_id: str, metadata: Dict[str, str]) -> None:
        """Create the storage for a new upload."""
        ...

    @abstractmethod
    async def append(
        self,
        upload_id: str,
        chunks: AsyncIterator[bytes],
        metadata: Dict[str, str],
    ) -> int:
        """Persist chunks after the current offset, returning bytes written.

        ``metadata`` is the upload's current backend metadata bag.
        """
        ...

    @abstractmethod
    async def get_offset(self, upload_id: str) -> int:
        """Bytes durably persisted so far."""
        ...

    @abstractmethod
    async def set_metadata(self, upload_id: str, metadata: Dict[str, str]) -> None:
        """Replace the upload's backend metadata bag."""
        ...

    @abstractmethod
    def read(self, upload_id: str) -> AsyncIterator[bytes]:
        """Stream the upload's persisted content."""
        ...

    @abstractmethod
    async def delete(self, upload_id: str) -> bool:
        """Remove every object belonging to the upload."""
        ...
