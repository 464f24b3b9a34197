"""Upload store.

The single entry point a resumable upload protocol adapter talks to. Each
upload is bound at creation to one write strategy; the kind is persisted in
the upload's metadata and every later call is routed by it.

Read-style probes (existence, offset, length, metadata, expiration) answer
with an empty value for unknown uploads. Mutating calls on unknown uploads
raise UploadNotFound.
"""

import logging
from datetime import datetime
from typing import AsyncIterator, Dict, List, Optional, Tuple

from ....config import StrategyKind, UploadStoreSettings
from ....core.exceptions import BlobNotFound, InvalidUploadState, UnsupportedStrategy, UploadNotFound
from ....utils import generate_upload_id, utc_now
from ..entities import BlobBackend, ByteSource, UploadRecord, WriteStrategy
from ..strategies import AppendStrategy, BlockStagedStrategy
from .blob_naming import BlobNaming
from .chunk_splitter import choose_chunk_size, split
from .metadata_codec import UploadMetadataCodec
from .raw_metadata import parse_raw_metadata, serialize_raw_metadata
from .strategy_selector import StrategySelector

logger = logging.getLogger(__name__)


class UploadStore:
    """Lifecycle façade over a Blob Backend.

    The store keeps no per-upload state between calls. Appends to the same
    upload must be serialized by the caller.
    """

    def __init__(self, backend: BlobBackend, settings: Optional[UploadStoreSettings] = None):
        self.backend = backend
        self.settings = settings or UploadStoreSettings()
        self.naming = BlobNaming(self.settings.blob_prefix)
        self.codec = UploadMetadataCodec.from_settings(self.settings)
        self.selector = StrategySelector(backend, self.settings)

        self._strategies: Dict[StrategyKind, WriteStrategy] = {}
        if backend.supports_append:
            self._strategies[StrategyKind.APPEND] = AppendStrategy(
                backend,
                self.naming,
                self.codec,
                create_is_idempotent=self.settings.create_is_idempotent,
            )
        if backend.supports_staged:
            self._strategies[StrategyKind.STAGED] = BlockStagedStrategy(
                backend,
                self.naming,
                self.codec,
                hide_until_complete=self.settings.hide_until_complete,
                create_is_idempotent=self.settings.create_is_idempotent,
            )

    def supported_strategies(self) -> List[StrategyKind]:
        return list(self._strategies)

    def strategy(self, kind: StrategyKind) -> WriteStrategy:
        """Strategy instance for ``kind``."""
        try:
            return self._strategies[kind]
        except KeyError:
            raise UnsupportedStrategy(kind.value, type(self.backend).__name__) from None

    async def create_upload(
        self,
        declared_length: Optional[int] = None,
        raw_metadata: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> str:
        """Create a new upload and return its id.

        Args:
            declared_length: Total size in bytes, or None to defer it
            raw_metadata: Metadata header value (``key base64value,...``)
            expires_at: Optional absolute expiration

        Raises:
            InvalidMetadata: If ``raw_metadata`` is malformed
            UploadAlreadyExists: If the generated id is already taken
        """
        if declared_length is not None and declared_length < 0:
            raise ValueError(f"declared_length must not be negative, got {declared_length}")

        user_metadata = parse_raw_metadata(raw_metadata)
        kind = self.selector.select(declared_length)
        upload_id = generate_upload_id()

        metadata = self.codec.encode(
            user_metadata,
            declared_length,
            utc_now(),
            strategy=kind,
            expires_at=expires_at,
        )

        try:
            await self.strategy(kind).create_empty(upload_id, metadata)
        except Exception as e:
            logger.error(f"Failed to create upload with length {declared_length}: {str(e)}")
            raise

        logger.info(f"Created upload {upload_id} with length {declared_length} using {kind.value} strategy")
        return upload_id

    async def set_declared_length(self, upload_id: str, declared_length: int) -> None:
        """Declare the total length of an upload created with a deferred length.

        Raises:
            UploadNotFound: If the upload does not exist
            InvalidUploadState: If a length was already declared or the
                upload already holds more bytes than ``declared_length``
        """
        strategy, metadata = await self._require(upload_id)
        record = self.codec.decode(upload_id, metadata)

        if record.declared_length is not None:
            raise InvalidUploadState(
                f"Upload length for '{upload_id}' is already set to {record.declared_length}",
                upload_id=upload_id,
                declared_length=record.declared_length,
            )

        offset = await self._offset(strategy, upload_id)
        if declared_length < offset:
            raise InvalidUploadState(
                f"Upload length {declared_length} is smaller than the current offset {offset}",
                upload_id=upload_id,
                offset=offset,
                declared_length=declared_length,
            )

        optimal = self.selector.select(declared_length)
        if optimal != strategy.kind:
            logger.warning(
                f"Upload {upload_id} would use the {optimal.value} strategy at length {declared_length} "
                f"but is bound to {strategy.kind.value}"
            )

        await self._write_metadata(strategy, upload_id, self.codec.with_declared_length(metadata, declared_length))
        logger.debug(f"Set upload length for {upload_id} to {declared_length}")

    async def append(self, upload_id: str, source: ByteSource) -> int:
        """Append ``source`` at the upload's current offset.

        Returns:
            Bytes persisted by this call. On failure, the offset reported by
            get_offset tells the caller where to resume.

        Raises:
            UploadNotFound: If the upload does not exist
            UploadLengthExceeded: If the data would pass the declared length
        """
        strategy, metadata = await self._require(upload_id)
        record = self.codec.decode(upload_id, metadata)
        chunk_size = choose_chunk_size(record.declared_length, self.settings)

        try:
            return await strategy.append(upload_id, split(source, chunk_size), metadata)
        except BlobNotFound:
            raise UploadNotFound(upload_id) from None

    async def get_offset(self, upload_id: str) -> int:
        located = await self._locate(upload_id)
        if located is None:
            return 0
        return await self._offset(located[0], upload_id)

    async def get_declared_length(self, upload_id: str) -> Optional[int]:
        record = await self.get_upload(upload_id)
        return record.declared_length if record else None

    async def get_metadata(self, upload_id: str) -> Optional[str]:
        """User metadata in raw header form, or None for unknown uploads."""
        record = await self.get_upload(upload_id)
        if record is None:
            return None
        return serialize_raw_metadata(record.user_metadata)

    async def delete(self, upload_id: str) -> bool:
        located = await self._locate(upload_id)
        if located is None:
            return False

        deleted = await located[0].delete(upload_id)
        if deleted:
            logger.info(f"Deleted upload {upload_id}")
        return deleted

    async def set_expiration(self, upload_id: str, expires_at: Optional[datetime]) -> None:
        """Set or clear (with None) the upload's absolute expiration."""
        strategy, metadata = await self._require(upload_id)
        await self._write_metadata(strategy, upload_id, self.codec.with_expiration(metadata, expires_at))

    async def get_expiration(self, upload_id: str) -> Optional[datetime]:
        record = await self.get_upload(upload_id)
        return record.expires_at if record else None

    async def file_exists(self, upload_id: str) -> bool:
        return await self._locate(upload_id) is not None

    async def get_upload(self, upload_id: str) -> Optional[UploadRecord]:
        located = await self._locate(upload_id)
        if located is None:
            return None

        strategy, metadata = located
        record = self.codec.decode(upload_id, metadata)
        record.strategy = strategy.kind
        return record

    async def read_content(self, upload_id: str) -> AsyncIterator[bytes]:
        """Stream the bytes persisted so far.

        Raises:
            UploadNotFound: If the upload does not exist
        """
        strategy, _ = await self._require(upload_id)
        try:
            async for data in strategy.read(upload_id):
                yield data
        except BlobNotFound:
            raise UploadNotFound(upload_id) from None

    async def _locate(self, upload_id: str) -> Optional[Tuple[WriteStrategy, Dict[str, str]]]:
        """Find the upload's strategy and current metadata bag."""
        try:
            properties = await self.backend.get_properties(self.naming.object_name(upload_id))
        except BlobNotFound:
            properties = None

        if properties is not None:
            kind = self.codec.decode(upload_id, properties.metadata).strategy or self.settings.default_strategy
            return self.strategy(kind), dict(properties.metadata)

        if StrategyKind.STAGED not in self._strategies:
            return None

        try:
            properties = await self.backend.get_properties(self.naming.pending_name(upload_id))
        except BlobNotFound:
            return None
        return self._strategies[StrategyKind.STAGED], dict(properties.metadata)

    async def _require(self, upload_id: str) -> Tuple[WriteStrategy, Dict[str, str]]:
        located = await self._locate(upload_id)
        if located is None:
            raise UploadNotFound(upload_id)
        return located

    @staticmethod
    async def _offset(strategy: WriteStrategy, upload_id: str) -> int:
        try:
            return await strategy.get_offset(upload_id)
        except BlobNotFound:
            return 0

    @staticmethod
    async def _write_metadata(strategy: WriteStrategy, upload_id: str, metadata: Dict[str, str]) -> None:
        try:
            await strategy.set_metadata(upload_id, metadata)
        except BlobNotFound:
            raise UploadNotFound(upload_id) from None


def create_upload_store(backend: BlobBackend, settings: Optional[UploadStoreSettings] = None) -> UploadStore:
    """Create an upload store over ``backend``."""
    return UploadStore(backend, settings)
