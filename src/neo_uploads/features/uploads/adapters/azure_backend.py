"""Azure Blob Storage backend.

Append uploads use append blobs and staged uploads use block blobs. Azure
SDK errors are translated into the neo-uploads backend error taxonomy.
"""

import asyncio
import logging
from contextlib import contextmanager
from typing import AsyncIterator, Iterator, List, Mapping, Optional, Sequence

from ....config import AzureBackendSettings
from ....core.exceptions import (
    BackendFatalError,
    BackendTransientError,
    BlobAlreadyExists,
    BlobNotFound,
)
from ..entities import BlobListing, BlobProperties, CommittedBlock

logger = logging.getLogger(__name__)

TRANSIENT_STATUS_CODES = {408, 429, 500, 502, 503, 504}


@contextmanager
def translate_errors(name: str, exclusive: bool = False) -> Iterator[None]:
    """Map Azure SDK exceptions raised inside the block to backend errors."""
    from azure.core.exceptions import (
        ClientAuthenticationError,
        HttpResponseError,
        ResourceExistsError,
        ResourceModifiedError,
        ResourceNotFoundError,
        ServiceRequestError,
        ServiceResponseError,
    )

    try:
        yield
    except ResourceNotFoundError:
        raise BlobNotFound(name) from None
    except ResourceExistsError:
        raise BlobAlreadyExists(name) from None
    except ResourceModifiedError as e:
        if exclusive:
            raise BlobAlreadyExists(name) from None
        raise BackendFatalError(f"Precondition failed for {name}: {e.message}", e.status_code) from e
    except ClientAuthenticationError as e:
        raise BackendFatalError(f"Authentication failed for {name}: {e.message}", e.status_code) from e
    except HttpResponseError as e:
        if e.status_code in TRANSIENT_STATUS_CODES:
            raise BackendTransientError(f"Azure request for {name} failed: {e.message}", e.status_code) from e
        raise BackendFatalError(f"Azure request for {name} failed: {e.message}", e.status_code) from e
    except (ServiceRequestError, ServiceResponseError, asyncio.TimeoutError) as e:
        raise BackendTransientError(f"Azure connection error for {name}: {str(e)}") from e


class AzureBlobBackend:
    """
    Azure Blob Storage implementation of the Blob Backend protocol.

    Block ids are passed through to the SDK, which base64-encodes them on
    the wire and decodes them when listing, so ids round-trip unchanged.
    """

    supports_append = True
    supports_staged = True

    def __init__(self, connection_string: str, container: str, create_container_if_not_exists: bool = True):
        """
        Initialize Azure blob backend.

        Args:
            connection_string: Azure Storage connection string
            container: Container name
            create_container_if_not_exists: Create the container in initialize()
        """
        try:
            from azure.storage.blob.aio import BlobServiceClient
        except ImportError:
            raise ImportError(
                "azure-storage-blob required for the Azure backend. "
                "Install with: pip install neo-uploads[azure]"
            )

        self.client = BlobServiceClient.from_connection_string(connection_string)
        self.container = container
        self.create_container_if_not_exists = create_container_if_not_exists
        self.container_client = self.client.get_container_client(container)

    async def initialize(self) -> None:
        """Ensure the container exists when configured to create it."""
        if not self.create_container_if_not_exists:
            return

        try:
            with translate_errors(self.container):
                await self.container_client.create_container()
            logger.info(f"Created blob container {self.container}")
        except BlobAlreadyExists:
            logger.debug(f"Blob container {self.container} already exists")

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> "AzureBlobBackend":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _blob(self, name: str):
        return self.container_client.get_blob_client(name)

    async def create_empty(self, name: str, metadata: Mapping[str, str]) -> None:
        from azure.core import MatchConditions

        with translate_errors(name, exclusive=True):
            await self._blob(name).create_append_blob(
                metadata=dict(metadata),
                match_condition=MatchConditions.IfMissing,
            )

    async def append_block(self, name: str, data: bytes) -> None:
        with translate_errors(name):
            await self._blob(name).append_block(data, length=len(data))

    async def stage_block(self, name: str, block_id: str, data: bytes) -> None:
        with translate_errors(name):
            await self._blob(name).stage_block(block_id, data, length=len(data))

    async def commit_block_list(
        self,
        name: str,
        block_ids: Sequence[str],
        metadata: Mapping[str, str],
        exclusive: bool = False,
    ) -> None:
        from azure.core import MatchConditions
        from azure.storage.blob import BlobBlock, BlockState

        kwargs = {"match_condition": MatchConditions.IfMissing} if exclusive else {}
        blocks = [BlobBlock(block_id=block_id, state=BlockState.LATEST) for block_id in block_ids]

        with translate_errors(name, exclusive=exclusive):
            await self._blob(name).commit_block_list(blocks, metadata=dict(metadata), **kwargs)

    async def list_committed_blocks(self, name: str) -> List[CommittedBlock]:
        with translate_errors(name):
            committed, _ = await self._blob(name).get_block_list("committed")
        return [CommittedBlock(block_id=block.id, size=block.size) for block in committed]

    async def get_properties(self, name: str) -> BlobProperties:
        with translate_errors(name):
            props = await self._blob(name).get_blob_properties()
        return BlobProperties(
            name=name,
            length=props.size,
            metadata=dict(props.metadata or {}),
            etag=props.etag,
            last_modified=props.last_modified,
        )

    async def set_metadata(self, name: str, metadata: Mapping[str, str]) -> None:
        with translate_errors(name):
            await self._blob(name).set_blob_metadata(metadata=dict(metadata))

    async def download_stream(self, name: str) -> AsyncIterator[bytes]:
        with translate_errors(name):
            downloader = await self._blob(name).download_blob()
            async for chunk in downloader.chunks():
                yield chunk

    async def delete_if_exists(self, name: str) -> bool:
        try:
            with translate_errors(name):
                await self._blob(name).delete_blob(delete_snapshots="include")
        except BlobNotFound:
            return False
        return True

    async def list_blobs(self, prefix: str) -> AsyncIterator[BlobListing]:
        with translate_errors(prefix):
            async for blob in self.container_client.list_blobs(name_starts_with=prefix, include=["metadata"]):
                yield BlobListing(name=blob.name, metadata=dict(blob.metadata or {}))


def create_azure_backend(settings: Optional[AzureBackendSettings] = None) -> AzureBlobBackend:
    """Create an Azure backend from settings (environment by default)."""
    settings = settings or AzureBackendSettings()
    if settings.connection_string is None:
        raise ValueError("NEO_UPLOADS_AZURE_CONNECTION_STRING is required for the Azure backend")

    return AzureBlobBackend(
        connection_string=settings.connection_string.get_secret_value(),
        container=settings.container_name,
        create_container_if_not_exists=settings.create_container_if_not_exists,
    )
