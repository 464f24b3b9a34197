"""Uploads feature for neo-uploads.

Feature-First layout for resumable, chunked uploads:
- entities/: upload records, block references and backend protocols
- services/: the upload store façade, codecs, checksum and expiration
- strategies/: append-only and stage-then-commit write strategies
- adapters/: in-memory and Azure Blob Storage backends
"""

# Entities and protocols
from .entities import (
    BlobBackend,
    BlobListing,
    BlobProperties,
    BlockReference,
    ChunkDescriptor,
    CommittedBlock,
    UploadRecord,
    WriteStrategy,
)

# Services
from .services import (
    BlobNaming,
    ChecksumVerifier,
    ExpirationSweeper,
    StrategySelector,
    UploadMetadataCodec,
    UploadStore,
    choose_chunk_size,
    create_upload_store,
    parse_raw_metadata,
    serialize_raw_metadata,
    split,
)

# Strategies
from .strategies import AppendStrategy, BlockStagedStrategy

# Adapters
from .adapters import (
    AzureBlobBackend,
    InMemoryBlobBackend,
    create_azure_backend,
    create_memory_backend,
)

__all__ = [
    # Entities
    "BlobBackend",
    "BlobListing",
    "BlobProperties",
    "BlockReference",
    "ChunkDescriptor",
    "CommittedBlock",
    "UploadRecord",
    "WriteStrategy",

    # Services
    "BlobNaming",
    "ChecksumVerifier",
    "ExpirationSweeper",
    "StrategySelector",
    "UploadMetadataCodec",
    "UploadStore",
    "choose_chunk_size",
    "create_upload_store",
    "parse_raw_metadata",
    "serialize_raw_metadata",
    "split",

    # Strategies
    "AppendStrategy",
    "BlockStagedStrategy",

    # Adapters
    "AzureBlobBackend",
    "InMemoryBlobBackend",
    "create_azure_backend",
    "create_memory_backend",
]
