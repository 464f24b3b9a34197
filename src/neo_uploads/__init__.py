"""Neo-Uploads - resumable, chunked upload storage engine.

Persists large uploads incrementally into block-oriented object stores,
tracking offset, metadata and expiration behind one lifecycle contract for
both append-only and stage-then-commit backends.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import (
    StrategyKind,
    UploadStoreSettings,
    AzureBackendSettings,
    LoggingConfig,
    get_logger,
)

from .core.exceptions import (
    # Base Exception
    NeoUploadsError,

    # Domain
    UploadNotFound,
    UploadAlreadyExists,
    InvalidUploadState,
    UploadLengthExceeded,
    InvalidMetadata,
    UnsupportedChecksumAlgorithm,
    UnsupportedStrategy,

    # Backend
    BackendError,
    BlobNotFound,
    BlobAlreadyExists,
    BackendTransientError,
    BackendFatalError,

    # Utility Functions
    get_error_code,
    create_error_response,
)

from .core.value_objects import BlockId, Checksum

from .features.uploads import (
    UploadStore,
    UploadRecord,
    ChecksumVerifier,
    ExpirationSweeper,
    InMemoryBlobBackend,
    AzureBlobBackend,
    create_upload_store,
    create_memory_backend,
    create_azure_backend,
)

__all__ = [
    "__version__",

    # Configuration
    "StrategyKind",
    "UploadStoreSettings",
    "AzureBackendSettings",
    "LoggingConfig",
    "setup_logging",
    "get_logger",

    # Exceptions
    "NeoUploadsError",
    "UploadNotFound",
    "UploadAlreadyExists",
    "InvalidUploadState",
    "UploadLengthExceeded",
    "InvalidMetadata",
    "UnsupportedChecksumAlgorithm",
    "UnsupportedStrategy",
    "BackendError",
    "BlobNotFound",
    "BlobAlreadyExists",
    "BackendTransientError",
    "BackendFatalError",
    "get_error_code",
    "create_error_response",

    # Value objects
    "BlockId",
    "Checksum",

    # Uploads
    "UploadStore",
    "UploadRecord",
    "ChecksumVerifier",
    "ExpirationSweeper",
    "InMemoryBlobBackend",
    "AzureBlobBackend",
    "create_upload_store",
    "create_memory_backend",
    "create_azure_backend",
]
