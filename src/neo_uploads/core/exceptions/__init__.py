"""Exceptions module for neo-uploads.

This module provides the complete exception hierarchy for neo-uploads,
organized by domain concerns and infrastructure concerns.
"""

from .base import (
    NeoUploadsError,
    get_error_code,
    create_error_response,
)
from .domain import (
    UploadError,
    UploadNotFound,
    UploadAlreadyExists,
    InvalidUploadState,
    UploadLengthExceeded,
    InvalidMetadata,
    UnsupportedChecksumAlgorithm,
    UnsupportedStrategy,
)
from .infrastructure import (
    BackendError,
    BlobNotFound,
    BlobAlreadyExists,
    BackendTransientError,
    BackendFatalError,
)

__all__ = [
    # Base
    "NeoUploadsError",
    "get_error_code",
    "create_error_response",

    # Domain
    "UploadError",
    "UploadNotFound",
    "UploadAlreadyExists",
    "InvalidUploadState",
    "UploadLengthExceeded",
    "InvalidMetadata",
    "UnsupportedChecksumAlgorithm",
    "UnsupportedStrategy",

    # Infrastructure
    "BackendError",
    "BlobNotFound",
    "BlobAlreadyExists",
    "BackendTransientError",
    "BackendFatalError",
]
