"""Infrastructure-specific exceptions for neo-uploads.

This module defines exceptions raised by Blob Backend implementations.
Backends translate their SDK errors into this taxonomy; the engine passes
them through unchanged except for not-found conversions on read probes.
"""

from typing import Optional

from .base import NeoUploadsError


class BackendError(NeoUploadsError):
    """Base class for storage backend errors."""
    pass


class BlobNotFound(BackendError):
    """Raised when an object or its block list does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Blob not found: {name}",
            error_code="BLOB_NOT_FOUND",
            details={"blob_name": name},
        )


class BlobAlreadyExists(BackendError):
    """Raised when an exclusive create hits an existing object."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Blob already exists: {name}",
            error_code="BLOB_ALREADY_EXISTS",
            details={"blob_name": name},
        )


class BackendTransientError(BackendError):
    """Timeouts, throttling and server-side failures.

    Retryable with backoff by a policy wrapping backend calls.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(
            message,
            error_code="BACKEND_TRANSIENT",
            details={"status_code": status_code} if status_code is not None else {},
        )


class BackendFatalError(BackendError):
    """Permission and configuration failures. Never retried."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(
            message,
            error_code="BACKEND_FATAL",
            details={"status_code": status_code} if status_code is not None else {},
        )
