"""Domain-specific exceptions for neo-uploads.

Errors raised by the upload engine itself: lifecycle state violations,
missing uploads, caller errors such as unknown checksum algorithms.
"""

from typing import Iterable, Optional

from .base import NeoUploadsError


class UploadError(NeoUploadsError):
    """Base class for upload lifecycle errors."""
    pass


class UploadNotFound(UploadError):
    """Raised when a mutating operation targets an upload that does not exist."""

    def __init__(self, upload_id: str):
        self.upload_id = upload_id
        super().__init__(
            f"Upload '{upload_id}' does not exist",
            error_code="UPLOAD_NOT_FOUND",
            details={"upload_id": upload_id},
        )


class UploadAlreadyExists(UploadError):
    """Raised when creating an upload whose object already exists."""

    def __init__(self, upload_id: str):
        self.upload_id = upload_id
        super().__init__(
            f"Upload '{upload_id}' already exists",
            error_code="UPLOAD_ALREADY_EXISTS",
            details={"upload_id": upload_id},
        )


class InvalidUploadState(UploadError):
    """Raised when an operation is invalid in the upload's current state."""

    def __init__(self, message: str, upload_id: Optional[str] = None, **details):
        self.upload_id = upload_id
        if upload_id:
            details["upload_id"] = upload_id
        super().__init__(message, error_code="INVALID_UPLOAD_STATE", details=details)


class UploadLengthExceeded(InvalidUploadState):
    """Raised when an append would write past the declared length."""

    def __init__(self, upload_id: str, offset: int, incoming: int, declared_length: int):
        self.offset = offset
        self.incoming = incoming
        self.declared_length = declared_length
        super().__init__(
            f"Request contains more data than the upload length. "
            f"Request data: {offset + incoming}, upload length: {declared_length}.",
            upload_id=upload_id,
            offset=offset,
            incoming=incoming,
            declared_length=declared_length,
        )


class InvalidMetadata(UploadError):
    """Raised when a raw metadata header cannot be parsed."""

    def __init__(self, message: str, entry: Optional[str] = None):
        self.entry = entry
        super().__init__(
            message,
            error_code="INVALID_METADATA",
            details={"entry": entry} if entry is not None else {},
        )


class UnsupportedChecksumAlgorithm(UploadError):
    """Raised when a checksum algorithm is not registered.

    Callers are expected to consult the supported algorithm list first, so
    this signals a programming error rather than a data problem.
    """

    def __init__(self, algorithm: str, supported: Iterable[str]):
        self.algorithm = algorithm
        self.supported = sorted(supported)
        super().__init__(
            f"Checksum algorithm '{algorithm}' is not supported. "
            f"Supported algorithms: {', '.join(self.supported)}",
            error_code="UNSUPPORTED_CHECKSUM_ALGORITHM",
            details={"algorithm": algorithm, "supported": self.supported},
        )


class UnsupportedStrategy(UploadError):
    """Raised when the backend cannot serve the requested write strategy."""

    def __init__(self, strategy: str, backend: str):
        self.strategy = strategy
        self.backend = backend
        super().__init__(
            f"Backend '{backend}' does not support the '{strategy}' strategy",
            error_code="UNSUPPORTED_STRATEGY",
            details={"strategy": strategy, "backend": backend},
        )
