"""Tests for the exception hierarchy."""

import pytest

from neo_uploads.core.exceptions import (
    BackendError,
    BackendFatalError,
    BackendTransientError,
    BlobNotFound,
    InvalidUploadState,
    NeoUploadsError,
    UnsupportedChecksumAlgorithm,
    UploadError,
    UploadLengthExceeded,
    UploadNotFound,
    create_error_response,
    get_error_code,
)


class TestExceptionHierarchy:
    """Test base classes and structured fields."""

    @pytest.mark.parametrize("exception", [
        UploadNotFound("u1"),
        UploadLengthExceeded("u1", 4, 4, 6),
        BlobNotFound("uploads/u1"),
        BackendTransientError("timeout", 503),
    ])
    def test_all_derive_from_base(self, exception):
        assert isinstance(exception, NeoUploadsError)

    def test_upload_and_backend_errors_are_separate(self):
        assert not issubclass(UploadError, BackendError)
        assert not issubclass(BackendError, UploadError)

    def test_length_exceeded_is_state_error(self):
        error = UploadLengthExceeded("u1", offset=4, incoming=4, declared_length=6)

        assert isinstance(error, InvalidUploadState)
        assert error.error_code == "INVALID_UPLOAD_STATE"
        assert error.details == {"upload_id": "u1", "offset": 4, "incoming": 4, "declared_length": 6}
        assert "Request data: 8, upload length: 6." in str(error)

    def test_backend_errors_carry_status(self):
        assert BackendTransientError("throttled", 429).details == {"status_code": 429}
        assert BackendFatalError("forbidden").details == {}

    def test_unsupported_algorithm_lists_supported(self):
        error = UnsupportedChecksumAlgorithm("crc32", ["sha1", "md5"])

        assert error.supported == ["md5", "sha1"]
        assert "md5, sha1" in str(error)


class TestErrorHelpers:
    """Test error code and response helpers."""

    def test_error_code_for_library_and_foreign_exceptions(self):
        assert get_error_code(UploadNotFound("u1")) == "UPLOAD_NOT_FOUND"
        assert get_error_code(KeyError("x")) == "KeyError"

    def test_default_error_code_is_class_name(self):
        assert NeoUploadsError("boom").error_code == "NeoUploadsError"

    def test_error_response(self):
        response = create_error_response(UploadNotFound("u1"))

        assert response == {
            "error": {
                "code": "UPLOAD_NOT_FOUND",
                "message": "Upload 'u1' does not exist",
                "details": {"upload_id": "u1"},
                "type": "UploadNotFound",
            }
        }
