"""Tests for the Azure Blob Storage backend.

No storage account is contacted: SDK clients are replaced with mocks.
"""

import asyncio
import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from neo_uploads.config import AzureBackendSettings
from neo_uploads.core.exceptions import (
    BackendFatalError,
    BackendTransientError,
    BlobAlreadyExists,
    BlobNotFound,
)
from neo_uploads.features.uploads.adapters import create_azure_backend, translate_errors

azure_exceptions = pytest.importorskip("azure.core.exceptions")


def http_error(cls, status_code):
    error = cls(message=f"status {status_code}")
    error.status_code = status_code
    return error


class TestTranslateErrors:
    """Test mapping of SDK errors onto backend errors."""

    def test_not_found(self):
        with pytest.raises(BlobNotFound):
            with translate_errors("uploads/u1"):
                raise http_error(azure_exceptions.ResourceNotFoundError, 404)

    def test_already_exists(self):
        with pytest.raises(BlobAlreadyExists):
            with translate_errors("uploads/u1"):
                raise http_error(azure_exceptions.ResourceExistsError, 409)

    def test_failed_precondition_on_exclusive_create(self):
        with pytest.raises(BlobAlreadyExists):
            with translate_errors("uploads/u1", exclusive=True):
                raise http_error(azure_exceptions.ResourceModifiedError, 412)

    def test_failed_precondition_otherwise_fatal(self):
        with pytest.raises(BackendFatalError):
            with translate_errors("uploads/u1"):
                raise http_error(azure_exceptions.ResourceModifiedError, 412)

    def test_authentication_failure_is_fatal(self):
        with pytest.raises(BackendFatalError):
            with translate_errors("uploads/u1"):
                raise http_error(azure_exceptions.ClientAuthenticationError, 403)

    @pytest.mark.parametrize("status_code", [408, 429, 500, 502, 503, 504])
    def test_retryable_status_is_transient(self, status_code):
        with pytest.raises(BackendTransientError) as exc_info:
            with translate_errors("uploads/u1"):
                raise http_error(azure_exceptions.HttpResponseError, status_code)

        assert exc_info.value.status_code == status_code

    @pytest.mark.parametrize("status_code", [400, 403, 413])
    def test_other_status_is_fatal(self, status_code):
        with pytest.raises(BackendFatalError):
            with translate_errors("uploads/u1"):
                raise http_error(azure_exceptions.HttpResponseError, status_code)

    @pytest.mark.parametrize("error", [
        azure_exceptions.ServiceRequestError("connection refused"),
        azure_exceptions.ServiceResponseError("connection reset"),
        asyncio.TimeoutError(),
    ])
    def test_connection_errors_are_transient(self, error):
        with pytest.raises(BackendTransientError):
            with translate_errors("uploads/u1"):
                raise error

    def test_unrelated_errors_pass_through(self):
        with pytest.raises(KeyError):
            with translate_errors("uploads/u1"):
                raise KeyError("x")


class TestAzureBlobBackend:
    """Test SDK calls made by the backend."""

    @pytest.fixture
    def blob_client(self):
        return AsyncMock()

    @pytest.fixture
    def backend(self, blob_client):
        pytest.importorskip("azure.storage.blob")
        from neo_uploads.features.uploads.adapters import AzureBlobBackend

        backend = AzureBlobBackend.__new__(AzureBlobBackend)
        backend.container = "uploads"
        backend.create_container_if_not_exists = True
        backend.client = AsyncMock()
        backend.container_client = MagicMock()
        backend.container_client.get_blob_client.return_value = blob_client
        backend.container_client.create_container = AsyncMock()
        return backend

    @pytest.mark.asyncio
    async def test_exclusive_commit_requires_missing_object(self, backend, blob_client):
        from azure.core import MatchConditions

        await backend.commit_block_list("uploads/u1", ["YQ=="], {"upload_length": "1"}, exclusive=True)

        blocks = blob_client.commit_block_list.await_args.args[0]
        kwargs = blob_client.commit_block_list.await_args.kwargs
        assert [block.id for block in blocks] == ["YQ=="]
        assert kwargs["metadata"] == {"upload_length": "1"}
        assert kwargs["match_condition"] == MatchConditions.IfMissing

    @pytest.mark.asyncio
    async def test_exclusive_commit_conflict(self, backend, blob_client):
        blob_client.commit_block_list.side_effect = http_error(azure_exceptions.ResourceModifiedError, 412)

        with pytest.raises(BlobAlreadyExists):
            await backend.commit_block_list("uploads/u1", [], {}, exclusive=True)

    @pytest.mark.asyncio
    async def test_committed_blocks(self, backend, blob_client):
        blob_client.get_block_list.return_value = (
            [SimpleNamespace(id="YQ==", size=4), SimpleNamespace(id="Yg==", size=2)],
            [],
        )

        blocks = await backend.list_committed_blocks("uploads/u1")

        blob_client.get_block_list.assert_awaited_once_with("committed")
        assert [(block.block_id, block.size) for block in blocks] == [("YQ==", 4), ("Yg==", 2)]

    @pytest.mark.asyncio
    async def test_delete_missing_object(self, backend, blob_client):
        blob_client.delete_blob.side_effect = http_error(azure_exceptions.ResourceNotFoundError, 404)

        assert await backend.delete_if_exists("uploads/u1") is False

    @pytest.mark.asyncio
    async def test_initialize_tolerates_existing_container(self, backend):
        backend.container_client.create_container.side_effect = http_error(azure_exceptions.ResourceExistsError, 409)

        await backend.initialize()

        backend.container_client.create_container.assert_awaited_once()


class TestCreateAzureBackend:
    """Test the settings-driven factory."""

    def test_connection_string_required(self, monkeypatch):
        monkeypatch.delenv("NEO_UPLOADS_AZURE_CONNECTION_STRING", raising=False)

        with pytest.raises(ValueError):
            create_azure_backend(AzureBackendSettings())
