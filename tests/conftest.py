"""Pytest configuration and fixtures for neo-uploads tests."""

import pytest
from datetime import datetime, timezone

from neo_uploads.config import StrategyKind, UploadStoreSettings
from neo_uploads.features.uploads.adapters import InMemoryBlobBackend
from neo_uploads.features.uploads.services import (
    BlobNaming,
    ChecksumVerifier,
    ExpirationSweeper,
    UploadMetadataCodec,
    UploadStore,
)


def make_settings(**overrides) -> UploadStoreSettings:
    """Settings with tiny chunk sizes so small payloads span several chunks."""
    values = dict(
        blob_prefix="uploads",
        default_chunk_size=4,
        max_chunk_size=8,
        small_upload_threshold=16,
        large_upload_threshold=64,
    )
    values.update(overrides)
    return UploadStoreSettings(**values)


async def collect(stream) -> bytes:
    """Concatenate an async byte stream."""
    data = bytearray()
    async for chunk in stream:
        data.extend(chunk)
    return bytes(data)


@pytest.fixture
def backend():
    """Fresh in-memory backend supporting both write models."""
    return InMemoryBlobBackend()


@pytest.fixture
def settings():
    """Store settings with the staged strategy as default."""
    return make_settings(default_strategy=StrategyKind.STAGED)


@pytest.fixture
def naming(settings):
    return BlobNaming(settings.blob_prefix)


@pytest.fixture
def codec(settings):
    return UploadMetadataCodec.from_settings(settings)


@pytest.fixture
def staged_store(backend, settings):
    """Upload store binding new uploads to the staged strategy."""
    return UploadStore(backend, settings)


@pytest.fixture
def append_store(backend):
    """Upload store binding new uploads to the append strategy."""
    return UploadStore(backend, make_settings(default_strategy=StrategyKind.APPEND))


@pytest.fixture(params=[StrategyKind.APPEND, StrategyKind.STAGED], ids=["append", "staged"])
def store(request, backend):
    """Upload store parametrized over both strategies."""
    return UploadStore(backend, make_settings(default_strategy=request.param))


@pytest.fixture
def verifier(backend, naming):
    return ChecksumVerifier(backend, naming)


@pytest.fixture
def sweeper(backend, naming, codec):
    return ExpirationSweeper(backend, naming, codec)


@pytest.fixture
def fixed_now():
    """Fixed reference time for expiration tests."""
    return datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings_factory():
    """Factory building store settings with test chunk sizes."""
    return make_settings


@pytest.fixture
def read_all():
    """Helper draining an async byte stream into bytes."""
    return collect
