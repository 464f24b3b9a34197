"""Tests for expiration sweeping."""

import logging
import pytest
from datetime import timedelta
from unittest.mock import patch

from neo_uploads.config import StrategyKind
from neo_uploads.core.exceptions import BackendTransientError
from neo_uploads.features.uploads.services import UploadStore


class TestGetExpiredIds:
    """Test which uploads count as expired."""

    @pytest.mark.asyncio
    async def test_expires_at_the_boundary_instant(self, staged_store, sweeper, fixed_now):
        upload_id = await staged_store.create_upload(10, expires_at=fixed_now)

        assert await sweeper.get_expired_ids(fixed_now - timedelta(microseconds=1)) == []
        assert await sweeper.get_expired_ids(fixed_now) == [upload_id]
        assert await sweeper.get_expired_ids(fixed_now + timedelta(seconds=1)) == [upload_id]

    @pytest.mark.asyncio
    async def test_uploads_without_expiration_never_expire(self, staged_store, sweeper, fixed_now):
        await staged_store.create_upload(10)

        assert await sweeper.get_expired_ids(fixed_now + timedelta(days=3650)) == []

    @pytest.mark.asyncio
    async def test_cleared_expiration_never_expires(self, staged_store, sweeper, fixed_now):
        upload_id = await staged_store.create_upload(10, expires_at=fixed_now)

        await staged_store.set_expiration(upload_id, None)

        assert await sweeper.get_expired_ids(fixed_now) == []

    @pytest.mark.asyncio
    async def test_only_expired_uploads_listed(self, store, sweeper, fixed_now):
        expired = await store.create_upload(10, expires_at=fixed_now - timedelta(hours=1))
        await store.create_upload(10, expires_at=fixed_now + timedelta(hours=1))

        assert await sweeper.get_expired_ids(fixed_now) == [expired]

    @pytest.mark.asyncio
    async def test_hidden_upload_listed_once(self, backend, codec, sweeper, fixed_now):
        metadata = codec.encode({}, 10, fixed_now, strategy=StrategyKind.STAGED, expires_at=fixed_now)
        await backend.commit_block_list("uploads/abc", [], metadata)
        await backend.commit_block_list("uploads/abc.pending", [], metadata)

        assert await sweeper.get_expired_ids(fixed_now) == ["abc"]

    @pytest.mark.asyncio
    async def test_pending_sidecar_expires(self, backend, settings_factory, sweeper, fixed_now):
        store = UploadStore(backend, settings_factory(hide_until_complete=True))
        upload_id = await store.create_upload(10, expires_at=fixed_now)

        assert await sweeper.get_expired_ids(fixed_now) == [upload_id]

    @pytest.mark.asyncio
    async def test_stale_sidecar_does_not_override_object_expiration(self, backend, settings_factory, sweeper, fixed_now):
        store = UploadStore(backend, settings_factory(hide_until_complete=True))
        upload_id = await store.create_upload(10, expires_at=fixed_now)

        real_delete = backend.delete_if_exists

        async def failing_sidecar_delete(name):
            if name.endswith(".pending"):
                raise BackendTransientError("throttled", 503)
            return await real_delete(name)

        with patch.object(backend, "delete_if_exists", side_effect=failing_sidecar_delete):
            await store.append(upload_id, b"0123")
        await store.set_expiration(upload_id, fixed_now + timedelta(days=1))

        assert backend.names() == [f"uploads/{upload_id}", f"uploads/{upload_id}.pending"]
        assert await sweeper.get_expired_ids(fixed_now) == []
        assert await sweeper.remove_expired(fixed_now) == 0
        assert await store.get_offset(upload_id) == 4

    @pytest.mark.asyncio
    async def test_object_expiration_wins_over_live_sidecar(self, backend, codec, sweeper, fixed_now):
        live = codec.encode({}, 10, fixed_now, expires_at=fixed_now + timedelta(days=1))
        expired = codec.encode({}, 10, fixed_now, expires_at=fixed_now)
        await backend.commit_block_list("uploads/abc", [], expired)
        await backend.commit_block_list("uploads/abc.pending", [], live)

        assert await sweeper.get_expired_ids(fixed_now) == ["abc"]

    @pytest.mark.asyncio
    async def test_objects_outside_prefix_ignored(self, backend, codec, sweeper, fixed_now):
        metadata = codec.encode({}, 10, fixed_now, expires_at=fixed_now)
        await backend.commit_block_list("other/abc", [], metadata)
        await backend.commit_block_list("uploads/nested/abc", [], metadata)

        assert await sweeper.get_expired_ids(fixed_now) == []


class TestRemoveExpired:
    """Test deleting expired uploads."""

    @pytest.mark.asyncio
    async def test_removes_expired_and_keeps_the_rest(self, store, sweeper, fixed_now):
        expired = await store.create_upload(10, expires_at=fixed_now)
        await store.append(expired, b"0123")
        live = await store.create_upload(10, expires_at=fixed_now + timedelta(days=1))

        assert await sweeper.remove_expired(fixed_now) == 1

        assert not await store.file_exists(expired)
        assert await store.file_exists(live)

    @pytest.mark.asyncio
    async def test_removes_hidden_upload(self, backend, settings_factory, sweeper, fixed_now):
        store = UploadStore(backend, settings_factory(hide_until_complete=True))
        await store.create_upload(10, expires_at=fixed_now)

        assert await sweeper.remove_expired(fixed_now) == 1
        assert backend.names() == []

    @pytest.mark.asyncio
    async def test_nothing_to_remove(self, sweeper, fixed_now):
        assert await sweeper.remove_expired(fixed_now) == 0

    @pytest.mark.asyncio
    async def test_failed_delete_is_logged_and_sweep_continues(self, staged_store, backend, sweeper, fixed_now, caplog):
        first = await staged_store.create_upload(10, expires_at=fixed_now)
        second = await staged_store.create_upload(10, expires_at=fixed_now)
        failing = sorted([first, second])[0]

        real_delete = backend.delete_if_exists

        async def flaky_delete(name):
            if name == f"uploads/{failing}":
                raise BackendTransientError("throttled", 503)
            return await real_delete(name)

        with patch.object(backend, "delete_if_exists", side_effect=flaky_delete):
            with caplog.at_level(logging.ERROR, logger="neo_uploads.features.uploads.services.expiration_sweeper"):
                removed = await sweeper.remove_expired(fixed_now)

        assert removed == 1
        assert f"Failed to remove expired upload {failing}" in caplog.text
        assert await staged_store.file_exists(failing)
