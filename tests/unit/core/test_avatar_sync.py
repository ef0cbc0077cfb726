"""Tests for profile picture synchronization."""

import asyncio
import hashlib
from unittest.mock import patch

import httpx
import pytest

from src.sso_reconcile.core.errors import AccountStoreError, ContentStoreError
from src.sso_reconcile.core.services.avatar.avatar_sync import (
    AvatarSynchronizer,
    avatar_path_for,
)
from src.sso_reconcile.core.services.avatar.graph_client import create_graph_client
from src.sso_reconcile.core.storage import InMemoryAccountStore, InMemoryContentStore


def _path(etag: str) -> str:
    digest = hashlib.sha1(etag.encode("utf-8")).hexdigest()
    return f"UserAvatars/{digest}.jpg"


class BrokenContentStore(InMemoryContentStore):
    async def write_file(self, path, chunks, overwrite=True):
        raise ContentStoreError("disk full")


class UnavailableStore(InMemoryAccountStore):
    async def save(self, user):
        raise ConnectionError("database is down")


@pytest.fixture
def synchronizer(config, graph_client, account_store, content_store):
    return AvatarSynchronizer.from_config(config, graph_client, account_store, content_store)


class TestAvatarPath:
    def test_deterministic(self):
        assert avatar_path_for('"abc123"') == avatar_path_for('"abc123"')
        assert avatar_path_for('"abc123"') == _path('"abc123"')

    def test_quotes_are_part_of_the_hash(self):
        assert avatar_path_for('"abc123"') != avatar_path_for("abc123")

    def test_configurable_algorithm_and_prefix(self):
        digest = hashlib.sha256(b'"abc123"').hexdigest()

        assert avatar_path_for('"abc123"', "Avatars", "sha256") == f"Avatars/{digest}.jpg"

    @pytest.mark.asyncio
    async def test_unknown_algorithm_rejected(self, graph_client, account_store, content_store):
        with pytest.raises(ValueError):
            AvatarSynchronizer(graph_client, account_store, content_store, hash_algorithm="nope")


class TestGraphClient:
    @pytest.mark.asyncio
    async def test_timeout_and_pool_limits_from_config(self, config):
        config.avatar.max_connections = 7

        with patch.object(httpx, "AsyncClient", wraps=httpx.AsyncClient) as client_cls:
            client = create_graph_client(config)

        async with client:
            assert client.timeout == httpx.Timeout(config.avatar.fetch_timeout_seconds)
            assert client.timeout.read == 2.0
            limits = client_cls.call_args.kwargs["limits"]
            assert limits == httpx.Limits(max_connections=7, max_keepalive_connections=7)


class TestAvatarSync:
    @pytest.mark.asyncio
    async def test_first_sync_writes_and_saves(
        self, synchronizer, fake_graph, account_store, content_store, existing_user, access_token
    ):
        outcome = await synchronizer.sync(access_token, existing_user)

        assert outcome.is_ok
        path = _path('"abc123"')
        assert existing_user.avatar == path
        assert content_store.files[path] == fake_graph.body
        assert account_store.get(existing_user.id).avatar == path
        assert account_store.save_count == 1

        request = fake_graph.requests[0]
        assert str(request.url) == "https://graph.test/v1.0/me/photo/$value"
        assert request.headers["Authorization"] == f"Bearer {access_token}"

    @pytest.mark.asyncio
    async def test_unchanged_etag_does_not_rewrite(
        self, synchronizer, fake_graph, account_store, content_store, existing_user, access_token
    ):
        await synchronizer.sync(access_token, existing_user)
        outcome = await synchronizer.sync(access_token, existing_user)

        assert outcome.is_skipped
        assert len(fake_graph.requests) == 2
        assert content_store.writes == [_path('"abc123"')]
        assert fake_graph.body_reads == 1
        assert account_store.save_count == 1

    @pytest.mark.asyncio
    async def test_new_etag_writes_new_path(
        self, synchronizer, fake_graph, account_store, content_store, existing_user, access_token
    ):
        await synchronizer.sync(access_token, existing_user)
        fake_graph.etag = '"def456"'
        outcome = await synchronizer.sync(access_token, existing_user)

        assert outcome.is_ok
        assert existing_user.avatar == _path('"def456"')
        assert set(content_store.files) == {_path('"abc123"'), _path('"def456"')}
        assert account_store.save_count == 2

    @pytest.mark.asyncio
    async def test_no_access_token_is_noop(
        self, synchronizer, fake_graph, content_store, existing_user
    ):
        for token in (None, ""):
            outcome = await synchronizer.sync(token, existing_user)
            assert outcome.is_skipped

        assert fake_graph.requests == []
        assert content_store.writes == []

    @pytest.mark.asyncio
    async def test_no_photo(
        self, synchronizer, fake_graph, account_store, content_store, existing_user, access_token
    ):
        fake_graph.status_code = 404

        outcome = await synchronizer.sync(access_token, existing_user)

        assert outcome.is_skipped
        assert "404" in outcome.reason
        assert existing_user.avatar is None
        assert content_store.writes == []
        assert fake_graph.body_reads == 0
        assert account_store.save_count == 0

    @pytest.mark.asyncio
    async def test_missing_etag(
        self, synchronizer, fake_graph, content_store, existing_user, access_token
    ):
        fake_graph.etag = None

        outcome = await synchronizer.sync(access_token, existing_user)

        assert outcome.is_skipped
        assert existing_user.avatar is None
        assert content_store.writes == []


class TestAvatarSyncErrors:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [httpx.ConnectError("connection refused"), httpx.ReadTimeout("timed out")],
    )
    async def test_transport_errors_fail_the_step(
        self, synchronizer, fake_graph, account_store, content_store, existing_user, access_token, error
    ):
        fake_graph.error = error

        outcome = await synchronizer.sync(access_token, existing_user)

        assert outcome.is_failed
        assert type(error).__name__ in outcome.error
        assert existing_user.avatar is None
        assert content_store.writes == []
        assert account_store.save_count == 0

    @pytest.mark.asyncio
    async def test_content_store_failure_restores_avatar(
        self, config, graph_client, account_store, existing_user, access_token
    ):
        existing_user.avatar = "UserAvatars/old.jpg"
        await account_store.save(existing_user)
        synchronizer = AvatarSynchronizer.from_config(
            config, graph_client, account_store, BrokenContentStore()
        )

        outcome = await synchronizer.sync(access_token, existing_user)

        assert outcome.is_failed
        assert "ContentStoreError" in outcome.error
        assert existing_user.avatar == "UserAvatars/old.jpg"
        assert account_store.get(existing_user.id).avatar == "UserAvatars/old.jpg"
        assert account_store.save_count == 1

    @pytest.mark.asyncio
    async def test_account_store_failure_raises(
        self, config, graph_client, content_store, existing_user, access_token
    ):
        store = UnavailableStore([existing_user])
        synchronizer = AvatarSynchronizer.from_config(config, graph_client, store, content_store)

        with pytest.raises(AccountStoreError):
            await synchronizer.sync(access_token, existing_user)

    @pytest.mark.asyncio
    async def test_unpersisted_user_is_saved(
        self, config, graph_client, empty_account_store, content_store, new_user, login, access_token
    ):
        new_user.user_name = login
        synchronizer = AvatarSynchronizer.from_config(
            config, graph_client, empty_account_store, content_store
        )

        outcome = await synchronizer.sync(access_token, new_user)

        assert outcome.is_ok
        assert empty_account_store.get(new_user.id).avatar == _path('"abc123"')

    @pytest.mark.asyncio
    async def test_cancellation_propagates(
        self, synchronizer, fake_graph, account_store, content_store, existing_user, access_token
    ):
        fake_graph.hang = True

        task = asyncio.create_task(synchronizer.sync(access_token, existing_user))
        await asyncio.wait_for(fake_graph.started.wait(), 1)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert content_store.writes == []
        assert account_store.save_count == 0
