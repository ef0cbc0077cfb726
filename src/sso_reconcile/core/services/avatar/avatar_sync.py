"""Profile picture synchronization from the Microsoft Graph API.

Pictures are stored under a path derived from the ETag of the photo resource,
so a picture is downloaded and written once per version. When the ETag has
not changed the computed path equals the stored one, the account store reports
the user as clean and the response body is never read.
"""

import hashlib
from collections.abc import Awaitable

import httpx
from loguru import logger

from src.sso_reconcile.core.errors import AccountStoreError, ContentStoreError
from src.sso_reconcile.core.models.outcome import StepOutcome
from src.sso_reconcile.core.services.avatar.graph_client import photo_url
from src.sso_reconcile.core.storage.account_store import AccountStore
from src.sso_reconcile.core.storage.content_store import ContentStore
from src.sso_reconcile.entities.core.user.entity import LocalUser
from src.sso_reconcile.runtime.config.config_data import ConfigData


def avatar_path_for(
    etag: str, path_prefix: str = "UserAvatars", hash_algorithm: str = "sha1"
) -> str:
    """Media path of the picture version identified by ``etag``.

    The ETag is hashed exactly as received, quotes and weak prefix included.
    """
    digest = hashlib.new(hash_algorithm, etag.encode("utf-8")).hexdigest()
    return f"{path_prefix}/{digest}.jpg"


async def _store_call(awaitable: Awaitable, action: str):
    try:
        return await awaitable
    except AccountStoreError:
        raise
    except Exception as e:
        raise AccountStoreError(f"Account store failed to {action}") from e


class AvatarSynchronizer:
    """Copies the signed-in user's Graph profile picture to the media store."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        account_store: AccountStore,
        content_store: ContentStore,
        graph_endpoint: str = "https://graph.microsoft.com",
        path_prefix: str = "UserAvatars",
        hash_algorithm: str = "sha1",
    ):
        hashlib.new(hash_algorithm)  # fail fast on unknown algorithms
        self._http_client = http_client
        self._account_store = account_store
        self._content_store = content_store
        self._graph_endpoint = graph_endpoint
        self._path_prefix = path_prefix
        self._hash_algorithm = hash_algorithm

    @classmethod
    def from_config(
        cls,
        config: ConfigData,
        http_client: httpx.AsyncClient,
        account_store: AccountStore,
        content_store: ContentStore,
    ) -> "AvatarSynchronizer":
        return cls(
            http_client=http_client,
            account_store=account_store,
            content_store=content_store,
            graph_endpoint=config.sso.microsoft_graph_endpoint,
            path_prefix=config.avatar.path_prefix,
            hash_algorithm=config.avatar.hash_algorithm,
        )

    def avatar_path(self, etag: str) -> str:
        return avatar_path_for(etag, self._path_prefix, self._hash_algorithm)

    async def sync(self, access_token: str | None, user: LocalUser) -> StepOutcome:
        """Bring the user's avatar up to date with the Graph photo.

        Remote and media failures are reported as a failed outcome and never
        raised. Account store failures raise ``AccountStoreError``.
        Cancellation of the calling task aborts the request.
        """
        if not access_token:
            return StepOutcome.skipped("avatar", "no access token")

        url = photo_url(self._graph_endpoint)
        headers = {"Authorization": f"Bearer {access_token}"}
        target = user
        previous = (user.avatar, user.avatar)

        try:
            async with self._http_client.stream("GET", url, headers=headers) as response:
                if not response.is_success:
                    logger.debug(
                        "No profile picture for {}: graph returned {}",
                        user.user_name,
                        response.status_code,
                    )
                    return StepOutcome.skipped(
                        "avatar", f"photo request returned {response.status_code}"
                    )

                etag = response.headers.get("etag")
                if not etag:
                    return StepOutcome.skipped("avatar", "photo response has no ETag")

                path = self.avatar_path(etag)
                target = await self._find_target(user)
                previous = (user.avatar, target.avatar)
                target.avatar = path
                user.avatar = path

                if not await _store_call(self._account_store.is_dirty(target), "check user state"):
                    return StepOutcome.skipped("avatar", "avatar unchanged")

                await self._content_store.write_file(path, response.aiter_bytes(), overwrite=True)
        except (httpx.HTTPError, ContentStoreError) as e:
            user.avatar, target.avatar = previous
            logger.warning("Profile picture sync failed for {}: {}", user.user_name, e)
            return StepOutcome.failed("avatar", e)

        await _store_call(self._account_store.save(target), "save user")
        logger.info("Updated profile picture of {} to {}", user.user_name, target.avatar)
        return StepOutcome.ok("avatar")

    async def _find_target(self, user: LocalUser) -> LocalUser:
        """Prefer the persisted record of the user; fall back to the given entity."""
        if not user.user_name:
            return user
        persisted = await _store_call(
            self._account_store.find_by_login_identifier(user.user_name), "find user"
        )
        return persisted if persisted is not None else user
