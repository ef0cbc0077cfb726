"""Reconcile local users with external login claims.

The host calls the reconciler on two occasions:

- ``on_auto_linking``: a local user was just created for an external identity
  and is not approved yet (provisioning, runs once per account);
- ``on_external_login``: every later successful external login.

Both are no-ops unless the host's scheme name is exactly this provider's.
"""

import httpx
from loguru import logger

from src.sso_reconcile.core.models.outcome import (
    ReconciliationReport,
    StepOutcome,
    Trigger,
)
from src.sso_reconcile.core.models.provider_options import (
    AutoLinkOptions,
    ExternalLoginProviderOptions,
)
from src.sso_reconcile.core.services.avatar.avatar_sync import AvatarSynchronizer
from src.sso_reconcile.core.services.groups.group_resolver import (
    GroupSyncPolicy,
    ReplaceGroups,
    apply_groups,
    policy_from_config,
    resolve_groups,
)
from src.sso_reconcile.core.services.identity.identity_resolver import apply_identity
from src.sso_reconcile.core.storage.account_store import AccountStore
from src.sso_reconcile.core.storage.content_store import ContentStore
from src.sso_reconcile.core.types.claims import ExternalLoginInfo
from src.sso_reconcile.entities.core.user.entity import LocalUser
from src.sso_reconcile.runtime.config.config_data import ConfigData, SSOConfig


class ExternalLoginReconciler:
    def __init__(
        self,
        sso_config: SSOConfig,
        avatar_synchronizer: AvatarSynchronizer | None = None,
    ):
        self._config = sso_config
        self._avatar_synchronizer = avatar_synchronizer
        self._login_policy: GroupSyncPolicy = policy_from_config(sso_config)

        if sso_config.sync_user_avatar and avatar_synchronizer is None:
            logger.warning(
                "sync_user_avatar is enabled but no avatar synchronizer was provided; "
                "profile pictures will not be synchronized"
            )

    @classmethod
    def from_config(
        cls,
        config: ConfigData,
        account_store: AccountStore,
        content_store: ContentStore,
        http_client: httpx.AsyncClient | None = None,
    ) -> "ExternalLoginReconciler":
        avatar_synchronizer = None
        if config.sso.sync_user_avatar and http_client is not None:
            avatar_synchronizer = AvatarSynchronizer.from_config(
                config, http_client, account_store, content_store
            )
        return cls(config.sso, avatar_synchronizer)

    @property
    def scheme_id(self) -> str:
        return self._config.scheme_id

    def handles(self, name: str | None) -> bool:
        return name == self.scheme_id

    def provider_options(self, name: str | None) -> ExternalLoginProviderOptions | None:
        """Login screen options for the named scheme, or None for other schemes."""
        if not self.handles(name):
            return None

        return ExternalLoginProviderOptions(
            scheme=self.scheme_id,
            auto_link=AutoLinkOptions(
                auto_link_external_account=True,
                default_user_groups=[],
                default_culture=None,
                allow_manual_linking=False,
            ),
            deny_local_login=self._config.deny_local_login,
            auto_redirect_login_to_external_provider=self._config.auto_redirect_login_to_external_provider,
        )

    async def on_auto_linking(
        self, name: str | None, user: LocalUser, login_info: ExternalLoginInfo
    ) -> ReconciliationReport | None:
        """Provision a newly auto-linked user.

        Returns None when the scheme does not match or the user is already
        approved.
        """
        if not self.handles(name):
            return None
        if user.is_approved:
            logger.debug("User {} is already approved; skipping provisioning", user.user_name)
            return None

        report = self._new_report("provisioning", user, login_info)
        report.add(self._sync_groups(user, login_info, ReplaceGroups()))
        report.add(self._sync_identity(user, login_info))
        report.add(await self._sync_avatar(user, login_info))

        user.is_approved = True
        report.add(StepOutcome.ok("approval"))
        report.user_name = user.user_name

        self._log_report(report)
        return report

    async def on_external_login(
        self, name: str | None, user: LocalUser, login_info: ExternalLoginInfo
    ) -> bool:
        """Refresh an existing user; always lets the sign-in continue."""
        await self.reconcile_login(name, user, login_info)
        return True

    async def reconcile_login(
        self, name: str | None, user: LocalUser, login_info: ExternalLoginInfo
    ) -> ReconciliationReport | None:
        if not self.handles(name):
            return None

        report = self._new_report("login", user, login_info)
        if self._config.set_groups_on_login:
            report.add(self._sync_groups(user, login_info, self._login_policy))
        else:
            report.add(StepOutcome.skipped("groups", "set_groups_on_login is disabled"))
        report.add(self._sync_identity(user, login_info))
        report.add(await self._sync_avatar(user, login_info))
        report.user_name = user.user_name

        self._log_report(report)
        return report

    def _sync_groups(
        self, user: LocalUser, login_info: ExternalLoginInfo, policy: GroupSyncPolicy
    ) -> StepOutcome:
        resolved = resolve_groups(
            login_info.claims, self._config.group_lookup, self._config.default_groups
        )
        logger.debug("Resolved groups for {}: {}", user.user_name, sorted(resolved))
        return apply_groups(user, resolved, policy)

    def _sync_identity(self, user: LocalUser, login_info: ExternalLoginInfo) -> StepOutcome:
        return apply_identity(
            user,
            login_info.claims,
            display_name_claim=self._config.display_name_claim,
            identity_name_claim=self._config.identity_name_claim,
        )

    async def _sync_avatar(self, user: LocalUser, login_info: ExternalLoginInfo) -> StepOutcome:
        if not self._config.sync_user_avatar:
            return StepOutcome.skipped("avatar", "sync_user_avatar is disabled")
        if self._avatar_synchronizer is None:
            return StepOutcome.skipped("avatar", "no avatar synchronizer configured")
        return await self._avatar_synchronizer.sync(login_info.access_token, user)

    def _new_report(
        self, trigger: Trigger, user: LocalUser, login_info: ExternalLoginInfo
    ) -> ReconciliationReport:
        return ReconciliationReport(
            trigger=trigger,
            scheme=login_info.login_provider,
            user_name=user.user_name,
        )

    @staticmethod
    def _log_report(report: ReconciliationReport) -> None:
        log = logger.bind(login=report.user_name or "-")
        if report.failures:
            log.warning("Reconciliation ({}) finished with failures: {}", report.trigger, report.summary())
        else:
            log.info("Reconciliation ({}) finished: {}", report.trigger, report.summary())
