"""Map external claims to local authorization groups."""

from collections.abc import Iterable, Mapping
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from src.sso_reconcile.core.models.outcome import StepOutcome
from src.sso_reconcile.core.types.claims import ClaimSet
from src.sso_reconcile.entities.core.user.entity import LocalUser
from src.sso_reconcile.runtime.config.config_data import SSOConfig


class ReplaceGroups(BaseModel):
    """Claims are authoritative: existing roles are cleared before adding."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["replace"] = "replace"


class MergeGroups(BaseModel):
    """Resolved groups are added; nothing is removed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["merge"] = "merge"


class MergePreservingGroups(BaseModel):
    """Claims are authoritative except for aliases managed in the back office."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["merge_preserving"] = "merge_preserving"
    local_only_aliases: frozenset[str] = frozenset()


GroupSyncPolicy = Annotated[
    Union[ReplaceGroups, MergeGroups, MergePreservingGroups],
    Field(discriminator="kind"),
]


def policy_from_config(sso_config: SSOConfig) -> GroupSyncPolicy:
    if sso_config.group_sync_policy == "merge":
        return MergeGroups()
    if sso_config.group_sync_policy == "merge_preserving":
        return MergePreservingGroups(local_only_aliases=frozenset(sso_config.local_only_groups))
    return ReplaceGroups()


def split_aliases(mapped: str) -> list[str]:
    """Split a comma separated alias list, dropping blanks.

    Aliases are stripped so "Editors, Translators" in a hand written lookup
    table maps to "Translators" rather than to an alias with a leading space
    that no group carries.
    """
    return [alias.strip() for alias in mapped.split(",") if alias.strip()]


def resolve_groups(
    claims: ClaimSet,
    mapping: Mapping[str, str],
    default_groups: Iterable[str],
) -> set[str]:
    """Resolve the local group aliases a user should hold.

    Any claim whose value is a key of ``mapping`` (case-sensitive, whatever the
    claim name) contributes the aliases it maps to. Default groups are always
    included. Unmapped claim values contribute nothing.
    """
    groups: set[str] = set()
    for claim in claims.claims:
        mapped = mapping.get(claim.value)
        if mapped is not None:
            groups.update(split_aliases(mapped))
    groups.update(default_groups)
    return groups


def apply_groups(
    user: LocalUser, resolved: set[str], policy: GroupSyncPolicy
) -> StepOutcome:
    """Write resolved groups to the user's role set according to ``policy``."""
    if isinstance(policy, ReplaceGroups):
        user.clear_roles()
    elif isinstance(policy, MergePreservingGroups):
        kept = {role for role in user.roles if role in policy.local_only_aliases}
        user.clear_roles()
        for role in kept:
            user.add_role(role)

    for alias in sorted(resolved):
        user.add_role(alias)

    if not resolved:
        return StepOutcome.skipped("groups", "no groups resolved from claims")
    return StepOutcome.ok("groups")
