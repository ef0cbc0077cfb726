"""Tests for resolving local groups from claims."""

import itertools

import pytest

from src.sso_reconcile.core.services.groups.group_resolver import (
    MergeGroups,
    MergePreservingGroups,
    ReplaceGroups,
    apply_groups,
    policy_from_config,
    resolve_groups,
    split_aliases,
)
from src.sso_reconcile.core.types.claims import ClaimSet
from src.sso_reconcile.entities.core.user.entity import LocalUser
from src.sso_reconcile.runtime.config.config_data import SSOConfig


class TestResolveGroups:
    def test_department_mapping_with_defaults(self):
        claims = ClaimSet.from_pairs([("department", "eng")])

        groups = resolve_groups(claims, {"eng": "Editors,Translators"}, ["AllStaff"])

        assert groups == {"Editors", "Translators", "AllStaff"}

    def test_defaults_always_present(self):
        groups = resolve_groups(ClaimSet(), {"eng": "Editors"}, ["AllStaff", "Readers"])

        assert groups == {"AllStaff", "Readers"}

    def test_unmapped_values_contribute_nothing(self):
        claims = ClaimSet.from_pairs([("groups", "unknown"), ("department", "sales")])

        assert resolve_groups(claims, {"eng": "Editors"}, []) == set()

    def test_lookup_is_case_sensitive(self):
        claims = ClaimSet.from_pairs([("department", "ENG")])

        assert resolve_groups(claims, {"eng": "Editors"}, []) == set()

    def test_any_claim_name_can_match(self):
        claims = ClaimSet.from_pairs([("roles", "eng"), ("groups", "ops")])

        groups = resolve_groups(claims, {"eng": "Editors", "ops": "Admins"}, [])

        assert groups == {"Editors", "Admins"}

    def test_duplicates_collapse(self):
        claims = ClaimSet.from_pairs([("groups", "a"), ("groups", "b"), ("groups", "a")])

        groups = resolve_groups(claims, {"a": "Editors,Writers", "b": "Editors"}, ["Editors"])

        assert groups == {"Editors", "Writers"}

    def test_order_independent(self):
        pairs = [("groups", "a"), ("department", "eng"), ("groups", "b"), ("x", "y")]
        mapping = {"a": "A1,A2", "b": "B", "eng": "Editors"}
        expected = resolve_groups(ClaimSet.from_pairs(pairs), mapping, ["AllStaff"])

        for permutation in itertools.permutations(pairs):
            assert resolve_groups(ClaimSet.from_pairs(permutation), mapping, ["AllStaff"]) == expected

    def test_superset_of_defaults_and_only_mapped_aliases(self):
        pairs = [("groups", "a"), ("groups", "c")]
        mapping = {"a": "A1,A2", "b": "B"}
        defaults = ["D"]

        groups = resolve_groups(ClaimSet.from_pairs(pairs), mapping, defaults)

        assert set(defaults) <= groups
        assert groups - set(defaults) == {"A1", "A2"}

    @pytest.mark.parametrize(
        "mapped, expected",
        [
            ("Editors,Translators", ["Editors", "Translators"]),
            ("Editors, Translators", ["Editors", "Translators"]),
            ("Editors,,", ["Editors"]),
            ("", []),
        ],
    )
    def test_split_aliases(self, mapped, expected):
        assert split_aliases(mapped) == expected


class TestApplyGroups:
    def test_replace_clears_existing_roles(self):
        user = LocalUser(roles={"Writers", "Manual"})

        outcome = apply_groups(user, {"Editors"}, ReplaceGroups())

        assert user.roles == {"Editors"}
        assert outcome.is_ok

    def test_merge_keeps_existing_roles(self):
        user = LocalUser(roles={"Writers"})

        apply_groups(user, {"Editors"}, MergeGroups())

        assert user.roles == {"Writers", "Editors"}

    def test_merge_preserving_keeps_only_local_aliases(self):
        user = LocalUser(roles={"Writers", "BackOfficeOnly"})

        apply_groups(
            user,
            {"Editors"},
            MergePreservingGroups(local_only_aliases=frozenset({"BackOfficeOnly"})),
        )

        assert user.roles == {"BackOfficeOnly", "Editors"}

    def test_nothing_resolved_is_skipped(self):
        user = LocalUser(roles={"Writers"})

        outcome = apply_groups(user, set(), ReplaceGroups())

        assert user.roles == set()
        assert outcome.is_skipped

    def test_merge_with_nothing_resolved_is_skipped(self):
        user = LocalUser(roles={"Writers"})

        outcome = apply_groups(user, set(), MergeGroups())

        assert user.roles == {"Writers"}
        assert outcome.is_skipped
        assert outcome.reason == "no groups resolved from claims"


class TestPolicyFromConfig:
    def test_default_is_replace(self):
        assert isinstance(policy_from_config(SSOConfig()), ReplaceGroups)

    def test_merge(self):
        assert isinstance(policy_from_config(SSOConfig(group_sync_policy="merge")), MergeGroups)

    def test_merge_preserving_carries_local_aliases(self):
        policy = policy_from_config(
            SSOConfig(group_sync_policy="merge_preserving", local_only_groups=["Translators"])
        )

        assert isinstance(policy, MergePreservingGroups)
        assert policy.local_only_aliases == frozenset({"Translators"})
