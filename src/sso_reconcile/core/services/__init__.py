"""Core services exports."""

# Avatar Services
from .avatar.avatar_sync import AvatarSynchronizer, avatar_path_for
from .avatar.graph_client import create_graph_client

# Group Services
from .groups.group_resolver import (
    GroupSyncPolicy,
    MergeGroups,
    MergePreservingGroups,
    ReplaceGroups,
    apply_groups,
    resolve_groups,
)

# Identity Services
from .identity.identity_resolver import (
    apply_identity,
    resolve_display_name,
    resolve_login_identifier,
)

# Reconciliation
from .reconciliation.orchestrator import ExternalLoginReconciler

__all__ = [
    # Avatar Services
    "AvatarSynchronizer",
    "avatar_path_for",
    "create_graph_client",
    # Group Services
    "GroupSyncPolicy",
    "MergeGroups",
    "MergePreservingGroups",
    "ReplaceGroups",
    "apply_groups",
    "resolve_groups",
    # Identity Services
    "apply_identity",
    "resolve_display_name",
    "resolve_login_identifier",
    # Reconciliation
    "ExternalLoginReconciler",
]
