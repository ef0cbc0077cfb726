"""Storage collaborators of the reconciler."""

from .account_store import AccountStore, InMemoryAccountStore, SqlAccountStore
from .content_store import ContentStore, InMemoryContentStore, LocalFileContentStore

__all__ = [
    "AccountStore",
    "ContentStore",
    "InMemoryAccountStore",
    "InMemoryContentStore",
    "LocalFileContentStore",
    "SqlAccountStore",
]
