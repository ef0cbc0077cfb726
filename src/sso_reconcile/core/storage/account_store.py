"""Local account store interface and implementations.

The account store owns local users and is the only authority on whether a
user has unsaved changes. The reconciler mutates users it receives and asks
the store to persist them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from src.sso_reconcile.core.errors import AccountStoreError
from src.sso_reconcile.entities.core.user.entity import LocalUser
from src.sso_reconcile.entities.core.user.repository import UserRepository


class AccountStore(ABC):
    """Abstract interface for local account stores."""

    @abstractmethod
    async def find_by_login_identifier(self, login: str) -> LocalUser | None:
        """Find the persisted user with the given login identifier.

        Args:
            login: Login identifier (user name)

        Returns:
            The user or None if no user has that login
        """
        pass

    @abstractmethod
    async def save(self, user: LocalUser) -> None:
        """Persist the user.

        Raises:
            AccountStoreError: If the store is unavailable
        """
        pass

    @abstractmethod
    async def is_dirty(self, user: LocalUser) -> bool:
        """Check whether the user differs from its persisted state.

        A user that was never persisted is dirty.
        """
        pass


class InMemoryAccountStore(AccountStore):
    """Account store keeping snapshots of saved users in memory."""

    def __init__(self, users: list[LocalUser] | None = None):
        self._data: dict[str, LocalUser] = {}
        self.save_count = 0
        for user in users or []:
            self._data[user.id] = user.model_copy(deep=True)

    async def find_by_login_identifier(self, login: str) -> LocalUser | None:
        for user in self._data.values():
            if user.user_name == login:
                return user.model_copy(deep=True)
        return None

    async def save(self, user: LocalUser) -> None:
        self._data[user.id] = user.model_copy(deep=True)
        self.save_count += 1

    async def is_dirty(self, user: LocalUser) -> bool:
        persisted = self._data.get(user.id)
        if persisted is None:
            return True
        return persisted != user

    def get(self, user_id: str) -> LocalUser | None:
        """Return a copy of the persisted state of a user."""
        persisted = self._data.get(user_id)
        return persisted.model_copy(deep=True) if persisted else None


class SqlAccountStore(AccountStore):
    """Account store backed by the ``local_user`` table."""

    def __init__(self, db_session: Session):
        self._db_session = db_session
        self._user_repo = UserRepository(db_session)

    async def find_by_login_identifier(self, login: str) -> LocalUser | None:
        try:
            return self._user_repo.get_by_user_name(login)
        except SQLAlchemyError as e:
            logger.error(f"Error looking up user '{login}': {e}")
            raise AccountStoreError(f"Unable to look up user '{login}'") from e

    async def save(self, user: LocalUser) -> None:
        try:
            self._user_repo.upsert(user)
            self._db_session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error saving user '{user.user_name}': {e}")
            self._db_session.rollback()
            raise AccountStoreError(f"Unable to save user '{user.user_name}'") from e

    async def is_dirty(self, user: LocalUser) -> bool:
        try:
            persisted = self._user_repo.get(user.id)
        except SQLAlchemyError as e:
            logger.error(f"Error reading user '{user.user_name}': {e}")
            raise AccountStoreError(f"Unable to read user '{user.user_name}'") from e
        if persisted is None:
            return True
        return persisted != user
