from sqlmodel import Session, select

from src.sso_reconcile.entities.core.user.entity import LocalUser
from src.sso_reconcile.entities.core.user.table import UserRow


class UserRepository:
    """Data-access layer for local users."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> LocalUser | None:
        row = self._session.get(UserRow, user_id)
        if row is None:
            return None
        return self._to_entity(row)

    def get_by_user_name(self, user_name: str) -> LocalUser | None:
        statement = select(UserRow).where(UserRow.user_name == user_name)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return self._to_entity(row)

    def upsert(self, user: LocalUser) -> LocalUser:
        row = self._session.get(UserRow, user.id)
        if row is None:
            row = UserRow(id=user.id, created_at=user.created_at)
        row.user_name = user.user_name
        row.name = user.name
        row.email = user.email
        row.is_approved = user.is_approved
        row.roles = sorted(user.roles)
        row.avatar = user.avatar
        self._session.add(row)
        self._session.flush()
        return self._to_entity(row)

    @staticmethod
    def _to_entity(row: UserRow) -> LocalUser:
        return LocalUser(
            id=row.id,
            user_name=row.user_name,
            name=row.name,
            email=row.email,
            is_approved=row.is_approved,
            roles=set(row.roles or []),
            avatar=row.avatar,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
