"""Local user database table model."""

from sqlalchemy import JSON, Column
from sqlmodel import Field

from src.sso_reconcile.entities.core._base import EntityTable


class UserRow(EntityTable, table=True):
    """Database persistence model for local users."""

    __tablename__ = "local_user"

    user_name: str | None = Field(default=None, index=True, unique=True)
    name: str | None = None
    email: str | None = None
    is_approved: bool = False
    roles: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    avatar: str | None = None
