"""Local user domain entity."""

from typing import Any

from pydantic import Field

from src.sso_reconcile.entities.core._base import Entity


class LocalUser(Entity):
    """A back-office user bound to an external identity.

    The account store owns the entity and decides whether it has unsaved
    changes; the reconciler only mutates its fields.
    """

    user_name: str | None = Field(default=None, description="Login identifier")
    name: str | None = Field(default=None, description="Display name")
    email: str | None = Field(default=None, description="User's email address")
    is_approved: bool = Field(default=False, description="Whether the user may sign in")
    roles: set[str] = Field(default_factory=set, description="Group aliases held by the user")
    avatar: str | None = Field(default=None, description="Media path of the profile picture")

    def add_role(self, alias: str) -> None:
        self.roles.add(alias)

    def clear_roles(self) -> None:
        self.roles.clear()

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, LocalUser):
            return False

        return (
            self.id == other.id
            and self.user_name == other.user_name
            and self.name == other.name
            and self.email == other.email
            and self.is_approved == other.is_approved
            and self.roles == other.roles
            and self.avatar == other.avatar
        )

    def __hash__(self) -> int:
        return hash(self.id)
