"""Local user entity module.

- LocalUser: Domain entity mutated by the reconciler
- UserRow: Database persistence model
- UserRepository: Data access layer
"""

from .entity import LocalUser
from .repository import UserRepository
from .table import UserRow

__all__ = ["LocalUser", "UserRepository", "UserRow"]
