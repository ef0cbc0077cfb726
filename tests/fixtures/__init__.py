"""Shared pytest fixtures and helpers for reconciliation tests."""

from .core import *  # noqa: F401,F403
from .graph import *  # noqa: F401,F403
