"""
Users module - Accounts that can sign in.
"""

from school_registry.modules.users.models import User
from school_registry.modules.users.repository import UserRepository

__all__ = ["User", "UserRepository"]
