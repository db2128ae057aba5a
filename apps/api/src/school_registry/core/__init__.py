"""
Core module - Configuration, database, security, session guard and utilities.
"""

from school_registry.core.config import get_settings, settings
from school_registry.core.database import Base, close_db, get_db, init_db
from school_registry.core.redis import close_redis, get_redis, init_redis
from school_registry.core.security import (
    create_session_token,
    decode_token,
    hash_password,
    verify_password,
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "get_db",
    "init_db",
    "close_db",
    # Redis
    "get_redis",
    "init_redis",
    "close_redis",
    # Security
    "hash_password",
    "verify_password",
    "create_session_token",
    "decode_token",
]
