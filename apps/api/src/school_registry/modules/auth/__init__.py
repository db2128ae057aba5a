"""Authentication module."""

from school_registry.modules.auth.router import router
from school_registry.modules.auth.schemas import LoginRequest, LoginResponse, SessionResponse

__all__ = ["router", "LoginRequest", "LoginResponse", "SessionResponse"]
