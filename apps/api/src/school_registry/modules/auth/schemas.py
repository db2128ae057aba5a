"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr


class LoginRequest(BaseModel):
    """Login request schema."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str


class SessionUser(BaseModel):
    """Identity carried by the session."""

    id: int
    email: str
    name: str | None = None


class SessionResponse(BaseModel):
    """Current session. `user` is null when nobody is signed in."""

    user: SessionUser | None = None


class LoginResponse(BaseModel):
    user: SessionUser


class LogoutResponse(BaseModel):
    ok: bool = True
