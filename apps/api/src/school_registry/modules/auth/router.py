"""
Authentication router.

Credentials login issuing a session cookie, logout, and session inspection.
All routes are public; the session guard lets /api/auth/* through.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_registry.core.auth import CurrentUser, get_optional_user
from school_registry.core.config import settings
from school_registry.core.database import get_db
from school_registry.core.rate_limit import login_rate_limit
from school_registry.core.security import create_session_token, verify_password
from school_registry.modules.auth.schemas import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    SessionResponse,
    SessionUser,
)
from school_registry.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter()

_INVALID_CREDENTIALS = {
    "error": "INVALID_CREDENTIALS",
    "message": "Invalid email or password.",
}


@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(login_rate_limit)],
)
async def login(
    credentials: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """
    Authenticate with email and password and set the session cookie.

    Raises:
        HTTPException 401: Invalid credentials or inactive account
        HTTPException 429: Too many attempts from this client
    """
    user = await UserRepository.get_by_email(db, credentials.email)

    if not user:
        logger.warning(f"Login attempt for non-existent email: {credentials.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=_INVALID_CREDENTIALS)

    if not verify_password(credentials.password, user.password_hash):
        logger.warning(f"Invalid password for user: {credentials.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=_INVALID_CREDENTIALS)

    # Inactive accounts get the same answer as bad credentials
    if not user.is_active:
        logger.warning(f"Login attempt for inactive account: {credentials.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=_INVALID_CREDENTIALS)

    token = create_session_token(
        subject=str(user.id),
        additional_claims={"email": user.email, "name": user.name},
    )
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age_minutes * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )

    logger.info(f"User logged in: {user.email}")

    return LoginResponse(user=SessionUser(id=user.id, email=user.email, name=user.name))


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response) -> LogoutResponse:
    """Clear the session cookie."""
    response.delete_cookie(key=settings.session_cookie_name, path="/")
    return LogoutResponse()


@router.get("/session", response_model=SessionResponse)
async def get_session(
    user: CurrentUser | None = Depends(get_optional_user),
) -> SessionResponse:
    """Return the signed-in identity, or `{"user": null}`."""
    if user is None:
        return SessionResponse(user=None)
    return SessionResponse(user=SessionUser(id=user.id, email=user.email, name=user.name))
