"""
Session Guard

Every request that is not on a public path must carry a valid session token,
either in the session cookie set by /api/auth/login or as a Bearer token.

- SessionGuardMiddleware redirects unauthenticated requests to the login page,
  keeping the original query string so the client can return after login.
- get_current_user is the FastAPI dependency routes use to receive the
  request-scoped identity. Services take that identity as an explicit argument.
"""

import logging
from dataclasses import dataclass

from fastapi import HTTPException, Request, status
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from school_registry.core.config import settings
from school_registry.core.security import decode_token

logger = logging.getLogger(__name__)

# Paths reachable without a session. Matched exactly or as a "/"-separated prefix.
PUBLIC_PATHS: tuple[str, ...] = (
    "/login",
    "/api/auth",
    "/health",
    "/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
)


@dataclass(frozen=True)
class CurrentUser:
    """
    Authenticated user for the current request.

    Populated from the session token claims.
    """

    id: int
    email: str
    name: str | None = None

    def __str__(self) -> str:
        return f"CurrentUser(id={self.id}, email={self.email})"


def is_public_path(path: str) -> bool:
    """Check whether a request path bypasses the session guard."""
    return any(path == public or path.startswith(public + "/") for public in PUBLIC_PATHS)


def extract_session_token(request: Request) -> str | None:
    """Read the session token from the cookie, falling back to the Authorization header."""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token

    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    return None


def resolve_user(token: str | None) -> CurrentUser | None:
    """
    Validate a session token and build the user it identifies.

    Returns:
        CurrentUser, or None when the token is missing, invalid, expired or
        carries malformed claims.
    """
    if not token:
        return None

    payload = decode_token(token)
    if payload is None:
        return None

    if payload.get("type", "session") != "session":
        logger.warning(f"Rejected token of type {payload.get('type')!r}")
        return None

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        logger.warning("Rejected token with missing or non-numeric 'sub' claim")
        return None

    return CurrentUser(
        id=user_id,
        email=payload.get("email", ""),
        name=payload.get("name"),
    )


def build_login_redirect(request: Request) -> RedirectResponse:
    """Redirect to the login page, carrying the original query string."""
    url = settings.login_path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return RedirectResponse(url=url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


class SessionGuardMiddleware(BaseHTTPMiddleware):
    """Blocks non-public requests that do not carry a valid session."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS" or is_public_path(request.url.path):
            return await call_next(request)

        user = resolve_user(extract_session_token(request))
        if user is None:
            logger.info(f"Unauthenticated request to {request.url.path}, redirecting to login")
            return build_login_redirect(request)

        request.state.user = user
        return await call_next(request)


async def get_current_user(request: Request) -> CurrentUser:
    """
    FastAPI dependency returning the authenticated user.

    Uses the identity resolved by SessionGuardMiddleware when present, and
    validates the token itself otherwise.

    Raises:
        HTTPException 401: If no valid session accompanies the request
    """
    user = getattr(request.state, "user", None)
    if user is None:
        user = resolve_user(extract_session_token(request))

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "NOT_AUTHENTICATED",
                "message": "A valid session is required.",
            },
        )

    return user


async def get_optional_user(request: Request) -> CurrentUser | None:
    """Like get_current_user, but returns None instead of raising."""
    try:
        return await get_current_user(request)
    except HTTPException:
        return None


__all__ = [
    "CurrentUser",
    "PUBLIC_PATHS",
    "SessionGuardMiddleware",
    "get_current_user",
    "get_optional_user",
    "is_public_path",
    "resolve_user",
]
