"""Authentication dependencies for protected routes."""

from fastapi import Depends, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import logging

from clipnest.database import get_db
from clipnest.models.user import User
from clipnest.services.error_tracking import error_tracker
from clipnest.utils.api_error import ApiError
from clipnest.utils.security import decode_access_token

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

# HTTP Bearer token scheme; the cookie is checked first so the header is optional
security = HTTPBearer(auto_error=False)


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Access token from the cookie, falling back to the Authorization header."""
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    if credentials and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return None


def _unauthorized(message: str) -> ApiError:
    return ApiError(
        status.HTTP_401_UNAUTHORIZED,
        message,
        headers={"WWW-Authenticate": "Bearer"}
    )


def resolve_user(db: Session, token: str) -> Optional[User]:
    """
    Verify a token and load the user named by its subject claim.

    Args:
        db: Database session
        token: Encoded access token

    Returns:
        User, or None when the token or its subject is invalid
    """
    payload = decode_access_token(token)
    if not payload:
        return None

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        return None

    return db.query(User).filter(User.id == user_id).first()


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Dependency to get the current authenticated user.

    Usage in routes:
        @router.get("/protected")
        def protected_route(current_user: User = Depends(get_current_user)):
            return current_user.username

    Args:
        request: Incoming request (cookie source, and where the user is attached)
        credentials: HTTP Authorization header with Bearer token
        db: Database session

    Returns:
        Current user

    Raises:
        ApiError: 401 if no token, an invalid token, or an unknown subject
    """
    token = extract_token(request, credentials)
    if not token:
        raise _unauthorized("Unauthorized request")

    user = resolve_user(db, token)
    if not user:
        logger.info("Rejected access token on %s %s", request.method, request.url.path)
        raise _unauthorized("Invalid access token")

    request.state.user = user
    error_tracker.set_user_context(str(user.id))
    return user


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Dependency to optionally get the current user.

    Returns None if no valid authentication is provided.
    Useful for public routes that decorate results with viewer state.
    """
    token = extract_token(request, credentials)
    if not token:
        return None

    user = resolve_user(db, token)
    if user:
        request.state.user = user
    return user
