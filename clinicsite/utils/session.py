"""
Signed admin sessions.
A successful login issues a JWT stored in an httpOnly cookie; admin routes
depend on `require_admin`, which redirects to the login page when the cookie
is missing, tampered with, or expired.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Request, Response
from clinicsite.config import settings
from clinicsite.exceptions import AdminLoginRequired


ALGORITHM = "HS256"
SESSION_COOKIE_NAME = "clinic_admin_session"


def create_session_token(expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed admin session token.

    Args:
        expires_delta: Optional custom lifetime (defaults to SESSION_EXPIRE_MINUTES)

    Returns:
        str: Encoded JWT token
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.SESSION_EXPIRE_MINUTES))

    claims = {
        "sub": "clinic_admin",
        "role": "admin",
        "type": "session",
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(claims, settings.SESSION_SECRET_KEY, algorithm=ALGORITHM)


def verify_session_token(token: str) -> dict:
    """
    Decode a session token.

    Raises:
        JWTError: If the token is invalid, expired, or not a session token
    """
    payload = jwt.decode(token, settings.SESSION_SECRET_KEY, algorithms=[ALGORITHM])
    if payload.get("type") != "session" or payload.get("role") != "admin":
        raise JWTError("Not an admin session token")
    return payload


def is_authenticated(request: Request) -> bool:
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        return False
    try:
        verify_session_token(token)
    except JWTError:
        return False
    return True


def require_admin(request: Request) -> bool:
    """
    FastAPI dependency gating admin routes.

    Raises:
        AdminLoginRequired: handled globally as a redirect to /admin/login
    """
    if not is_authenticated(request):
        raise AdminLoginRequired()
    return True


def set_session_cookie(response: Response) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=create_session_token(),
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=SESSION_COOKIE_NAME, path="/")
