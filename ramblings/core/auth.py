"""
Single-admin session handling.

There is one admin account, configured in settings. A successful login sets
an HttpOnly cookie carrying the shared session token; admin-only routes
depend on ``require_admin``.
"""
import secrets

from fastapi import HTTPException, Request, Response, status

from ramblings.core.audit_log import get_audit_logger
from ramblings.core.auth_helpers import get_client_ip
from ramblings.core.config import settings


def verify_credentials(username: str, password: str) -> bool:
    # compare both, always, so timing does not reveal which one was wrong
    username_ok = secrets.compare_digest(username.encode("utf-8"), settings.ADMIN_USERNAME.encode("utf-8"))
    password_ok = secrets.compare_digest(password.encode("utf-8"), settings.ADMIN_PASSWORD.encode("utf-8"))
    return username_ok and password_ok


def is_authenticated(request: Request) -> bool:
    """True if the request carries a valid admin session cookie."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return False
    return secrets.compare_digest(token.encode("utf-8"), settings.ADMIN_SESSION_TOKEN.encode("utf-8"))


def set_session_cookie(response: Response) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=settings.ADMIN_SESSION_TOKEN,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


async def require_admin(request: Request) -> bool:
    """
    Dependency for admin-only endpoints.

    Raises:
        HTTPException: 401 if the request has no valid admin session
    """
    if not is_authenticated(request):
        get_audit_logger().log_unauthorized_access(
            resource=f"{request.method} {request.url.path}",
            ip_address=get_client_ip(request),
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin authentication required"
        )
    return True
