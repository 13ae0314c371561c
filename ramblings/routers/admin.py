# ramblings/routers/admin.py
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from ramblings.core.audit_log import get_audit_logger
from ramblings.core.auth import (
    clear_session_cookie, require_admin, set_session_cookie, verify_credentials
)
from ramblings.core.auth_helpers import get_client_ip, get_user_agent
from ramblings.core.config import settings
from ramblings.schemas.auth import AdminUser, LoginRequest, LoginResponse
from ramblings.schemas.common import SuccessResponse

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/login", response_model=LoginResponse)
async def login(credentials: LoginRequest, request: Request, response: Response):
    """
    Sign in as the site admin.

    Sets an HttpOnly session cookie on success.
    """
    ip_address = get_client_ip(request)
    user_agent = get_user_agent(request)
    audit_logger = get_audit_logger()

    if not verify_credentials(credentials.username, credentials.password):
        audit_logger.log_login_failed(
            username=credentials.username,
            reason="Invalid credentials",
            ip_address=ip_address,
            user_agent=user_agent,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    set_session_cookie(response)
    audit_logger.log_login_success(
        username=credentials.username,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return LoginResponse(user=AdminUser(username=credentials.username))


@router.post("/logout", response_model=SuccessResponse)
async def logout(request: Request, response: Response):
    """Clear the admin session cookie."""
    clear_session_cookie(response)
    get_audit_logger().log_logout(ip_address=get_client_ip(request))
    return SuccessResponse(message="Logged out successfully")


@router.get("/me", response_model=AdminUser)
async def get_current_admin(_: bool = Depends(require_admin)):
    """Return the signed-in admin. 401 without a session."""
    return AdminUser(username=settings.ADMIN_USERNAME)
