"""
Admin bearer-token guard.

Usage:
    @router.get("/admin/thing", dependencies=[Depends(require_admin)])
    def admin_thing(): ...
"""

import logging
import secrets
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from config import get_settings

logger = logging.getLogger("auth.dependencies")

security = HTTPBearer(auto_error=False)


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Check the bearer token against ADMIN_API_TOKEN.

    With no token configured (development mode) every request is let through.

    Returns:
        "admin" for an authenticated request, "dev-admin" in development mode
    """
    expected = get_settings().admin_api_token
    if not expected:
        logger.warning("ADMIN_API_TOKEN not set; admin routes are open (development mode)")
        return "dev-admin"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing admin token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not secrets.compare_digest(credentials.credentials, expected):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin token",
        )
    return "admin"
