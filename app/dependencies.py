"""
Square 15 - FastAPI Dependencies

Shared dependencies for authentication and role checks.

This module provides dependency injection for:
1. Current user authentication from a bearer token
2. Role-based access control
"""

import uuid
from typing import Iterable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.models.user import User, UserRole, ADMIN_ROLES
from app.utils.error_handling import (
    AuthenticationException,
    AuthorizationException,
    ErrorCode,
)
from app.utils.security import verify_access_token


# HTTP Bearer token security
security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    """
    Get the current authenticated user from JWT token.

    Token can be provided via:
    1. Authorization: Bearer <token> header
    2. access_token cookie

    Raises:
        AuthenticationException: If token is invalid or user not found
    """
    token = None

    if credentials:
        token = credentials.credentials
    else:
        token = request.cookies.get("access_token")
        if token and token.startswith("Bearer "):
            token = token[7:]

    if not token:
        raise AuthenticationException("Not authenticated")

    payload = verify_access_token(token)
    if not payload:
        raise AuthenticationException("Invalid or expired token", code=ErrorCode.TOKEN_INVALID)

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationException("Invalid token payload", code=ErrorCode.TOKEN_INVALID)

    try:
        user_uuid = uuid.UUID(user_id)
    except ValueError:
        raise AuthenticationException("Invalid user ID in token", code=ErrorCode.TOKEN_INVALID)

    result = await db.execute(select(User).where(User.id == user_uuid))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationException("User not found")

    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Get current user and verify they are active."""
    if not current_user.is_active:
        raise AuthorizationException("User account is deactivated")
    return current_user


def require_role(allowed_roles: Iterable[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.post("/run")
        async def run(user: User = Depends(require_role(ADMIN_ROLES))):
            ...
    """
    allowed = frozenset(allowed_roles)

    async def role_checker(
        current_user: User = Depends(get_current_active_user),
    ) -> User:
        if current_user.role not in allowed:
            raise AuthorizationException(
                message=f"Access denied. Required roles: {sorted(r.value for r in allowed)}",
                required_role=", ".join(sorted(r.value for r in allowed)),
            )
        return current_user

    return role_checker


def require_admin():
    """Require one of the platform admin roles."""
    return require_role(ADMIN_ROLES)
