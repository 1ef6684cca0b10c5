"""Permission-scope access control for admin endpoints.

Admins hold a list of permission scopes. An endpoint names the scopes that
grant access; holding any one of them is enough, and super_admin grants
every scope.
"""
from enum import Enum
from functools import wraps
from typing import Callable, Iterable

from fastapi import HTTPException, status
import structlog

logger = structlog.get_logger(__name__)


class Permission(str, Enum):
    """Admin permission scopes."""

    SUPER_ADMIN = "super_admin"
    MANAGE_ANALYTICS = "manage_analytics"
    VIEW_ANALYTICS = "view_analytics"


def has_any_permission(granted: Iterable[str] | None, required: Iterable[Permission]) -> bool:
    """
    Check whether granted scopes satisfy any required scope.

    Args:
        granted: Scopes carried by the admin's token
        required: Scopes that grant access to the endpoint

    Returns:
        True if access is allowed
    """
    granted = set(granted or [])

    if Permission.SUPER_ADMIN.value in granted:
        return True

    required = [permission.value for permission in required]
    if not required:
        return True

    return any(permission in granted for permission in required)


def require_permissions(*required: Permission):
    """
    Decorator to require one of the given permission scopes.

    Usage:
        @require_permissions(Permission.MANAGE_ANALYTICS, Permission.SUPER_ADMIN)
        async def create_analytics(..., current_user: dict = Depends(get_current_user)):
            ...

    Raises:
        HTTPException: 401 without an authenticated user, 403 without a
            matching scope
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            # Extract current_user from kwargs (injected by get_current_user dependency)
            current_user = kwargs.get("current_user")

            if not current_user:
                logger.error("rbac_missing_current_user", endpoint=func.__name__)
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Authentication required",
                )

            granted = current_user.get("permissions", [])

            if not has_any_permission(granted, required):
                logger.warning(
                    "rbac_permission_denied",
                    user_id=current_user.get("sub"),
                    granted=list(granted),
                    required=[permission.value for permission in required],
                    endpoint=func.__name__,
                )
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Insufficient permissions",
                )

            return await func(*args, **kwargs)

        return wrapper
    return decorator
