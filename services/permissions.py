"""
Permission checking utilities.

Identity is resolved outside the core; callers hand in an AuthContext and
admin-only operations re-check it here.
"""

from dataclasses import dataclass

from domain.errors import PermissionDeniedError, UnauthorizedError


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller: external user id plus resolved admin flag."""

    user_id: str
    is_admin: bool = False


def has_admin_permission(auth: AuthContext | None) -> bool:
    """
    Check if the caller has admin permissions.

    Args:
        auth: Authenticated caller, or None for anonymous requests

    Returns:
        True if the caller is an admin, False otherwise
    """
    return bool(auth is not None and auth.user_id and auth.is_admin)


def require_authenticated(auth: AuthContext | None) -> AuthContext:
    if auth is None or not auth.user_id:
        raise UnauthorizedError("Authentication required.")
    return auth


def require_admin(auth: AuthContext | None) -> AuthContext:
    """Raise unless the caller is an authenticated admin."""
    auth = require_authenticated(auth)
    if not auth.is_admin:
        raise PermissionDeniedError("Admin permissions required.")
    return auth
