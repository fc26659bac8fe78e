"""Admin capability handed to mutating service entry points.

A route resolves the caller once (``grant_for``) and passes the resulting
``AdminGrant`` down; services only check that they were given one.
"""
from dataclasses import dataclass

from olympiad.errors import AuthorizationError
from olympiad.models.user import UserRole


@dataclass(frozen=True)
class AdminGrant:
    user_id: int


def grant_for(user):
    if user is None or not user.is_active:
        raise AuthorizationError("Access denied")
    if user.role != UserRole.ADMIN:
        raise AuthorizationError("Admin access required")
    return AdminGrant(user_id=user.id)


def require_admin(actor):
    if not isinstance(actor, AdminGrant):
        raise AuthorizationError("Admin access required")
    return actor
