"""Role-based access control.

A single table maps each role to the operations it may perform. Routes ask
for a ``Permission`` and ``authorize`` answers; no route lists roles itself.
"""

from enum import Enum
from typing import Dict, FrozenSet

from natours.core.errors import AuthorizationError
from natours.models.user import User


class Permission(str, Enum):
    """Operations guarded by role."""

    MANAGE_TOURS = "manage_tours"  # Create/update/delete tours
    VIEW_MONTHLY_PLAN = "view_monthly_plan"
    MANAGE_USERS = "manage_users"  # Admin user CRUD
    CREATE_REVIEW = "create_review"
    MODIFY_REVIEW = "modify_review"  # Update/delete reviews


class Role(str, Enum):
    """Roles a user can hold."""

    USER = "user"
    GUIDE = "guide"
    LEAD_GUIDE = "lead-guide"
    ADMIN = "admin"


ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.USER: frozenset({Permission.CREATE_REVIEW, Permission.MODIFY_REVIEW}),
    Role.GUIDE: frozenset({Permission.VIEW_MONTHLY_PLAN}),
    Role.LEAD_GUIDE: frozenset({Permission.MANAGE_TOURS, Permission.VIEW_MONTHLY_PLAN}),
    Role.ADMIN: frozenset(
        {
            Permission.MANAGE_TOURS,
            Permission.VIEW_MONTHLY_PLAN,
            Permission.MANAGE_USERS,
            Permission.MODIFY_REVIEW,
        }
    ),
}


def has_permission(role: str, permission: Permission) -> bool:
    """Check whether a role grants a permission. Unknown roles grant nothing."""
    try:
        return permission in ROLE_PERMISSIONS[Role(role)]
    except ValueError:
        return False


def authorize(user: User, permission: Permission) -> None:
    """Raise ``AuthorizationError`` unless the user's role grants ``permission``."""
    if not has_permission(user.role, permission):
        raise AuthorizationError()
