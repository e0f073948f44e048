"""Actor roles for the document pipeline.

Role Hierarchy (descending permissions):
- ADMIN: delete and review any user's documents
- USER: upload, list, download and delete own documents
"""

from enum import Enum


class UserRole(str, Enum):
    """Roles carried in the token's role claim. Values must match exactly."""
    ADMIN = "ADMIN"
    USER = "USER"


# Role hierarchy: Each role includes permissions of all roles below it
ROLE_HIERARCHY = {
    UserRole.ADMIN: {UserRole.ADMIN, UserRole.USER},
    UserRole.USER: {UserRole.USER},
}


def has_permission(user_role: UserRole, required_role: UserRole) -> bool:
    """Check if a role satisfies a required role.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.USER)
        True
        >>> has_permission(UserRole.USER, UserRole.ADMIN)
        False
    """
    return required_role in ROLE_HIERARCHY.get(user_role, set())
