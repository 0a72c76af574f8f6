"""User role enum for role-based access control."""

from enum import Enum as PyEnum


class UserRole(str, PyEnum):
    """
    Roles a user can hold within their tenant.

    Route access is granted by flat allow-lists of roles, not by a
    hierarchy: OWNER does not implicitly pass a route that lists only
    ADMIN.

    - OWNER: Created the tenant; manages tenant details and all users
    - ADMIN: Manages users, audit trail and locks approved timesheets
    - MANAGER: Manages projects/tasks, approves or rejects timesheets
    - USER: Logs time against projects and submits own timesheets
    """

    OWNER = "owner"
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


# Roles allowed to approve/reject submitted timesheets
APPROVER_ROLES = (UserRole.MANAGER, UserRole.ADMIN, UserRole.OWNER)

# Roles allowed to manage users and tenant-level settings
ADMIN_ROLES = (UserRole.ADMIN, UserRole.OWNER)
