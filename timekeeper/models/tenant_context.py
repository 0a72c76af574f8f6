"""Tenant context for request authorization."""

from dataclasses import dataclass
from timekeeper.models.user import User
from timekeeper.models.tenant import Tenant
from timekeeper.models.role import UserRole, APPROVER_ROLES, ADMIN_ROLES


@dataclass
class TenantContext:
    """
    Complete tenant context for request authorization.

    Built once per request by the dependency pipeline (resolve tenant ->
    authenticate -> load user) and passed to every service call. Services
    scope all queries by ``tenant.id`` and never trust a client-supplied
    tenant id.

    Attributes:
        user: The authenticated User object
        tenant: The Tenant the user belongs to
        token_payload: Decoded access token claims (jti, exp, ...)
        ip_address: Client address for audit records
    """

    user: User
    tenant: Tenant
    token_payload: dict
    ip_address: str | None = None

    @property
    def role(self) -> UserRole:
        return self.user.role

    @property
    def tenant_id(self) -> int:
        return self.tenant.id

    def has_role(self, *roles: UserRole) -> bool:
        """Flat allow-list check; no role inherits another's access."""
        return self.role in roles

    def is_owner(self) -> bool:
        """Check if user is the tenant owner."""
        return self.role == UserRole.OWNER

    def is_admin_or_owner(self) -> bool:
        """Check if user is admin or owner."""
        return self.role in ADMIN_ROLES

    def can_approve(self) -> bool:
        """Check if user may approve or reject submitted timesheets."""
        return self.role in APPROVER_ROLES

    def __repr__(self) -> str:
        return f"<TenantContext(user_id={self.user.id}, tenant_id={self.tenant.id}, role={self.role.value})>"
