from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timekeeper.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from timekeeper.models.role import ADMIN_ROLES, UserRole
from timekeeper.models.tenant_context import TenantContext
from timekeeper.models.user import User
from timekeeper.repositories.user_repository import UserRepository
from timekeeper.schemas.user_schemas import UserUpdate
from timekeeper.services.audit_service import AuditService


class UserService:
    """Service layer for tenant user management"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository(db)
        self.audit = AuditService(db)

    def list_users(self, context: TenantContext) -> list[User]:
        """List all users of the caller's tenant"""
        return self.user_repo.get_by_tenant(context.tenant_id)

    def update_user(self, user_id: int, user_update: UserUpdate, context: TenantContext) -> User:
        """
        Update a user in the caller's tenant (ADMIN or OWNER).

        Args:
            user_id: User ID to update
            user_update: Fields to change
            context: Tenant context

        Returns:
            Updated user

        Raises:
            NotFoundException: If user not found in this tenant
            ForbiddenException: If the change would escalate privileges
            ValidationException: If email clashes or the seat limit is reached
        """
        user = self.user_repo.get_by_id_and_tenant(user_id, context.tenant_id)
        if not user:
            raise NotFoundException(f"User {user_id} not found")

        update_data = user_update.model_dump(exclude_unset=True)

        # Only owners may touch owner/admin accounts or hand out those roles
        new_role = update_data.get("role")
        if not context.is_owner():
            if user.role in ADMIN_ROLES and user.id != context.user.id:
                raise ForbiddenException("Only owners can modify owners or admins")
            if new_role in ADMIN_ROLES and new_role != user.role:
                raise ForbiddenException("Only owners can grant owner or admin roles")

        if user.id == context.user.id:
            if new_role is not None and new_role != user.role:
                raise ForbiddenException("Cannot change your own role")
            if update_data.get("is_active") is False:
                raise ForbiddenException("Cannot deactivate yourself")

        if update_data.get("is_active") and not user.is_active:
            if self.user_repo.count_active(context.tenant_id) >= context.tenant.max_users:
                raise ValidationException("Tenant user limit reached")

        if "email" in update_data and update_data["email"]:
            update_data["email"] = update_data["email"].lower()
            other = self.user_repo.get_by_email_and_tenant(update_data["email"], context.tenant_id)
            if other is not None and other.id != user.id:
                raise ValidationException("Email already exists")

        # Required columns: an explicit null leaves the value untouched
        for field, value in update_data.items():
            if value is not None:
                setattr(user, field, value)

        details = {
            k: (v.value if isinstance(v, UserRole) else v) for k, v in update_data.items()
        }
        self.audit.record_for(context, "update", "user", user.id, details)
        try:
            return self.user_repo.update(user)
        except IntegrityError:
            self.db.rollback()
            raise ValidationException("Email already exists")
