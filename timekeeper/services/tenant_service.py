import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timekeeper.core.exceptions import NotFoundException, ValidationException
from timekeeper.models.tenant import Tenant
from timekeeper.models.tenant_context import TenantContext
from timekeeper.repositories.tenant_repository import TenantRepository
from timekeeper.schemas.tenant_schemas import TenantUpdate
from timekeeper.services.audit_service import AuditService

logger = logging.getLogger(__name__)


class TenantService:
    """Service layer for tenant lookup and management"""

    def __init__(self, db: Session):
        self.db = db
        self.tenant_repo = TenantRepository(db)
        self.audit = AuditService(db)

    def validate_slug(self, slug: str) -> Tenant:
        """
        Check that a slug names an active tenant.

        Raises:
            NotFoundException: If the slug is unknown or the tenant inactive
        """
        tenant = self.tenant_repo.get_by_slug(slug)
        if tenant is None or not tenant.is_active:
            raise NotFoundException("Tenant not found")
        return tenant

    def get_current_tenant(self, context: TenantContext) -> Tenant:
        """Get the caller's tenant"""
        return context.tenant

    def update_tenant(self, tenant_update: TenantUpdate, context: TenantContext) -> Tenant:
        """
        Update tenant name, custom domain or subdomain (ADMIN or OWNER).

        Args:
            tenant_update: Fields to change
            context: Tenant context

        Returns:
            Updated tenant

        Raises:
            ValidationException: If the domain or subdomain already addresses another tenant
        """
        tenant = context.tenant
        update_data = tenant_update.model_dump(exclude_unset=True)

        for field in ("domain", "subdomain"):
            if field in update_data:
                update_data[field] = self.claim_host_name(
                    update_data[field], field, exclude_id=tenant.id
                )

        for field, value in update_data.items():
            if value is None and field == "name":
                continue
            setattr(tenant, field, value)

        self.audit.record_for(context, "update", "tenant", tenant.id, {"fields": sorted(update_data)})
        try:
            tenant = self.tenant_repo.update(tenant)
        except IntegrityError:
            self.db.rollback()
            raise ValidationException("Domain or subdomain is already in use")
        logger.info("Tenant %s updated by user %s", tenant.slug, context.user.id)
        return tenant

    def claim_host_name(self, value: str | None, field: str, exclude_id: int | None = None) -> str | None:
        """
        Normalise a domain or subdomain and check no other tenant answers to it.

        A host name is free only if it is not any other tenant's slug,
        subdomain or custom domain, so resolution stays unambiguous.

        Returns:
            The lower-cased name, or None when cleared

        Raises:
            ValidationException: If another tenant already uses the name
        """
        name = (value or "").strip().lower()
        if not name:
            return None
        if self.tenant_repo.find_host_name_owner(name, exclude_id=exclude_id) is not None:
            raise ValidationException(f"The {field} '{name}' is already in use")
        return name
