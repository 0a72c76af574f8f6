"""Repository for Tenant model operations."""

from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from timekeeper.models.tenant import Tenant


class TenantRepository:
    """Repository for Tenant model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_slug(self, slug: str) -> Tenant | None:
        """Get tenant by its unique slug (case-insensitive)"""
        return self.db.query(Tenant).filter(func.lower(Tenant.slug) == slug.lower()).first()

    def get_by_domain(self, domain: str) -> Tenant | None:
        """Get tenant whose custom domain equals the given host"""
        return self.db.query(Tenant).filter(func.lower(Tenant.domain) == domain.lower()).first()

    def get_by_subdomain(self, label: str) -> Tenant | None:
        """
        Get tenant addressed by a subdomain label.

        Matches an explicitly configured subdomain first, then the slug.
        """
        label = label.lower()
        candidates = (
            self.db.query(Tenant)
            .filter(or_(func.lower(Tenant.subdomain) == label, func.lower(Tenant.slug) == label))
            .all()
        )
        for tenant in candidates:
            if tenant.subdomain and tenant.subdomain.lower() == label:
                return tenant
        return candidates[0] if candidates else None

    def find_host_name_owner(self, name: str, exclude_id: int | None = None) -> Tenant | None:
        """
        Get a tenant already addressed by ``name`` as its slug, subdomain or domain.

        Args:
            name: Candidate slug, subdomain or custom domain
            exclude_id: Tenant to ignore (the one being updated)

        Returns:
            The clashing tenant, or None if the name is free
        """
        name = name.lower()
        query = self.db.query(Tenant).filter(
            or_(
                func.lower(Tenant.slug) == name,
                func.lower(Tenant.subdomain) == name,
                func.lower(Tenant.domain) == name,
            )
        )
        if exclude_id is not None:
            query = query.filter(Tenant.id != exclude_id)
        return query.first()

    def create_no_commit(self, tenant: Tenant) -> Tenant:
        """Add tenant and assign its ID without committing (for atomic ops)"""
        self.db.add(tenant)
        self.db.flush()
        return tenant

    def update(self, tenant: Tenant) -> Tenant:
        """
        Update an existing tenant.

        Args:
            tenant: Tenant object with updated fields

        Returns:
            Updated Tenant object
        """
        self.db.commit()
        self.db.refresh(tenant)
        return tenant
