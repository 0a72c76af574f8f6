"""Map an incoming request to the tenant it addresses."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from timekeeper.config import settings
from timekeeper.models.tenant import Tenant
from timekeeper.repositories.tenant_repository import TenantRepository

logger = logging.getLogger(__name__)


def normalize_host(host: str | None) -> str:
    """Lower-case a Host header value and strip any port."""
    if not host:
        return ""
    host = host.strip().lower()
    if host.startswith("["):
        # IPv6 literal, never a tenant host
        return ""
    return host.split(":", 1)[0].rstrip(".")


def subdomain_label(host: str) -> str | None:
    """
    Return the tenant label of a host, if it has one.

    The first label counts only when the host has at least two labels and
    the label is not reserved (www, api, ...).
    """
    labels = [label for label in host.split(".") if label]
    if len(labels) < 2:
        return None
    label = labels[0]
    if label in settings.reserved_subdomains_set:
        return None
    return label


def resolve_tenant_for_request(
    db: Session, host: str | None, header_slug: str | None
) -> Tenant | None:
    """
    Resolve the active tenant addressed by a request.

    Priority order:
    1. X-Tenant-Slug header (an unknown slug does not fall through)
    2. Custom domain equal to the host
    3. Subdomain label matching a tenant subdomain or slug

    Never raises: lookup failures are logged and treated as "no tenant",
    which downstream handlers reject with 400/401 rather than 500.

    Args:
        db: Database session
        host: Raw Host header value
        header_slug: Raw X-Tenant-Slug header value

    Returns:
        Active Tenant or None
    """
    repo = TenantRepository(db)
    try:
        tenant = _lookup(repo, normalize_host(host), (header_slug or "").strip())
    except SQLAlchemyError:
        logger.exception("Tenant lookup failed for host=%r header=%r", host, header_slug)
        db.rollback()
        return None

    if tenant is None:
        return None
    if not tenant.is_active:
        logger.info("Ignoring inactive tenant %s", tenant.slug)
        return None
    return tenant


def _lookup(repo: TenantRepository, host: str, header_slug: str) -> Tenant | None:
    if header_slug:
        return repo.get_by_slug(header_slug)

    if not host:
        return None

    tenant = repo.get_by_domain(host)
    if tenant is not None:
        return tenant

    label = subdomain_label(host)
    if label is None:
        return None
    return repo.get_by_subdomain(label)
