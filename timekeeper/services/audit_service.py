import logging
from typing import Any

from sqlalchemy.orm import Session

from timekeeper.models.audit_log import AuditLog
from timekeeper.models.tenant_context import TenantContext
from timekeeper.repositories.audit_log_repository import AuditLogRepository

logger = logging.getLogger(__name__)


class AuditService:
    """Writes and reads the per-tenant audit trail"""

    def __init__(self, db: Session):
        self.db = db
        self.audit_repo = AuditLogRepository(db)

    def record(
        self,
        tenant_id: int,
        user_id: int | None,
        action: str,
        resource_type: str,
        resource_id: int | None = None,
        details: dict[str, Any] | None = None,
        ip_address: str | None = None,
    ) -> AuditLog:
        """
        Stage an audit record in the current transaction.

        The caller commits, so the record is written if and only if the
        audited change is.
        """
        logger.debug(
            "audit tenant=%s user=%s %s %s/%s", tenant_id, user_id, action, resource_type, resource_id
        )
        return self.audit_repo.add_no_commit(
            AuditLog(
                tenant_id=tenant_id,
                user_id=user_id,
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                details=details or {},
                ip_address=ip_address,
            )
        )

    def record_for(
        self,
        context: TenantContext,
        action: str,
        resource_type: str,
        resource_id: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Stage an audit record attributed to the authenticated caller"""
        return self.record(
            context.tenant_id,
            context.user.id,
            action,
            resource_type,
            resource_id,
            details,
            context.ip_address,
        )

    def list_logs(
        self, context: TenantContext, limit: int = 100, offset: int = 0
    ) -> tuple[list[AuditLog], int]:
        """Tenant audit trail, newest first"""
        return self.audit_repo.get_by_tenant(context.tenant_id, limit=limit, offset=offset)
