from sqlalchemy.orm import Session
from timekeeper.models.audit_log import AuditLog


class AuditLogRepository:
    """Repository for AuditLog model operations"""

    def __init__(self, db: Session):
        self.db = db

    def add_no_commit(self, entry: AuditLog) -> AuditLog:
        """
        Stage an audit record in the caller's transaction.

        The record is persisted together with the change it describes.
        """
        self.db.add(entry)
        return entry

    def get_by_tenant(
        self, tenant_id: int, limit: int = 100, offset: int = 0
    ) -> tuple[list[AuditLog], int]:
        """
        Get audit records for a tenant, newest first.

        Returns:
            Tuple of (records, total count)
        """
        query = self.db.query(AuditLog).filter(AuditLog.tenant_id == tenant_id)
        total = query.count()
        records = (
            query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )
        return records, total
