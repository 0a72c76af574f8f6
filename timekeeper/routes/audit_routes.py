from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from timekeeper.database import get_db
from timekeeper.dependencies import require_roles
from timekeeper.models.role import ADMIN_ROLES
from timekeeper.models.tenant_context import TenantContext
from timekeeper.schemas.audit_schemas import AuditLogListResponse, AuditLogResponse
from timekeeper.services.audit_service import AuditService

router = APIRouter()


@router.get("", response_model=AuditLogListResponse)
async def list_audit_logs(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    context: TenantContext = Depends(require_roles(*ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    """Tenant audit trail, newest first (ADMIN or OWNER)"""
    service = AuditService(db)
    logs, total = service.list_logs(context, limit=limit, offset=offset)
    return AuditLogListResponse(logs=[AuditLogResponse.model_validate(log) for log in logs], total=total)
