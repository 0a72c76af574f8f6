from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from timekeeper.database import get_db
from timekeeper.dependencies import get_tenant_context, require_roles
from timekeeper.models.role import ADMIN_ROLES
from timekeeper.models.tenant_context import TenantContext
from timekeeper.schemas.tenant_schemas import TenantResponse, TenantUpdate
from timekeeper.services.tenant_service import TenantService

router = APIRouter()


@router.get("/me", response_model=TenantResponse)
async def get_current_tenant(
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """
    Get current tenant details.

    Returns tenant information for the authenticated user's tenant.
    """
    service = TenantService(db)
    return service.get_current_tenant(context)


@router.patch("/me", response_model=TenantResponse)
async def update_tenant(
    tenant_update: TenantUpdate,
    context: TenantContext = Depends(require_roles(*ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Update tenant name, custom domain or subdomain.

    - **Requires ADMIN or OWNER**
    """
    service = TenantService(db)
    return service.update_tenant(tenant_update, context)
