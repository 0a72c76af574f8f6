from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from timekeeper.database import get_db
from timekeeper.dependencies import get_tenant_context, require_roles
from timekeeper.models.role import APPROVER_ROLES
from timekeeper.models.tenant_context import TenantContext
from timekeeper.schemas.department_schemas import (
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
)
from timekeeper.services.department_service import DepartmentService

router = APIRouter()


@router.get("", response_model=list[DepartmentResponse])
async def list_departments(
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = DepartmentService(db)
    return service.list_departments(context)


@router.post("", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED)
async def create_department(
    data: DepartmentCreate,
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    """Create a department (MANAGER, ADMIN or OWNER)."""
    service = DepartmentService(db)
    return service.create_department(data, context)


@router.put("/{department_id}", response_model=DepartmentResponse)
async def update_department(
    department_id: int,
    data: DepartmentUpdate,
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    service = DepartmentService(db)
    return service.update_department(department_id, data, context)


@router.delete("/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_department(
    department_id: int,
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    service = DepartmentService(db)
    service.delete_department(department_id, context)
