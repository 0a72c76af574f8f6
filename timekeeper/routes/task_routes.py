from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from timekeeper.database import get_db
from timekeeper.dependencies import get_tenant_context, require_roles
from timekeeper.models.role import APPROVER_ROLES
from timekeeper.models.task import TaskStatus
from timekeeper.models.tenant_context import TenantContext
from timekeeper.schemas.task_schemas import TaskCreate, TaskListResponse, TaskResponse, TaskUpdate
from timekeeper.services.task_service import TaskService

router = APIRouter()


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    project_id: Optional[int] = Query(None, description="Filter by project"),
    assigned_to: Optional[int] = Query(None, description="Filter by assignee"),
    status: Optional[TaskStatus] = Query(None, description="Filter by status"),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Get tasks of the caller's tenant with optional filters"""
    service = TaskService(db)
    tasks = service.list_tasks(context, project_id=project_id, assigned_to=assigned_to, status=status)
    return TaskListResponse(tasks=[TaskResponse.model_validate(t) for t in tasks], total=len(tasks))


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    data: TaskCreate,
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Create a task.

    - **Requires MANAGER, ADMIN or OWNER**
    - project_id and assigned_to must belong to the caller's tenant
    """
    service = TaskService(db)
    return service.create_task(data, context)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = TaskService(db)
    return service.get_task(task_id, context)


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    data: TaskUpdate,
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    service = TaskService(db)
    return service.update_task(task_id, data, context)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    service = TaskService(db)
    service.delete_task(task_id, context)
    return None
