from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from timekeeper.database import get_db
from timekeeper.dependencies import get_tenant_context, require_roles
from timekeeper.models.project import ProjectStatus
from timekeeper.models.role import APPROVER_ROLES
from timekeeper.models.tenant_context import TenantContext
from timekeeper.schemas.project_schemas import (
    AssignmentCreate,
    AssignmentResponse,
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)
from timekeeper.schemas.task_schemas import TaskListResponse, TaskResponse
from timekeeper.services.project_service import ProjectService
from timekeeper.services.task_service import TaskService

router = APIRouter()


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    status: Optional[ProjectStatus] = Query(None, description="Filter by status"),
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Get all projects of the caller's tenant"""
    service = ProjectService(db)
    projects = service.list_projects(context, status=status)
    return ProjectListResponse(
        projects=[ProjectResponse.model_validate(p) for p in projects], total=len(projects)
    )


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreate,
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Create a project.

    - **Requires MANAGER, ADMIN or OWNER**
    - The creator is assigned to the project as lead in the same transaction
    - department_id and manager_id must belong to the caller's tenant
    """
    service = ProjectService(db)
    return service.create_project(data, context)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    """Get project details (404 if it belongs to another tenant)"""
    service = ProjectService(db)
    return service.get_project(project_id, context)


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: int,
    data: ProjectUpdate,
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    """Update a project (MANAGER, ADMIN or OWNER)"""
    service = ProjectService(db)
    return service.update_project(project_id, data, context)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: int,
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    """
    Delete a project with its tasks and assignments.

    - **Requires MANAGER, ADMIN or OWNER**
    - Refused once time has been logged against the project
    """
    service = ProjectService(db)
    service.delete_project(project_id, context)
    return None


@router.get("/{project_id}/assignments", response_model=list[AssignmentResponse])
async def list_assignments(
    project_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = ProjectService(db)
    return service.list_assignments(project_id, context)


@router.post(
    "/{project_id}/assignments",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def assign_user(
    project_id: int,
    data: AssignmentCreate,
    context: TenantContext = Depends(require_roles(*APPROVER_ROLES)),
    db: Session = Depends(get_db),
):
    """Assign a user of the same tenant to a project"""
    service = ProjectService(db)
    return service.assign_user(project_id, data, context)


@router.get("/{project_id}/tasks", response_model=TaskListResponse)
async def list_project_tasks(
    project_id: int,
    context: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
):
    service = TaskService(db)
    tasks = service.list_project_tasks(project_id, context)
    return TaskListResponse(tasks=[TaskResponse.model_validate(t) for t in tasks], total=len(tasks))
