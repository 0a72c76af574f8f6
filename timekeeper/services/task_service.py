import logging

from sqlalchemy.orm import Session

from timekeeper.core.exceptions import NotFoundException
from timekeeper.models.task import Task, TaskStatus
from timekeeper.models.tenant_context import TenantContext
from timekeeper.repositories.project_repository import ProjectRepository
from timekeeper.repositories.task_repository import TaskRepository
from timekeeper.repositories.user_repository import UserRepository
from timekeeper.schemas.task_schemas import TaskCreate, TaskUpdate
from timekeeper.services.audit_service import AuditService

logger = logging.getLogger(__name__)


class TaskService:
    """Service for task business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TaskRepository(db)
        self.project_repo = ProjectRepository(db)
        self.user_repo = UserRepository(db)
        self.audit = AuditService(db)

    def create_task(self, data: TaskCreate, context: TenantContext) -> Task:
        """
        Create a task under a project of the caller's tenant.

        Raises:
            NotFoundException: If project or assignee is not in this tenant
        """
        if not self.project_repo.get_by_id_and_tenant(data.project_id, context.tenant_id):
            raise NotFoundException(f"Project {data.project_id} not found")
        self._check_assignee(data.assigned_to, context)

        task = self.repo.create_no_commit(Task(tenant_id=context.tenant_id, **data.model_dump()))
        self.audit.record_for(context, "create", "task", task.id, {"project_id": task.project_id})
        self.db.commit()
        self.db.refresh(task)
        logger.info("Task %s created in project %s", task.id, task.project_id)
        return task

    def list_tasks(
        self,
        context: TenantContext,
        project_id: int | None = None,
        assigned_to: int | None = None,
        status: TaskStatus | None = None,
    ) -> list[Task]:
        """Get tasks in the caller's tenant with optional filters"""
        return self.repo.get_with_filters(
            context.tenant_id, project_id=project_id, assigned_to=assigned_to, status=status
        )

    def list_project_tasks(self, project_id: int, context: TenantContext) -> list[Task]:
        """
        Get tasks of one project.

        Raises:
            NotFoundException: If project not found or belongs to another tenant
        """
        if not self.project_repo.get_by_id_and_tenant(project_id, context.tenant_id):
            raise NotFoundException(f"Project {project_id} not found")
        return self.repo.get_with_filters(context.tenant_id, project_id=project_id)

    def get_task(self, task_id: int, context: TenantContext) -> Task:
        """
        Get task ensuring tenant ownership.

        Raises:
            NotFoundException: If task not found or belongs to another tenant
        """
        task = self.repo.get_by_id_and_tenant(task_id, context.tenant_id)
        if not task:
            raise NotFoundException(f"Task {task_id} not found")
        return task

    def update_task(self, task_id: int, data: TaskUpdate, context: TenantContext) -> Task:
        task = self.get_task(task_id, context)
        update_data = data.model_dump(exclude_unset=True)
        if "assigned_to" in update_data:
            self._check_assignee(update_data["assigned_to"], context)

        for field, value in update_data.items():
            if value is None and field in ("name", "status", "priority", "is_billable"):
                continue
            setattr(task, field, value)

        self.audit.record_for(context, "update", "task", task.id, {"fields": sorted(update_data)})
        return self.repo.update(task)

    def delete_task(self, task_id: int, context: TenantContext) -> None:
        task = self.get_task(task_id, context)
        self.audit.record_for(context, "delete", "task", task.id, {"name": task.name})
        self.repo.delete(task)

    def _check_assignee(self, user_id: int | None, context: TenantContext) -> None:
        if user_id is None:
            return
        if not self.user_repo.get_by_id_and_tenant(user_id, context.tenant_id):
            raise NotFoundException(f"User {user_id} not found")
