from typing import Optional
from sqlalchemy.orm import Session

from timekeeper.models.task import Task, TaskStatus
from timekeeper.models.timesheet import TimesheetEntry


class TaskRepository:
    """Repository for Task data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_and_tenant(self, task_id: int, tenant_id: int) -> Optional[Task]:
        """
        Get task by ID, ensuring it belongs to the tenant.

        Returns:
            Task object or None if not found or belongs to different tenant
        """
        return (
            self.db.query(Task)
            .filter(Task.id == task_id, Task.tenant_id == tenant_id)
            .first()
        )

    def get_with_filters(
        self,
        tenant_id: int,
        project_id: Optional[int] = None,
        assigned_to: Optional[int] = None,
        status: Optional[TaskStatus] = None,
    ) -> list[Task]:
        """
        Get tenant tasks with optional filters.

        Args:
            tenant_id: Tenant ID for isolation
            project_id: Optional project filter
            assigned_to: Optional assignee filter
            status: Optional status filter

        Returns:
            List of tasks ordered by due date then ID
        """
        query = self.db.query(Task).filter(Task.tenant_id == tenant_id)

        if project_id is not None:
            query = query.filter(Task.project_id == project_id)

        if assigned_to is not None:
            query = query.filter(Task.assigned_to == assigned_to)

        if status is not None:
            query = query.filter(Task.status == status)

        return query.order_by(Task.due_date.is_(None), Task.due_date, Task.id).all()

    def create_no_commit(self, task: Task) -> Task:
        """Add task and assign its ID without committing (for atomic ops)"""
        self.db.add(task)
        self.db.flush()
        return task

    def update(self, task: Task) -> Task:
        """Update a task"""
        self.db.commit()
        self.db.refresh(task)
        return task

    def delete(self, task: Task) -> None:
        """Delete a task, keeping entries logged against it with no task"""
        self.db.query(TimesheetEntry).filter(TimesheetEntry.task_id == task.id).update(
            {TimesheetEntry.task_id: None}, synchronize_session="fetch"
        )
        self.db.delete(task)
        self.db.commit()
